"""
Configuration settings for the arena simulation.
"""

import logging
import os
from typing import Any, Dict, Optional

import toml
from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class GameConfig(BaseModel):
    """Tunable settings for one game variant."""

    # Game Metadata
    game_title: str = "Arena Sim"
    version: str = "0.1.0"

    # Play field (world units)
    field_width: float = 1280.0
    field_height: float = 720.0

    # Performance settings
    target_fps: int = 60
    max_frameskip: int = 5

    # Randomness; None seeds from the OS
    seed: Optional[int] = None

    # Player
    player_size: float = 50.0
    player_speed: float = 3.0
    player_max_health: float = 200.0
    player_fire_cooldown: float = 0.3  # seconds between shots
    player_projectile_speed: float = 10.0
    player_projectile_damage: float = 25.0
    projectile_size: float = 10.0
    projectile_max_distance: float = 500.0

    # Walls
    wall_count: int = 5
    wall_size: float = 100.0
    wall_spawn_margin: float = 100.0  # clearance around the player's start

    # Waves
    wave_delay: float = 3.0  # seconds between a completed wave and the next
    spawn_interval: float = 1.0  # seconds between hostiles within a wave; 0 = burst
    enemies_per_wave: int = 5
    enemies_per_wave_increment: int = 2
    safe_radius: float = 250.0
    max_spawn_attempts: int = 10
    wave_bonus_gold: int = 25
    wave_bonus_score: int = 50

    # Hostile AI
    ai_jitter: float = 0.1  # radians
    standoff_repulsion: float = 1.5  # multiple of base speed
    contact_damage_scale: float = 0.2  # share of a hostile's damage dealt per tick of contact

    # Trader
    trader_interval: float = 30.0
    trader_min_lifetime: float = 15.0
    trader_max_lifetime: float = 30.0
    trader_size: float = 60.0
    trader_price: int = 100

    # Pickups
    pickup_drop_chance: float = 0.1
    pickup_size: float = 20.0
    pickup_heal: float = 50.0
    speed_buff_multiplier: float = 1.5
    speed_buff_duration: float = 5.0

    # Upgrades
    upgrade_base_cost: Dict[str, int] = {
        "speed": 50,
        "damage": 75,
        "health": 60,
        "fire_rate": 80,
    }
    speed_per_level: float = 0.5
    damage_per_level: float = 5.0
    health_per_level: float = 20.0
    fire_rate_per_level: float = 0.9  # cooldown multiplier per level

    # Starting resources for a brand new save
    starting_gold: int = 0

    # Paths
    save_dir: str = "saves"
    paths: Dict[str, str] = {}

    # Controls
    controls: Dict[str, Any] = {
        "up": ["ArrowUp", "w"],
        "down": ["ArrowDown", "s"],
        "left": ["ArrowLeft", "a"],
        "right": ["ArrowRight", "d"],
    }

    model_config = ConfigDict(extra="allow")

    @property
    def frame_duration(self) -> float:
        return 1.0 / self.target_fps

    @classmethod
    def load_from_toml(cls, path: str = "config.toml") -> "GameConfig":
        """Load configuration from a TOML file."""
        if not os.path.exists(path):
            logger.warning("Config file %s not found. Using defaults.", path)
            return cls()

        try:
            with open(path, "r") as f:
                data = toml.load(f)

            # Flatten game settings for Pydantic
            game_settings = data.get("game", {})
            config = cls(**game_settings)

            # Attach complex structures
            if "paths" in data:
                config.paths = data["paths"]
            if "controls" in data:
                config.controls = {**config.controls, **data["controls"]}

            return config
        except Exception as e:
            logger.error("Error loading config %s: %s", path, e)
            return cls()
