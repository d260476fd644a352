"""
Spawning system for hostile waves and special entities.
"""

import logging
from typing import TYPE_CHECKING, Optional, Tuple

from arena_sim.core.geometry import AABB
from arena_sim.entities.components import Trader

if TYPE_CHECKING:
    from arena_sim.world.world import World

logger = logging.getLogger(__name__)


class Spawner:
    """Wave spawner plus the independent trader spawner."""

    def __init__(self, world: "World"):
        self.world = world
        self.last_trader_spawn = 0.0

    def tick(self):
        self._tick_waves()
        self._tick_trader()

    # --- Waves -----------------------------------------------------------------

    def _tick_waves(self):
        world = self.world
        wave = world.wave
        config = world.config

        if not wave.in_progress and world.now - wave.last_wave_end >= config.wave_delay:
            self.start_wave()

        if not wave.in_progress or wave.remaining_to_spawn <= 0:
            return

        if config.spawn_interval <= 0:
            # Burst: place the whole remaining batch this tick
            while wave.remaining_to_spawn > 0:
                if self.spawn_hostile() is None:
                    break
            return

        if world.now - wave.last_spawn_at >= config.spawn_interval:
            self.spawn_hostile()

    def start_wave(self):
        wave = self.world.wave
        wave.index += 1
        wave.remaining_to_spawn = wave.enemies_per_wave
        wave.in_progress = True
        wave.last_spawn_at = float("-inf")
        logger.info("Wave %d started: %d hostiles", wave.index, wave.remaining_to_spawn)

    def spawn_hostile(self) -> Optional[int]:
        """Place one hostile for the current wave.

        Returns the new entity id, or None if no valid position was found
        within max_spawn_attempts (the spawn is retried on a later tick).
        """
        world = self.world
        wave = world.wave
        hostile_type = world.factory.choose_hostile_type(world.rng, wave.index)
        size = world.factory.hostile_size(hostile_type)

        position = self.find_spawn_position(size)
        if position is None:
            logger.debug("No valid spawn position for %s this tick", hostile_type)
            return None

        eid = world.factory.create_hostile(position[0], position[1], hostile_type, wave.index)
        wave.remaining_to_spawn -= 1
        wave.last_spawn_at = world.now
        return eid

    def find_spawn_position(self, size: float) -> Optional[Tuple[float, float]]:
        """Random spot inside the field, clear of walls and the player's safe zone."""
        world = self.world
        config = world.config
        player_center = world.player.center
        max_x = max(config.field_width - size, 0.0)
        max_y = max(config.field_height - size, 0.0)

        for _ in range(config.max_spawn_attempts):
            x = world.rng.uniform(0, max_x)
            y = world.rng.uniform(0, max_y)
            box = AABB(x, y, size, size)
            if box.center.distance_to(player_center) < config.safe_radius:
                continue
            if world.overlaps_wall(box):
                continue
            return x, y
        return None

    # --- Trader ----------------------------------------------------------------

    def _tick_trader(self):
        world = self.world
        config = world.config
        em = world.entity_manager

        for eid in world.traders():
            if em.get_component(eid, Trader).expires_at <= world.now:
                em.destroy_entity(eid)

        if world.now - self.last_trader_spawn < config.trader_interval:
            return
        if world.traders():
            return

        self.last_trader_spawn = world.now
        size = config.trader_size
        position = self.find_spawn_position(size)
        if position is None:
            return

        lifetime = world.rng.uniform(config.trader_min_lifetime, config.trader_max_lifetime)
        world.factory.create_trader(
            position[0],
            position[1],
            expires_at=world.now + lifetime,
            size=size,
            price=config.trader_price,
        )
        logger.info("Trader appeared at (%.0f, %.0f)", position[0], position[1])
