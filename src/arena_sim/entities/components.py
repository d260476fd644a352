"""
Component definitions for arena entities.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from arena_sim.core.ecs import Component
from arena_sim.core.geometry import AABB, Vector2


class Faction(Enum):
    """Which side an entity or projectile belongs to."""

    PLAYER = "player"
    HOSTILE = "hostile"
    NEUTRAL = "neutral"


@dataclass(slots=True)
class Body(Component):
    """Position and collision size; (x, y) is the top-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def box(self) -> AABB:
        return AABB(self.x, self.y, self.width, self.height)

    @property
    def center(self) -> Vector2:
        return Vector2(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(slots=True)
class Health(Component):
    """Health component for entities."""

    current: float
    maximum: float


@dataclass(slots=True)
class FactionTag(Component):
    """Checked once per entity per tick instead of type sniffing."""

    faction: Faction


@dataclass(slots=True)
class Hostile(Component):
    """Combat stats for a hostile, resolved from the stats table at spawn."""

    hostile_type: str = "grunt"
    speed: float = 2.0
    damage: float = 10.0
    score_reward: int = 10
    gold_reward: int = 5
    fire_cooldown: Optional[float] = None  # None = melee only
    projectile_speed: float = 6.0
    standoff_radius: float = 0.0
    last_shot_at: float = float("-inf")

    @property
    def is_ranged(self) -> bool:
        return self.fire_cooldown is not None


@dataclass(slots=True)
class Trader(Component):
    """Clickable special entity; buying from it triggers a purge."""

    expires_at: float
    price: int = 100


@dataclass(slots=True)
class Pickup(Component):
    """Power-up dropped by a defeated hostile."""

    kind: str  # "health", "speed"
