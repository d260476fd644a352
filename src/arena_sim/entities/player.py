"""
Player state and the resource ledger it carries between sessions.
"""

from typing import TYPE_CHECKING, Dict

from pydantic import BaseModel, Field, NonNegativeInt

from arena_sim.core.geometry import AABB, Vector2

if TYPE_CHECKING:
    from arena_sim.config import GameConfig

UPGRADE_KINDS = ("speed", "damage", "health", "fire_rate")


def _default_upgrades() -> Dict[str, int]:
    return {kind: 0 for kind in UPGRADE_KINDS}


class PlayerState(BaseModel):
    """The one entity that survives across sessions."""

    x: float = 0.0
    y: float = 0.0
    width: float = 50.0
    height: float = 50.0
    speed: float = 3.0
    health: float = 200.0
    max_health: float = 200.0
    score: int = 0
    last_shot_at: float = float("-inf")
    resources: Dict[str, NonNegativeInt] = Field(default_factory=lambda: {"gold": 0})
    upgrades: Dict[str, int] = Field(default_factory=_default_upgrades)
    high_score: int = 0
    best_wave: int = 0

    @classmethod
    def from_config(cls, config: "GameConfig") -> "PlayerState":
        """A fresh player centred in the play field."""
        return cls(
            x=config.field_width / 2 - config.player_size / 2,
            y=config.field_height / 2 - config.player_size / 2,
            width=config.player_size,
            height=config.player_size,
            speed=config.player_speed,
            health=config.player_max_health,
            max_health=config.player_max_health,
            resources={"gold": config.starting_gold},
        )

    @property
    def box(self) -> AABB:
        return AABB(self.x, self.y, self.width, self.height)

    @property
    def center(self) -> Vector2:
        return Vector2(self.x + self.width / 2, self.y + self.height / 2)

    @property
    def ledger(self) -> "ResourceLedger":
        return ResourceLedger(self.resources)


class ResourceLedger:
    """Counters keyed by resource name. Balances never go negative."""

    __slots__ = ["balances"]

    def __init__(self, balances: Dict[str, int]):
        self.balances = balances

    def get(self, name: str) -> int:
        return self.balances.get(name, 0)

    def grant(self, name: str, amount: int):
        if amount < 0:
            raise ValueError("Use spend() to remove resources")
        self.balances[name] = self.get(name) + amount

    def can_afford(self, name: str, amount: int) -> bool:
        return self.get(name) >= amount

    def spend(self, name: str, amount: int) -> bool:
        """Deduct `amount`; rejected (ledger unchanged) if the balance is short."""
        if amount < 0:
            raise ValueError("Cannot spend a negative amount")
        if not self.can_afford(name, amount):
            return False
        self.balances[name] = self.get(name) - amount
        return True
