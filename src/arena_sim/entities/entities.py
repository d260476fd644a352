import random
from typing import Any, Dict, List, Optional

from arena_sim.core.ecs import EntityManager
from arena_sim.data.loader import DATA_LOADER, DataLoader
from arena_sim.entities.components import (
    Body,
    Faction,
    FactionTag,
    Health,
    Hostile,
    Pickup,
    Trader,
)

PICKUP_KINDS = ("health", "speed")


def scaled_stat(stats: Dict[str, Any], name: str, wave_index: int) -> float:
    """`base + wave * step` for one stat of a stats-table entry."""
    return stats.get(name, 0) + wave_index * stats.get(f"{name}_step", 0)


class EntityFactory:
    """Factory for creating arena entities from the stats table."""

    def __init__(self, entity_manager: EntityManager, data_loader: DataLoader = DATA_LOADER):
        self.entity_manager = entity_manager
        self.data_loader = data_loader

    def hostile_size(self, hostile_type: str) -> float:
        return float(self.data_loader.get_hostile_stats(hostile_type).get("size", 40))

    def choose_hostile_type(self, rng: random.Random, wave_index: int) -> str:
        """Weighted pick among the types unlocked at this wave."""
        table = self.data_loader.get_hostile_table()
        choices: List[str] = []
        weights: List[float] = []
        for hostile_type, stats in table.items():
            if stats.get("min_wave", 1) <= wave_index:
                choices.append(hostile_type)
                weights.append(stats.get("weight", 1))

        if not choices:
            # Nothing unlocked yet; fall back to the first listed type
            return next(iter(table))
        return rng.choices(choices, weights=weights, k=1)[0]

    def create_hostile(
        self, x: float, y: float, hostile_type: str = "grunt", wave_index: int = 1
    ) -> int:
        """Create a hostile with stats scaled by the wave index."""
        stats = self.data_loader.get_hostile_stats(hostile_type)
        size = float(stats.get("size", 40))
        hp = scaled_stat(stats, "health", wave_index)

        eid = self.entity_manager.create_entity()
        self.entity_manager.add_component(eid, Body(x=x, y=y, width=size, height=size))
        self.entity_manager.add_component(eid, Health(current=hp, maximum=hp))
        self.entity_manager.add_component(eid, FactionTag(Faction.HOSTILE))

        fire_cooldown: Optional[float] = stats.get("fire_cooldown")
        self.entity_manager.add_component(
            eid,
            Hostile(
                hostile_type=hostile_type,
                speed=scaled_stat(stats, "speed", wave_index),
                damage=scaled_stat(stats, "damage", wave_index),
                score_reward=int(stats.get("score_reward", 10)),
                gold_reward=int(stats.get("gold_reward", 0)),
                fire_cooldown=float(fire_cooldown) if fire_cooldown is not None else None,
                projectile_speed=float(stats.get("projectile_speed", 6)),
                standoff_radius=float(stats.get("standoff_radius", 0)),
            ),
        )
        return eid

    def create_trader(
        self, x: float, y: float, expires_at: float, size: float = 60.0, price: int = 100
    ) -> int:
        """Create a trader that disappears at `expires_at`."""
        eid = self.entity_manager.create_entity()
        self.entity_manager.add_component(eid, Body(x=x, y=y, width=size, height=size))
        self.entity_manager.add_component(eid, FactionTag(Faction.NEUTRAL))
        self.entity_manager.add_component(eid, Trader(expires_at=expires_at, price=price))
        return eid

    def create_pickup(self, x: float, y: float, kind: str, size: float = 20.0) -> int:
        """Create a power-up lying on the floor."""
        if kind not in PICKUP_KINDS:
            raise ValueError(f"Unknown pickup kind: {kind}")
        eid = self.entity_manager.create_entity()
        self.entity_manager.add_component(eid, Body(x=x, y=y, width=size, height=size))
        self.entity_manager.add_component(eid, FactionTag(Faction.NEUTRAL))
        self.entity_manager.add_component(eid, Pickup(kind=kind))
        return eid
