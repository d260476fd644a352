"""
Input contract for the simulation.

The core polls input once per tick: which keys are held, where the pointer
is, and whether it is pressed. It never subscribes to events itself.
"""

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol, Set

from arena_sim.core.geometry import Vector2
from arena_sim.entities.components import Body

if TYPE_CHECKING:
    from arena_sim.world.world import World


class InputSource(Protocol):
    """What the World polls each tick."""

    pointer_down: bool

    def is_pressed(self, key: str) -> bool: ...

    def pointer_position(self) -> Vector2: ...


@dataclass
class InputSnapshot:
    """A frozen-in-time input state, filled in by whatever owns the window."""

    keys: Set[str] = field(default_factory=set)
    pointer: Vector2 = Vector2(0.0, 0.0)
    pointer_down: bool = False

    def is_pressed(self, key: str) -> bool:
        return key in self.keys

    def pointer_position(self) -> Vector2:
        return self.pointer

    def press(self, key: str):
        self.keys.add(key)

    def release(self, key: str):
        self.keys.discard(key)


class AutopilotInput:
    """Plays the game for headless runs: kites the nearest hostile and shoots it."""

    # Keep at least this far from the nearest hostile
    KEEP_AWAY = 150.0

    def __init__(self, world: "World"):
        self.world = world
        self.snapshot = InputSnapshot()

    @property
    def pointer_down(self) -> bool:
        return self.snapshot.pointer_down

    def is_pressed(self, key: str) -> bool:
        return self.snapshot.is_pressed(key)

    def pointer_position(self) -> Vector2:
        return self.snapshot.pointer_position()

    def poll(self) -> "AutopilotInput":
        """Recompute the held keys and pointer from the current World."""
        world = self.world
        snapshot = self.snapshot
        snapshot.keys.clear()
        snapshot.pointer_down = False

        target = self._nearest_hostile()
        if target is None:
            return self

        me = world.player.center
        snapshot.pointer = target
        snapshot.pointer_down = True

        if me.distance_to(target) < self.KEEP_AWAY:
            bindings = world.config.controls
            away_x = me.x - target.x
            away_y = me.y - target.y
            if abs(away_x) > 1:
                snapshot.press(bindings["right" if away_x > 0 else "left"][0])
            if abs(away_y) > 1:
                snapshot.press(bindings["down" if away_y > 0 else "up"][0])
        return self

    def _nearest_hostile(self) -> Optional[Vector2]:
        world = self.world
        me = world.player.center
        best: Optional[Vector2] = None
        best_distance = math.inf
        for eid in world.hostiles():
            center = world.entity_manager.get_component(eid, Body).center
            d = me.distance_to(center)
            if d < best_distance:
                best, best_distance = center, d
        return best
