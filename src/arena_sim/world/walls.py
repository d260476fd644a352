"""
Static wall layout, generated once per session.
"""

import logging
import random
from dataclasses import dataclass
from typing import List

from arena_sim.core.geometry import AABB

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Wall:
    """An immovable obstacle. Absorbs every projectile that touches it."""

    box: AABB


def generate_walls(
    rng: random.Random,
    field_width: float,
    field_height: float,
    keep_clear: AABB,
    count: int = 5,
    size: float = 100.0,
    max_attempts: int = 50,
) -> List[Wall]:
    """Scatter `count` square walls that avoid `keep_clear` and each other.

    Placement is retried up to `max_attempts` times per wall; a wall that
    cannot be placed is dropped rather than forced into an overlap.
    """
    walls: List[Wall] = []
    max_x = max(field_width - size, 0.0)
    max_y = max(field_height - size, 0.0)

    for _ in range(count):
        for _ in range(max_attempts):
            box = AABB(rng.uniform(0, max_x), rng.uniform(0, max_y), size, size)
            if box.overlaps(keep_clear):
                continue
            if any(box.overlaps(w.box) for w in walls):
                continue
            walls.append(Wall(box))
            break
        else:
            logger.debug("Could not place wall %d after %d attempts", len(walls), max_attempts)

    return walls
