"""
Line-of-sight checks for ranged hostiles.

Instead of exact segment/box intersection, the ray is sampled every
SAMPLE_STEP world units and each interior sample point is tested as a 1x1 box
against the walls. Firing decisions do not need pixel-exact occlusion.
"""

import math
from typing import Sequence

import numpy as np

from arena_sim.core.geometry import Vector2
from arena_sim.world.walls import Wall

SAMPLE_STEP = 10.0


def sample_points(start: Vector2, end: Vector2) -> np.ndarray:
    """
    Interior sample points along the segment start -> end.

    Args:
        start: Ray origin.
        end: Ray target.

    Returns:
        An (n, 2) float array of x/y sample coordinates, excluding both ends.
        Empty when the segment is shorter than one sample step.
    """
    length = start.distance_to(end)
    steps = math.ceil(length / SAMPLE_STEP)
    if steps <= 1:
        return np.empty((0, 2), dtype=float)

    t = np.arange(1, steps, dtype=float) / steps
    xs = start.x + (end.x - start.x) * t
    ys = start.y + (end.y - start.y) * t
    return np.column_stack((xs, ys))


def has_line_of_sight(start: Vector2, end: Vector2, walls: Sequence[Wall]) -> bool:
    """True when no sample point between start and end falls inside a wall."""
    points = sample_points(start, end)
    if len(points) == 0 or not walls:
        return True

    xs, ys = points[:, 0], points[:, 1]
    for wall in walls:
        box = wall.box
        hit = (
            (xs < box.x + box.width)
            & (xs + 1 > box.x)
            & (ys < box.y + box.height)
            & (ys + 1 > box.y)
        )
        if hit.any():
            return False
    return True
