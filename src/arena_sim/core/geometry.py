"""
Vector and rectangle helpers shared by every collidable thing in the arena.
"""

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Vector2:
    """Immutable 2D point / direction."""

    x: float
    y: float

    def __add__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vector2") -> "Vector2":
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vector2":
        return Vector2(self.x * scalar, self.y * scalar)

    def length(self) -> float:
        return math.hypot(self.x, self.y)

    def normalized(self) -> "Vector2":
        length = self.length()
        if length == 0:
            return Vector2(0.0, 0.0)
        return Vector2(self.x / length, self.y / length)

    def distance_to(self, other: "Vector2") -> float:
        return (self - other).length()


@dataclass(frozen=True, slots=True)
class AABB:
    """Axis-aligned box anchored at its top-left corner."""

    x: float
    y: float
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"AABB dimensions must be positive, got {self.width}x{self.height}"
            )

    @property
    def center(self) -> Vector2:
        return Vector2(self.x + self.width / 2, self.y + self.height / 2)

    def overlaps(self, other: "AABB") -> bool:
        """Strict overlap test; boxes that only share an edge do not overlap."""
        return (
            self.x < other.x + other.width
            and self.x + self.width > other.x
            and self.y < other.y + other.height
            and self.y + self.height > other.y
        )

    def moved_to(self, x: float, y: float) -> "AABB":
        return AABB(x, y, self.width, self.height)

    def contains_point(self, point: Vector2) -> bool:
        return (
            self.x <= point.x < self.x + self.width
            and self.y <= point.y < self.y + self.height
        )


def overlaps(a: AABB, b: AABB) -> bool:
    """Symmetric AABB overlap test."""
    return a.overlaps(b)


def distance(a: Vector2, b: Vector2) -> float:
    return a.distance_to(b)


def direction(start: Vector2, end: Vector2) -> Vector2:
    """Unit vector from start towards end (zero vector when they coincide)."""
    return (end - start).normalized()


def centered_box(center: Vector2, width: float, height: float) -> AABB:
    return AABB(center.x - width / 2, center.y - height / 2, width, height)
