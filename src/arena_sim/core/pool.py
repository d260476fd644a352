"""
Object pool for short-lived simulation objects (projectiles).
"""

from typing import Callable, Generic, List, TypeVar

T = TypeVar("T")


class EntityPool(Generic[T]):
    """Recycles instances instead of allocating new ones every frame.

    Instances come back from ``acquire`` with whatever values their previous
    lease left behind; the caller must overwrite every field it relies on
    before marking the instance active. The pool only ever grows, so the
    number of allocations is bounded by the peak number of instances that
    were live at the same time.
    """

    __slots__ = ["factory", "free", "allocated"]

    def __init__(self, factory: Callable[[], T]):
        self.factory = factory
        self.free: List[T] = []
        self.allocated = 0

    def acquire(self) -> T:
        """Take a recycled instance, or build a new one if none are free."""
        if self.free:
            return self.free.pop()
        self.allocated += 1
        return self.factory()

    def release(self, item: T):
        """Mark an instance inactive and return it to the free list."""
        if not item.active and any(free is item for free in self.free):
            return
        item.active = False
        self.free.append(item)

    @property
    def free_count(self) -> int:
        return len(self.free)
