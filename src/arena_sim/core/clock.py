"""
Simulation-time event queue for timed effects (buff expiry, cooldown resets).
"""

import heapq
import itertools
from typing import Callable, List, Tuple


class EventQueue:
    """Callbacks scheduled against simulation time.

    The World drains the queue once per tick at a fixed point in its update
    order, so timed effects run deterministically and can be tested without
    waiting on a real clock.
    """

    def __init__(self):
        self.now = 0.0
        # (due_time, sequence, callback); the sequence keeps FIFO order for ties
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._sequence = itertools.count()

    def schedule_action(self, callback: Callable[[], None], delay: float = 0.0):
        """Schedule an action to happen after a delay (in seconds)."""
        heapq.heappush(self._queue, (self.now + delay, next(self._sequence), callback))

    def advance(self, now: float) -> int:
        """Move the clock to `now` and run every action that is due.

        Returns the number of callbacks executed. Actions scheduled by a
        callback for the current instant run in the same drain.
        """
        self.now = now
        executed = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, callback = heapq.heappop(self._queue)
            callback()
            executed += 1
        return executed

    def pending(self) -> int:
        return len(self._queue)

    def reset(self):
        """Reset the queue."""
        self.now = 0.0
        self._queue.clear()
