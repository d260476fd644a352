"""
Frame loop driving a World: compute delta time, update, render, reschedule.
"""

import logging
import time
from typing import Callable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from arena_sim.input.handler import InputSource
    from arena_sim.world.world import World

logger = logging.getLogger(__name__)

RenderCallback = Callable[["World"], None]


class Engine:
    """Owns the World and runs it at a fixed simulation cadence.

    Real elapsed time is accumulated and consumed in fixed steps of
    1 / target_fps, so the simulation advances the same way regardless of
    how fast frames are rendered. Rendering happens once per frame.
    """

    def __init__(
        self,
        world: "World",
        render: Optional[RenderCallback] = None,
        controls: Optional["InputSource"] = None,
        poll: Optional[Callable[[], None]] = None,
        clock: Callable[[], float] = time.perf_counter,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.world = world
        self.render = render
        self.controls = controls
        self.poll = poll
        self.clock = clock
        self.sleep = sleep

        self.running = False
        self.accumulator = 0.0
        self.fixed_timestep = 1.0 / world.config.target_fps
        self.max_frameskip = world.config.max_frameskip
        self.last_time: Optional[float] = None
        self.frame_count = 0

    def step(self, dt: Optional[float] = None):
        """Run exactly one simulation tick (fixed timestep by default) and render."""
        if self.poll is not None:
            self.poll()
        self.world.update(self.fixed_timestep if dt is None else dt, self.controls)
        self._render()

    def frame(self):
        """One display frame: consume elapsed time in fixed ticks, then render."""
        now = self.clock()
        if self.last_time is None:
            self.last_time = now
        self.accumulator += now - self.last_time
        self.last_time = now

        ticks = 0
        while self.accumulator >= self.fixed_timestep and ticks < self.max_frameskip:
            if self.poll is not None:
                self.poll()
            self.world.update(self.fixed_timestep, self.controls)
            self.accumulator -= self.fixed_timestep
            ticks += 1

        if ticks == self.max_frameskip:
            # Too far behind; drop the backlog rather than spiral
            self.accumulator = 0.0

        self._render()
        self.frame_count += 1

    def _render(self):
        if self.render is not None:
            self.render(self.world)

    def run(self, max_frames: Optional[int] = None):
        """Run frames until stopped, the game ends or `max_frames` is reached."""
        self.running = True
        logger.info("Engine started at %d fps", self.world.config.target_fps)
        frames = 0
        while self.running:
            start = self.clock()
            self.frame()
            frames += 1

            if self.world.game_over:
                self.stop()
            elif max_frames is not None and frames >= max_frames:
                self.stop()
            else:
                self.throttle_framerate(start)
        logger.info("Engine stopped after %d frames", frames)

    def throttle_framerate(self, frame_start: float):
        elapsed = self.clock() - frame_start
        remaining = self.fixed_timestep - elapsed
        if remaining > 0:
            self.sleep(remaining)

    def stop(self):
        """Halt scheduling. Timed events already queued stay queued."""
        self.running = False

    def pause(self):
        self.world.paused = True

    def resume(self):
        """Continue from the next frame without replaying the paused time."""
        self.world.paused = False
        self.last_time = None
        self.accumulator = 0.0
