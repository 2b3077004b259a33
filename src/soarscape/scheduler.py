"""Frame-driven scheduler for the simulation tick.

The host owns the display refresh; once per refresh it calls on_frame().
While armed, on_frame() runs the tick callback exactly once. stop() disarms
synchronously, so a tick that ends the game prevents any further tick even
within the same frame loop iteration.

Usage:
    scheduler = FrameScheduler()
    scheduler.start(machine.tick)
    while running:
        scheduler.on_frame()   # once per display refresh
"""

from typing import Callable, Optional


class FrameScheduler:
    """Runs one callback per host frame while armed."""

    def __init__(self):
        self._callback: Optional[Callable[[], None]] = None
        self.frames_run = 0

    @property
    def running(self) -> bool:
        return self._callback is not None

    def start(self, callback: Callable[[], None]) -> None:
        """Arm the scheduler with the tick callback (replaces any previous one)."""
        self._callback = callback

    def stop(self) -> None:
        """Disarm. Takes effect before the next on_frame()."""
        self._callback = None

    def on_frame(self) -> bool:
        """Host refresh hook. Returns True if a tick ran."""
        callback = self._callback
        if callback is None:
            return False
        callback()
        self.frames_run += 1
        return True

    def run_frames(self, n: int) -> int:
        """Drive up to n frames headlessly. Stops early once disarmed.

        Returns:
            Number of ticks that actually ran.
        """
        ran = 0
        for _ in range(n):
            if not self.on_frame():
                break
            ran += 1
        return ran
