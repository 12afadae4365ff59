"""
Tick loop for headless playback.

The DearPyGui player ticks the controller once per rendered frame; this loop
does the same job from the terminal by sleeping between ticks.
"""
import time
from typing import Callable, Optional

from core.constants import TICK_INTERVAL
from playback.controller import PlaybackController, PlaybackState


class PlaybackLoop:
    """
    Calls controller.tick() every tick_interval seconds while playing.

    The tick period only sets how often progress is sampled. Elapsed time
    comes from the controller's clock, so a slow or late tick never changes
    where playback ends up.
    """

    def __init__(self, controller: PlaybackController, tick_interval: float = TICK_INTERVAL,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Args:
            controller: Controller to drive
            tick_interval: Seconds between ticks
            sleep: Sleep function (injectable for tests)
        """
        if tick_interval <= 0:
            raise ValueError(f"Tick interval must be positive, got {tick_interval}")
        self.controller = controller
        self.tick_interval = tick_interval
        self._sleep = sleep
        self._running = False
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._running

    def run(self, max_ticks: Optional[int] = None) -> PlaybackState:
        """
        Play until the controller leaves PLAYING, stop() is called or
        max_ticks ticks have run.

        Returns:
            Controller state when the loop exits
        """
        self.controller.play()
        self._running = True
        self.ticks = 0
        print(f"[PLAYBACK] Started ({self.controller.total}s at {self.controller.speed}x)")

        while self._running and self.controller.state == PlaybackState.PLAYING:
            if max_ticks is not None and self.ticks >= max_ticks:
                break
            self._sleep(self.tick_interval)
            if not self._running:
                break
            self.controller.tick()
            self.ticks += 1

        self._running = False
        state = self.controller.state
        print(f"[PLAYBACK] Stopped: {state.value} at {self.controller.elapsed:.1f}s")
        return state

    def stop(self):
        """Exit the loop before the next tick."""
        self._running = False
