"""
Playback controller.

Drives a virtual clock over a flattened timeline. Elapsed time advances from
wall-clock deltas read on each tick, scaled by the speed multiplier, so late
or skipped ticks never cause drift. Every interval is narrated once when
playback enters it.
"""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from core.constants import SPEED_DEFAULT, SPEED_OPTIONS
from core.models import PoseLibrary, Sequence
from core.timeline import Timeline, TimelineInterval, flatten_sequence
from playback.narration import Narrator, NullNarrator, narration_text


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"
    FINISHED = "finished"


@dataclass(frozen=True)
class PlaybackSnapshot:
    """
    Progress readout for views.

    Attributes:
        state: Current playback state
        elapsed: Virtual elapsed seconds
        total: Timeline length in seconds
        progress_fraction: elapsed / total (0.0 to 1.0)
        active_interval_id: ID of the interval being played, or None
        active_remaining: Seconds left in the active interval, or None
        speed: Speed multiplier
    """
    state: PlaybackState
    elapsed: float
    total: int
    progress_fraction: float
    active_interval_id: Optional[str]
    active_remaining: Optional[float]
    speed: float


def validate_speed(speed: float) -> float:
    """Return speed if it is one of SPEED_OPTIONS, else raise ValueError."""
    if speed not in SPEED_OPTIONS:
        options = ", ".join(f"{s}x" for s in SPEED_OPTIONS)
        raise ValueError(f"Unsupported speed {speed!r} (choose from {options})")
    return float(speed)


class PlaybackController:
    """
    Playback state machine: IDLE, PLAYING, PAUSED, FINISHED.

    Single-threaded. tick() must be called periodically while playing (by
    PlaybackLoop or a UI frame callback); a tick in any other state does
    nothing.
    """

    def __init__(self, sequence: Optional[Sequence] = None,
                 narrator: Optional[Narrator] = None,
                 library: Optional[PoseLibrary] = None,
                 clock: Callable[[], float] = time.monotonic,
                 speed: float = SPEED_DEFAULT):
        """
        Args:
            sequence: Sequence to play (an empty timeline if None)
            narrator: Narration output (silent if None)
            library: Pose library used for narration text
            clock: Monotonic clock in seconds
            speed: Initial speed multiplier
        """
        self.narrator = narrator if narrator is not None else NullNarrator()
        self.library = library
        self._clock = clock
        self.speed = validate_speed(speed)

        self.timeline = flatten_sequence(sequence) if sequence is not None else Timeline()
        self.state = PlaybackState.IDLE
        self.elapsed = 0.0

        self._anchor: Optional[float] = None
        self._active_index: Optional[int] = None
        # Intervals up to and including this index need no narration
        self._narrated_index = -1
        self._last_narrated_id: Optional[str] = None
        self._listeners: List[Callable[[PlaybackSnapshot], None]] = []

    # ---- Queries ----

    @property
    def total(self) -> int:
        return self.timeline.total

    @property
    def is_playing(self) -> bool:
        return self.state == PlaybackState.PLAYING

    @property
    def active_interval(self) -> Optional[TimelineInterval]:
        if self._active_index is None:
            return None
        return self.timeline[self._active_index]

    @property
    def last_narrated_id(self) -> Optional[str]:
        return self._last_narrated_id

    def snapshot(self) -> PlaybackSnapshot:
        """Current progress readout."""
        total = self.total
        if total > 0:
            progress = min(1.0, self.elapsed / total)
        else:
            progress = 1.0 if self.state == PlaybackState.FINISHED else 0.0

        active = self.active_interval
        return PlaybackSnapshot(
            state=self.state,
            elapsed=self.elapsed,
            total=total,
            progress_fraction=progress,
            active_interval_id=active.id if active is not None else None,
            active_remaining=(active.end_time - self.elapsed) if active is not None else None,
            speed=self.speed,
        )

    def add_listener(self, listener: Callable[[PlaybackSnapshot], None]):
        """Call listener with a snapshot after every transition and tick."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[PlaybackSnapshot], None]):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ---- Transitions ----

    def play(self):
        """Start or resume playback. No-op while playing or finished."""
        if self.state in (PlaybackState.PLAYING, PlaybackState.FINISHED):
            return
        self.state = PlaybackState.PLAYING
        self._anchor = self._clock()
        self._update_active()
        self._notify()

    def pause(self):
        """Freeze elapsed time. No-op unless playing."""
        if self.state != PlaybackState.PLAYING:
            return
        self._advance()
        if self.state == PlaybackState.PLAYING:
            self.state = PlaybackState.PAUSED
            self._anchor = None
        self._notify()

    def toggle(self):
        """Pause if playing, otherwise play."""
        if self.is_playing:
            self.pause()
        else:
            self.play()

    def reset(self):
        """Return to IDLE at t=0. Speed is kept."""
        self.narrator.cancel()
        self.state = PlaybackState.IDLE
        self.elapsed = 0.0
        self._anchor = None
        self._active_index = None
        self._narrated_index = -1
        self._last_narrated_id = None
        self._notify()

    def tick(self):
        """Advance elapsed time by the wall-clock delta since the last tick."""
        if self.state != PlaybackState.PLAYING:
            return
        self._advance()
        self._notify()

    def set_speed(self, speed: float):
        """
        Change the speed multiplier without a jump in elapsed time.

        Time played so far is banked at the old speed and the clock is
        re-anchored, so the next tick runs at the new speed only.

        Raises:
            ValueError: If speed is not one of SPEED_OPTIONS
        """
        speed = validate_speed(speed)
        if self.state == PlaybackState.PLAYING:
            self._advance()
        self.speed = speed
        self._notify()

    def seek(self, t: float):
        """
        Jump to elapsed time t (clamped to [0, total]).

        Playing stays playing; any other state becomes PAUSED. The active
        interval is narrated only if it differs from the last one narrated.
        """
        self.elapsed = float(min(max(t, 0.0), self.total))
        self._reposition()
        if self.state == PlaybackState.PLAYING:
            self._anchor = self._clock()
            self._update_active()
        else:
            self.state = PlaybackState.PAUSED
        self._notify()

    def load(self, sequence: Sequence):
        """
        Replace the timeline after the sequence was edited.

        Elapsed time is kept (clamped to the new total) and the state is
        preserved where possible.
        """
        self.timeline = flatten_sequence(sequence)
        self.elapsed = float(min(self.elapsed, self.total))

        if self.state == PlaybackState.IDLE:
            self._active_index = None
            self._narrated_index = -1
        else:
            self._reposition()
            if self.state == PlaybackState.PLAYING:
                self._update_active()
            elif self.state == PlaybackState.FINISHED and self.elapsed < self.total:
                self.state = PlaybackState.PAUSED
        self._notify()

    # ---- Internals ----

    def _reposition(self):
        """Recompute the active interval after a jump in elapsed time."""
        index = self.timeline.index_at(self.elapsed)
        self._active_index = index
        if index is None:
            self._narrated_index = len(self.timeline) - 1
        elif self.timeline[index].id == self._last_narrated_id:
            self._narrated_index = index
        else:
            self._narrated_index = index - 1

    def _advance(self):
        """Add the scaled wall-clock time since the anchor and re-anchor."""
        now = self._clock()
        delta = max(0.0, now - self._anchor)
        self._anchor = now
        self.elapsed += delta * self.speed
        self._update_active()

    def _update_active(self):
        """Narrate every interval entered so far and finish at the end."""
        total = self.total
        if self.elapsed >= total:
            self.elapsed = float(total)
            self._narrate_through(len(self.timeline) - 1)
            self._active_index = None
            self._anchor = None
            self.state = PlaybackState.FINISHED
            return

        index = self.timeline.index_at(self.elapsed)
        self._active_index = index
        if index is not None:
            self._narrate_through(index)

    def _narrate_through(self, index: int):
        for n in range(self._narrated_index + 1, index + 1):
            interval = self.timeline[n]
            self.narrator.cancel()
            self.narrator.announce(narration_text(interval.pose_step, self.library), interval.id)
            self._last_narrated_id = interval.id
        self._narrated_index = max(self._narrated_index, index)

    def _notify(self):
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
