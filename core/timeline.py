"""
Timeline flattening.

Expands a Sequence into contiguous, time-stamped intervals, one per pose step
played. Group blocks expand round by round: the round's base items (with that
round's substitutions applied in place), then the round's override items
repeated override.sets times.
"""
from dataclasses import dataclass
from typing import Tuple, Optional, List, Iterator

import numpy as np

from core.models import PoseStep, GroupBlock, Sequence, Item


@dataclass(frozen=True)
class TimelineInterval:
    """
    One played pose step.

    Attributes:
        id: Unique interval ID; starts with the originating step ID
        pose_step: The PoseStep played (locked flag preserved)
        section_id: ID of the section the step belongs to
        start_time: Seconds from sequence start (inclusive)
        end_time: Seconds from sequence start (exclusive)
    """
    id: str
    pose_step: PoseStep
    section_id: str
    start_time: int
    end_time: int

    @property
    def step_id(self) -> str:
        """ID of the originating pose step."""
        return self.pose_step.id

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time


class Timeline:
    """
    Ordered, contiguous intervals of a flattened sequence.

    Lookups by time use binary search over the interval end times.
    """

    def __init__(self, intervals: Tuple[TimelineInterval, ...] = ()):
        self.intervals: Tuple[TimelineInterval, ...] = tuple(intervals)
        self._starts = np.array([i.start_time for i in self.intervals], dtype=np.int64)
        self._ends = np.array([i.end_time for i in self.intervals], dtype=np.int64)
        self._index_by_id = {interval.id: n for n, interval in enumerate(self.intervals)}

    @property
    def total(self) -> int:
        """Total seconds (end of the last interval, 0 if empty)."""
        if not self.intervals:
            return 0
        return self.intervals[-1].end_time

    def index_at(self, t: float) -> Optional[int]:
        """
        Index of the interval with start_time <= t < end_time.

        Args:
            t: Elapsed seconds

        Returns:
            Interval index, or None outside [0, total) or for no match
        """
        if not self.intervals or t < 0 or t >= self.total:
            return None
        index = int(np.searchsorted(self._ends, t, side="right"))
        if index < len(self.intervals) and self._starts[index] <= t:
            return index
        return None

    def interval_at(self, t: float) -> Optional[TimelineInterval]:
        """Interval active at elapsed time t, or None."""
        index = self.index_at(t)
        if index is None:
            return None
        return self.intervals[index]

    def index_of(self, interval_id: str) -> Optional[int]:
        """Position of an interval by ID, or None."""
        return self._index_by_id.get(interval_id)

    def __len__(self) -> int:
        return len(self.intervals)

    def __iter__(self) -> Iterator[TimelineInterval]:
        return iter(self.intervals)

    def __getitem__(self, index: int) -> TimelineInterval:
        return self.intervals[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Timeline):
            return NotImplemented
        return self.intervals == other.intervals

    def __repr__(self) -> str:
        return f"Timeline({len(self.intervals)} intervals, total={self.total}s)"


def flatten_sequence(sequence: Sequence) -> Timeline:
    """
    Expand a sequence into its played timeline.

    Args:
        sequence: Sequence to flatten (not modified)

    Returns:
        Timeline starting at 0 with contiguous intervals
    """
    emitted: List[Tuple[str, PoseStep, str]] = []
    for section in sequence.sections:
        for item in section.items:
            _flatten_item(item, "", section.id, emitted)

    intervals = []
    used_ids = set()
    cursor = 0
    for base_id, step, section_id in emitted:
        interval_id = base_id
        count = 1
        while interval_id in used_ids:
            count += 1
            interval_id = f"{base_id}-{count}"
        used_ids.add(interval_id)

        end = cursor + step.duration_seconds
        intervals.append(TimelineInterval(
            id=interval_id,
            pose_step=step,
            section_id=section_id,
            start_time=cursor,
            end_time=end,
        ))
        cursor = end

    return Timeline(tuple(intervals))


def _flatten_item(item: Item, suffix: str, section_id: str,
                  emitted: List[Tuple[str, PoseStep, str]]):
    """Append (interval id, step, section id) for every step an item plays."""
    if isinstance(item, PoseStep):
        emitted.append((item.id + suffix, item, section_id))
    elif isinstance(item, GroupBlock):
        for round_number in range(1, item.sets + 1):
            round_suffix = f"{suffix}-round-{round_number}"
            for effective in item.effective_items(round_number):
                _flatten_item(effective, round_suffix, section_id, emitted)

            override = item.override_for_round(round_number)
            if override is None:
                continue
            for set_number in range(1, override.sets + 1):
                override_suffix = f"{suffix}-override-round-{round_number}-set-{set_number}"
                for override_item in override.items:
                    _flatten_item(override_item, override_suffix, section_id, emitted)
    else:
        raise TypeError(f"Not a sequence item: {type(item).__name__}")
