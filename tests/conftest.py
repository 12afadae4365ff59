"""
Shared fixtures for Yogaflow tests.
"""
import pytest

from core.models import GroupBlock, ItemSubstitute, PoseStep, RoundOverride, Section, Sequence
from core.sample_data import create_morning_flow, create_sample_library
from playback.narration import Narrator


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class RecordingNarrator(Narrator):
    """Narrator that records every call."""

    def __init__(self):
        self.announced = []
        self.calls = []

    def announce(self, text, step_id):
        self.announced.append((text, step_id))
        self.calls.append(("announce", step_id))

    def cancel(self):
        self.calls.append(("cancel", None))

    @property
    def ids(self):
        return [step_id for _, step_id in self.announced]


def step(step_id, seconds, variation=None):
    return PoseStep(id=step_id, pose_variation_id=variation or f"var-{step_id}",
                    duration_seconds=seconds)


def single_section(*items, section_id="s1"):
    return Sequence(id="seq", name="Test", sections=(Section(id=section_id, name="Main", items=items),))


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def narrator():
    return RecordingNarrator()


@pytest.fixture
def override_block():
    """sets=2, items=[A:5, B:5], round 1 ends with C:3."""
    return GroupBlock(
        id="g",
        sets=2,
        items=(step("A", 5), step("B", 5)),
        round_overrides=(RoundOverride(round=1, items=(step("C", 3),)),),
    )


@pytest.fixture
def substitute_block(override_block):
    """override_block with D:7 replacing slot 0 in round 2."""
    return GroupBlock(
        id=override_block.id,
        sets=override_block.sets,
        items=override_block.items,
        round_overrides=override_block.round_overrides,
        item_substitutes=(ItemSubstitute(round=2, item_index=0, substitute_item=step("D", 7)),),
    )


@pytest.fixture
def morning_flow():
    return create_morning_flow()


@pytest.fixture
def library():
    return create_sample_library()
