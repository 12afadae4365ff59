"""
Tests for the playback state machine.
"""
import pytest

from core.models import GroupBlock, PoseStep, Section, Sequence
from core.timeline import flatten_sequence
from playback.controller import PlaybackController, PlaybackState, validate_speed
from conftest import step, single_section


@pytest.fixture
def sequence(override_block):
    # A(0-5) B(5-10) C(10-13) A(13-18) B(18-23)
    return single_section(override_block)


@pytest.fixture
def controller(sequence, narrator, clock):
    return PlaybackController(sequence, narrator=narrator, clock=clock)


def play_to_end(controller, clock, tick, max_ticks=100000):
    controller.play()
    ticks = 0
    while controller.state == PlaybackState.PLAYING:
        clock.advance(tick)
        controller.tick()
        ticks += 1
        assert ticks < max_ticks
    return ticks


class TestPlay:
    def test_starts_idle(self, controller):
        snapshot = controller.snapshot()
        assert snapshot.state == PlaybackState.IDLE
        assert snapshot.elapsed == 0.0
        assert snapshot.active_interval_id is None
        assert snapshot.total == 23

    def test_first_interval_narrated_before_time_advances(self, controller, narrator):
        controller.play()
        assert controller.state == PlaybackState.PLAYING
        assert narrator.ids == ["A-round-1"]
        assert controller.active_interval.id == "A-round-1"

    def test_play_while_playing_is_noop(self, controller, narrator):
        controller.play()
        controller.play()
        assert narrator.ids == ["A-round-1"]

    def test_tick_advances_by_wall_clock(self, controller, clock):
        controller.play()
        clock.advance(2)
        controller.tick()
        snapshot = controller.snapshot()
        assert snapshot.elapsed == pytest.approx(2.0)
        assert snapshot.active_remaining == pytest.approx(3.0)
        assert snapshot.progress_fraction == pytest.approx(2 / 23)

    def test_tick_outside_playing_is_noop(self, controller, clock, narrator):
        clock.advance(5)
        controller.tick()
        assert controller.state == PlaybackState.IDLE
        assert controller.elapsed == 0.0
        assert narrator.announced == []

    def test_interval_narrated_on_entry(self, controller, clock, narrator):
        controller.play()
        clock.advance(4.9)
        controller.tick()
        assert narrator.ids == ["A-round-1"]
        clock.advance(0.2)
        controller.tick()
        assert narrator.ids == ["A-round-1", "B-round-1"]

    def test_cancel_before_every_announcement(self, controller, clock, narrator):
        play_to_end(controller, clock, 0.5)
        for n, call in enumerate(narrator.calls):
            if call[0] == "announce":
                assert narrator.calls[n - 1] == ("cancel", None)

    def test_narration_text_from_library(self, narrator, clock, morning_flow, library):
        controller = PlaybackController(morning_flow, narrator=narrator, library=library, clock=clock)
        controller.play()
        assert narrator.announced == [("Mountain Pose", "pose-instance-1")]

    def test_narration_text_without_library(self, controller, narrator):
        controller.play()
        assert narrator.announced[0][0] == "var-A"


class TestNarrationOnce:
    @pytest.mark.parametrize("tick", [0.05, 0.1, 0.7, 4, 12, 60])
    @pytest.mark.parametrize("speed", [0.5, 1.0, 2.5, 3.0])
    def test_every_interval_narrated_once_in_order(self, sequence, narrator, clock, tick, speed):
        controller = PlaybackController(sequence, narrator=narrator, clock=clock, speed=speed)
        play_to_end(controller, clock, tick)
        expected = [i.id for i in flatten_sequence(sequence)]
        assert narrator.ids == expected

    @pytest.mark.parametrize("tick", [0.1, 1, 100])
    def test_morning_flow(self, morning_flow, narrator, clock, tick):
        controller = PlaybackController(morning_flow, narrator=narrator, clock=clock, speed=3.0)
        play_to_end(controller, clock, tick)
        ids = narrator.ids
        assert len(ids) == 10
        assert len(set(ids)) == 10
        assert ids == [i.id for i in controller.timeline]

    @pytest.mark.parametrize("tick", [0.5, 3])
    def test_zero_length_intervals_still_narrated(self, narrator, clock, tick):
        sequence = single_section(step("Z0", 0), step("A", 2), step("Z1", 0), step("B", 2), step("Z2", 0))
        controller = PlaybackController(sequence, narrator=narrator, clock=clock)
        play_to_end(controller, clock, tick)
        assert narrator.ids == ["Z0", "A", "Z1", "B", "Z2"]

    def test_speed_change_mid_playback(self, sequence, narrator, clock):
        controller = PlaybackController(sequence, narrator=narrator, clock=clock)
        controller.play()
        for speed in (2.0, 0.5, 3.0, 1.5):
            clock.advance(1.3)
            controller.tick()
            controller.set_speed(speed)
        play_to_end(controller, clock, 0.4)
        assert narrator.ids == [i.id for i in controller.timeline]


class TestFinish:
    def test_finishes_at_total(self, controller, clock):
        play_to_end(controller, clock, 10)
        snapshot = controller.snapshot()
        assert snapshot.state == PlaybackState.FINISHED
        assert snapshot.elapsed == 23.0
        assert snapshot.active_interval_id is None
        assert snapshot.progress_fraction == 1.0

    def test_play_and_tick_after_finish_are_noops(self, controller, clock, narrator):
        play_to_end(controller, clock, 30)
        count = len(narrator.announced)
        controller.play()
        clock.advance(5)
        controller.tick()
        assert controller.state == PlaybackState.FINISHED
        assert len(narrator.announced) == count

    def test_empty_sequence_finishes_without_narration(self, narrator, clock):
        controller = PlaybackController(Sequence(id="q", name="Empty"), narrator=narrator, clock=clock)
        controller.play()
        assert controller.state == PlaybackState.FINISHED
        assert controller.snapshot().progress_fraction == 1.0
        assert narrator.announced == []

    def test_all_empty_sections(self, narrator, clock):
        sequence = Sequence(id="q", name="Empty", sections=(Section(id="a", name="A"),))
        controller = PlaybackController(sequence, narrator=narrator, clock=clock)
        controller.play()
        assert controller.state == PlaybackState.FINISHED

    def test_all_zero_length_steps(self, narrator, clock):
        controller = PlaybackController(single_section(step("Z1", 0), step("Z2", 0)),
                                        narrator=narrator, clock=clock)
        controller.play()
        assert controller.state == PlaybackState.FINISHED
        assert narrator.ids == ["Z1", "Z2"]


class TestPauseResume:
    def test_pause_freezes_elapsed(self, controller, clock, narrator):
        controller.play()
        clock.advance(3)
        controller.pause()
        assert controller.state == PlaybackState.PAUSED
        assert controller.elapsed == pytest.approx(3.0)

        clock.advance(100)
        controller.tick()
        assert controller.elapsed == pytest.approx(3.0)

        controller.play()
        assert narrator.ids == ["A-round-1"]
        clock.advance(2.5)
        controller.tick()
        assert controller.elapsed == pytest.approx(5.5)
        assert narrator.ids == ["A-round-1", "B-round-1"]

    def test_pause_when_not_playing_is_noop(self, controller):
        controller.pause()
        assert controller.state == PlaybackState.IDLE

    def test_toggle(self, controller):
        controller.toggle()
        assert controller.is_playing
        controller.toggle()
        assert controller.state == PlaybackState.PAUSED


class TestReset:
    def test_reset_returns_to_idle(self, controller, clock, narrator):
        controller.set_speed(2.0)
        controller.play()
        clock.advance(4)
        controller.tick()
        controller.reset()

        snapshot = controller.snapshot()
        assert snapshot.state == PlaybackState.IDLE
        assert snapshot.elapsed == 0.0
        assert snapshot.active_interval_id is None
        assert snapshot.speed == 2.0
        assert narrator.calls[-1] == ("cancel", None)

    def test_reset_clears_narration_history(self, controller, narrator):
        controller.play()
        controller.reset()
        controller.play()
        assert narrator.ids == ["A-round-1", "A-round-1"]

    def test_reset_after_finish(self, controller, clock):
        play_to_end(controller, clock, 50)
        controller.reset()
        controller.play()
        assert controller.state == PlaybackState.PLAYING


class TestSpeed:
    @pytest.mark.parametrize("speed", [0.0, 0.75, 4.0, -1.0])
    def test_unsupported_speed(self, controller, speed):
        with pytest.raises(ValueError):
            controller.set_speed(speed)
        assert controller.speed == 1.0

    def test_unsupported_initial_speed(self, sequence):
        with pytest.raises(ValueError):
            PlaybackController(sequence, speed=5.0)

    def test_validate_speed_accepts_int(self):
        assert validate_speed(2) == 2.0

    def test_speed_scales_elapsed(self, controller, clock):
        controller.set_speed(2.0)
        controller.play()
        clock.advance(1)
        controller.tick()
        assert controller.elapsed == pytest.approx(2.0)

    def test_speed_change_has_no_discontinuity(self, controller, clock):
        controller.play()
        clock.advance(1)
        controller.set_speed(3.0)
        assert controller.elapsed == pytest.approx(1.0)
        clock.advance(1)
        controller.tick()
        assert controller.elapsed == pytest.approx(4.0)

    def test_speed_change_while_paused(self, controller, clock):
        controller.play()
        clock.advance(1)
        controller.pause()
        controller.set_speed(0.5)
        assert controller.state == PlaybackState.PAUSED
        controller.play()
        clock.advance(2)
        controller.tick()
        assert controller.elapsed == pytest.approx(2.0)


class TestSeek:
    def test_seek_from_idle_pauses(self, controller, narrator):
        controller.seek(14)
        assert controller.state == PlaybackState.PAUSED
        assert controller.active_interval.id == "A-round-2"
        assert narrator.announced == []
        controller.play()
        assert narrator.ids == ["A-round-2"]

    def test_seek_within_narrated_interval_does_not_renarrate(self, controller, clock, narrator):
        controller.play()
        clock.advance(1)
        controller.tick()
        controller.pause()
        controller.seek(3)
        controller.play()
        assert narrator.ids == ["A-round-1"]

    def test_seek_while_playing_narrates_immediately(self, controller, clock, narrator):
        controller.play()
        clock.advance(1)
        controller.tick()
        controller.seek(11)
        assert controller.state == PlaybackState.PLAYING
        assert narrator.ids == ["A-round-1", "C-override-round-1-set-1"]

    def test_seek_back_renarrates_different_interval(self, controller, clock, narrator):
        controller.play()
        controller.seek(11)
        controller.seek(1)
        assert narrator.ids == ["A-round-1", "C-override-round-1-set-1", "A-round-1"]

    def test_seek_while_playing_keeps_clock(self, controller, clock):
        controller.play()
        clock.advance(1)
        controller.tick()
        controller.seek(6)
        clock.advance(1)
        controller.tick()
        assert controller.elapsed == pytest.approx(7.0)

    def test_seek_clamps(self, controller):
        controller.seek(-10)
        assert controller.elapsed == 0.0
        controller.seek(1000)
        assert controller.elapsed == 23.0
        assert controller.active_interval is None

    def test_seek_to_end_then_play_finishes(self, controller, narrator):
        controller.seek(23)
        controller.play()
        assert controller.state == PlaybackState.FINISHED
        assert narrator.announced == []

    def test_seek_after_finish(self, controller, clock, narrator):
        play_to_end(controller, clock, 30)
        controller.seek(14)
        assert controller.state == PlaybackState.PAUSED
        controller.play()
        assert narrator.ids[-1] == "A-round-2"
        assert narrator.ids.count("A-round-2") == 2

    def test_seek_into_last_narrated_interval_after_finish(self, controller, clock, narrator):
        play_to_end(controller, clock, 30)
        controller.seek(19)
        controller.play()
        assert narrator.ids.count("B-round-2") == 1

    def test_continue_after_seek_narrates_following_intervals(self, controller, clock, narrator):
        controller.seek(12)
        play_to_end(controller, clock, 0.5)
        assert narrator.ids == ["C-override-round-1-set-1", "A-round-2", "B-round-2"]


class TestLoad:
    def test_load_clamps_elapsed(self, controller, clock):
        controller.play()
        clock.advance(20)
        controller.tick()
        controller.load(single_section(step("A", 5)))
        assert controller.total == 5
        assert controller.elapsed == 5.0
        assert controller.state == PlaybackState.FINISHED

    def test_load_keeps_narrated_interval(self, controller, clock, narrator, override_block):
        controller.play()
        clock.advance(6)
        controller.tick()
        controller.pause()

        longer_b = PoseStep(id="B", pose_variation_id="var-B", duration_seconds=6)
        edited = single_section(GroupBlock(
            id=override_block.id,
            sets=override_block.sets,
            items=(override_block.items[0], longer_b),
            round_overrides=override_block.round_overrides,
        ))
        controller.load(edited)
        assert controller.total == 25
        assert controller.active_interval.id == "B-round-1"
        controller.play()
        assert narrator.ids == ["A-round-1", "B-round-1"]

    def test_load_while_idle(self, controller, morning_flow):
        controller.load(morning_flow)
        assert controller.state == PlaybackState.IDLE
        assert controller.total == 435

    def test_load_longer_sequence_after_finish(self, narrator, clock, morning_flow):
        controller = PlaybackController(single_section(step("A", 5)), narrator=narrator, clock=clock)
        play_to_end(controller, clock, 1)
        controller.load(morning_flow)
        assert controller.state == PlaybackState.PAUSED
        assert controller.elapsed == 5.0


def test_listeners_receive_snapshots(controller, clock):
    received = []
    controller.add_listener(received.append)
    controller.play()
    clock.advance(1)
    controller.tick()
    controller.pause()
    assert [s.state for s in received] == [PlaybackState.PLAYING, PlaybackState.PLAYING, PlaybackState.PAUSED]

    controller.remove_listener(received.append)
    controller.reset()
    assert len(received) == 3
