"""
Tests for the plain-text sequence export.
"""
import pytest

from core.export import LINE_WIDTH, export_filename, export_sequence_text, step_name, write_export
from core.models import GroupBlock, ItemSubstitute, PoseStep, RoundOverride, Section, Sequence
from conftest import step


def test_morning_flow_outline(morning_flow, library):
    lines = export_sequence_text(morning_flow, library).splitlines()

    assert lines[0].startswith("Morning Flow")
    assert lines[0].endswith("07:15")
    assert len(lines[0]) == LINE_WIDTH
    assert lines[1] == "=" * LINE_WIDTH

    text = "\n".join(lines)
    assert "Warm Up" in text
    assert "Group: 3 sets" in text
    assert "    Round 3 Ending:" in text
    assert "      Downward Dog (with Bent Knees)" in text
    assert lines[-1].startswith("  Warrior I (with Arms Extended)")
    assert lines[-1].endswith("01:00")


def test_section_and_group_durations(morning_flow, library):
    lines = export_sequence_text(morning_flow, library).splitlines()
    warm_up = next(line for line in lines if line.startswith("Warm Up"))
    group = next(line for line in lines if "Group: 3 sets" in line)
    assert warm_up.endswith("05:15")
    assert group.endswith("04:45")


def test_substitutes_and_override_sets():
    block = GroupBlock(
        id="g", sets=2, items=(step("A", 5), step("B", 5)),
        round_overrides=(RoundOverride(round=1, items=(step("C", 3),), sets=2),),
        item_substitutes=(ItemSubstitute(round=2, item_index=0, substitute_item=step("D", 7)),),
    )
    sequence = Sequence(id="q", name="Test", sections=(Section(id="s", name="Main", items=(block,)),))
    lines = export_sequence_text(sequence).splitlines()
    body = [line.rstrip() for line in lines[4:]]
    assert body[0].startswith("  Group: 2 sets")
    assert body[1].startswith("    var-A")
    assert body[2].startswith("      Round 2: var-D")
    assert body[3].startswith("    var-B")
    assert body[4] == "    Round 1 Ending (2 sets):"
    assert body[5].startswith("      var-C")


def test_empty_section():
    sequence = Sequence(id="q", name="Empty", sections=(Section(id="s", name="Nothing"),))
    assert "  (empty section)" in export_sequence_text(sequence).splitlines()


def test_step_name(library):
    assert step_name(PoseStep(id="p", pose_variation_id="var-3"), library) == "Warrior I"
    assert step_name(PoseStep(id="p", pose_variation_id="var-3b"), library) == "Warrior I (with Arms Extended)"
    assert step_name(PoseStep(id="p", pose_variation_id="gone"), library) == "Unknown"
    assert step_name(PoseStep(id="p", pose_variation_id="var-3"), None) == "var-3"


def test_long_names_keep_duration_separate():
    sequence = Sequence(id="q", name="A" * 70)
    first = export_sequence_text(sequence).splitlines()[0]
    assert first == "A" * 70 + " 00:00"


def test_export_filename(morning_flow):
    assert export_filename(morning_flow) == "morning_flow.txt"


def test_write_export_into_directory(tmp_path, morning_flow, library):
    path = write_export(morning_flow, tmp_path, library)
    assert path == tmp_path / "morning_flow.txt"
    assert path.read_text(encoding="utf-8") == export_sequence_text(morning_flow, library)


def test_write_export_failure(tmp_path, morning_flow):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(IOError):
        write_export(morning_flow, blocker / "out.txt")
