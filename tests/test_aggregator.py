"""
Tests for duration totals.
"""
import pytest

from core.aggregator import duration_of
from core.models import GroupBlock, RoundOverride, Section, Sequence
from conftest import step, single_section


def test_pose_step_duration():
    assert duration_of(step("A", 42)) == 42


def test_group_block_with_override(override_block):
    # 2 * (5 + 5) + 3
    assert duration_of(override_block) == 23


def test_override_sets_multiply_override_items():
    block = GroupBlock(id="g", sets=3, items=(step("A", 10),),
                       round_overrides=(RoundOverride(round=2, items=(step("B", 4),), sets=3),))
    assert duration_of(block) == 3 * 10 + 4 * 3


def test_substitutes_do_not_change_total(override_block, substitute_block):
    assert duration_of(substitute_block) == duration_of(override_block) == 23


def test_stale_override_not_counted():
    block = GroupBlock(id="g", sets=1, items=(step("A", 10),),
                       round_overrides=(RoundOverride(round=2, items=(step("B", 4),)),))
    assert duration_of(block) == 10


def test_nested_group_blocks():
    inner = GroupBlock(id="inner", sets=2, items=(step("A", 3),))
    outer = GroupBlock(id="outer", sets=3, items=(inner, step("B", 1)))
    assert duration_of(outer) == 3 * (2 * 3 + 1)


def test_empty_nodes_are_zero():
    assert duration_of(GroupBlock(id="g", sets=4)) == 0
    assert duration_of(Section(id="s", name="Empty")) == 0
    assert duration_of(Sequence(id="q", name="Empty")) == 0


def test_morning_flow_totals(morning_flow):
    warm_up, standing = morning_flow.sections
    assert duration_of(warm_up.items[1]) == 285
    assert duration_of(warm_up) == 315
    assert duration_of(standing) == 120
    assert duration_of(morning_flow) == 435


def test_sequence_sums_sections():
    sequence = single_section(step("A", 5), step("B", 7))
    assert duration_of(sequence) == 12


def test_rejects_non_nodes():
    with pytest.raises(TypeError):
        duration_of(12)
