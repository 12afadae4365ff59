"""
Total durations for pose steps, group blocks, sections and sequences.

Group blocks count their base items once per round and add each in-range
round override's items (times the override's own sets). Item substitutes
are not counted: a substitute with a different length than the base item
it replaces makes the played timeline differ from this total.
"""
from core.models import PoseStep, GroupBlock, Section, Sequence


def duration_of(node) -> int:
    """
    Total seconds for any sequence node.

    Args:
        node: PoseStep, GroupBlock, Section or Sequence

    Returns:
        Duration in whole seconds

    Raises:
        TypeError: If node is not a sequence node
    """
    if isinstance(node, PoseStep):
        return node.duration_seconds
    if isinstance(node, GroupBlock):
        return group_block_duration(node)
    if isinstance(node, Section):
        return section_duration(node)
    if isinstance(node, Sequence):
        return sequence_duration(node)
    raise TypeError(f"Not a sequence node: {type(node).__name__}")


def items_duration(items) -> int:
    """Sum of durations for a list of items."""
    return sum(duration_of(item) for item in items)


def group_block_duration(block: GroupBlock) -> int:
    """
    Duration of a group block over all of its rounds.

    sets * base items, plus override items * override sets for every
    round 1..sets that has an override.
    """
    total = block.sets * items_duration(block.items)
    for round_number in range(1, block.sets + 1):
        override = block.override_for_round(round_number)
        if override is not None:
            total += items_duration(override.items) * override.sets
    return total


def section_duration(section: Section) -> int:
    """Duration of a section."""
    return items_duration(section.items)


def sequence_duration(sequence: Sequence) -> int:
    """Duration of a whole sequence."""
    return sum(section_duration(s) for s in sequence.sections)
