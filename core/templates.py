"""
Sequence templates.

A template is a list of sections that gets copied into new sequences. Every
copy re-issues IDs so two sequences built from one template never share node
identity.
"""
from dataclasses import replace
from typing import Optional, Tuple

from core.models import GroupBlock, PoseStep, Section, Sequence, Item, new_id


def item_with_new_ids(item: Item) -> Item:
    """
    Copy an item, giving it and every nested node a fresh ID.

    Nested group items, round override items and substitute items are all
    re-issued.
    """
    if isinstance(item, PoseStep):
        return replace(item, id=new_id())
    if isinstance(item, GroupBlock):
        return replace(
            item,
            id=new_id(),
            items=tuple(item_with_new_ids(i) for i in item.items),
            round_overrides=tuple(
                replace(o, items=tuple(item_with_new_ids(i) for i in o.items))
                for o in item.round_overrides
            ),
            item_substitutes=tuple(
                replace(s, substitute_item=item_with_new_ids(s.substitute_item))
                for s in item.item_substitutes
            ),
        )
    raise TypeError(f"Not a sequence item: {type(item).__name__}")


def sections_with_new_ids(sections: Tuple[Section, ...]) -> Tuple[Section, ...]:
    """Copy template sections with fresh IDs throughout."""
    return tuple(
        replace(
            section,
            id=new_id(),
            items=tuple(item_with_new_ids(i) for i in section.items),
        )
        for section in sections
    )


def sequence_from_template(name: str, template: Tuple[Section, ...],
                           sequence_id: Optional[str] = None) -> Sequence:
    """
    Create a new sequence from template sections.

    Args:
        name: Name for the new sequence
        template: Template sections (not modified)
        sequence_id: ID for the new sequence (a fresh ID if None)

    Returns:
        New Sequence with fresh node IDs
    """
    return Sequence(
        id=sequence_id or new_id(),
        name=name,
        sections=sections_with_new_ids(template),
    )
