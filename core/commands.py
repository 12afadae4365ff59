"""
Command pattern for sequence edits.

All sequence modifications go through commands so that:
- Every edit builds a replacement tree (copy-on-write along the edited path)
- Structural rules are enforced at one boundary (round ranges, stale overrides)
- The editor marks the session dirty in one place

Nodes are addressed by an item path: (section_index, item_index, ...), where
each further index descends into a GroupBlock's base items. A path of length
one addresses a section.
"""
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Optional, Tuple, Callable

from core.models import (
    EditorState,
    GroupBlock,
    ItemSubstitute,
    PoseStep,
    RoundOverride,
    Section,
    Sequence,
    Item,
    new_id,
)

ItemPath = Tuple[int, ...]


def get_node(sequence: Sequence, path: ItemPath):
    """
    Look up the Section or item at a path.

    Raises:
        ValueError: If the path is empty, out of range or descends into a pose step
    """
    if len(path) == 0:
        raise ValueError("Item path must not be empty")
    _check_index(sequence.sections, path[0], "Section")
    node = sequence.sections[path[0]]
    for index in path[1:]:
        if not isinstance(node, (Section, GroupBlock)):
            raise ValueError("Item path descends into a pose step")
        _check_index(node.items, index, "Item")
        node = node.items[index]
    return node


def update_node(sequence: Sequence, path: ItemPath, fn: Callable) -> Sequence:
    """
    Replace the node at a path with fn(node), rebuilding its ancestors.

    Args:
        sequence: Current sequence
        path: Item path of the node
        fn: Maps the old node to its replacement

    Returns:
        New sequence (the input is not modified)
    """
    if len(path) == 0:
        raise ValueError("Item path must not be empty")
    if len(path) == 1:
        return _update_section(sequence, path[0], fn)
    return _update_section(
        sequence, path[0],
        lambda section: replace(section, items=_update_in_items(section.items, path[1:], fn))
    )


def _update_section(sequence: Sequence, section_index: int, fn: Callable) -> Sequence:
    _check_index(sequence.sections, section_index, "Section")
    sections = list(sequence.sections)
    sections[section_index] = fn(sections[section_index])
    return replace(sequence, sections=tuple(sections))


def _update_in_items(items: Tuple[Item, ...], indexes: ItemPath, fn: Callable) -> Tuple[Item, ...]:
    index = indexes[0]
    _check_index(items, index, "Item")
    new_items = list(items)
    if len(indexes) == 1:
        new_items[index] = fn(items[index])
    else:
        child = items[index]
        if not isinstance(child, GroupBlock):
            raise ValueError("Item path descends into a pose step")
        new_items[index] = replace(child, items=_update_in_items(child.items, indexes[1:], fn))
    return tuple(new_items)


def _check_index(collection, index: int, label: str):
    if not 0 <= index < len(collection):
        raise ValueError(f"{label} index {index} out of range")


def _require_group(node) -> GroupBlock:
    if not isinstance(node, GroupBlock):
        raise ValueError("Path does not address a group block")
    return node


def _require_container(node):
    if not isinstance(node, (Section, GroupBlock)):
        raise ValueError("Path does not address a section or group block")
    return node


class Command(ABC):
    """Base class for all commands."""

    @abstractmethod
    def apply(self, sequence: Sequence) -> Sequence:
        """
        Build the edited sequence.

        Args:
            sequence: Current sequence

        Returns:
            Replacement sequence
        """
        raise NotImplementedError()

    def execute(self, state: EditorState) -> EditorState:
        """
        Execute command against the editor state.

        Args:
            state: Current editor state

        Returns:
            Editor state holding the edited sequence
        """
        sequence = state.get_current_sequence()
        if sequence is None:
            raise ValueError("No sequence loaded")

        state.set_current_sequence(self.apply(sequence))
        state.mark_dirty()
        return state

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable command description for UI."""
        raise NotImplementedError()


class RenameSequenceCommand(Command):
    """Command to rename the sequence."""

    def __init__(self, name: str):
        self.name = name

    def apply(self, sequence: Sequence) -> Sequence:
        if not self.name.strip():
            raise ValueError("Sequence name must not be empty")
        return replace(sequence, name=self.name.strip())

    @property
    def description(self) -> str:
        return "Rename Sequence"


class AddSectionCommand(Command):
    """Command to add an empty section."""

    def __init__(self, name: str, index: Optional[int] = None, section_id: Optional[str] = None):
        """
        Args:
            name: Section name
            index: Insert position (None appends)
            section_id: ID for the new section (a fresh ID if None)
        """
        self.name = name
        self.index = index
        self.section_id = section_id or new_id()

    def apply(self, sequence: Sequence) -> Sequence:
        if not self.name.strip():
            raise ValueError("Section name must not be empty")
        sections = list(sequence.sections)
        index = len(sections) if self.index is None else self.index
        if not 0 <= index <= len(sections):
            raise ValueError(f"Section index {index} out of range")
        sections.insert(index, Section(id=self.section_id, name=self.name.strip()))
        return replace(sequence, sections=tuple(sections))

    @property
    def description(self) -> str:
        return "Add Section"


class RenameSectionCommand(Command):
    """Command to rename a section."""

    def __init__(self, section_index: int, name: str):
        self.section_index = section_index
        self.name = name

    def apply(self, sequence: Sequence) -> Sequence:
        if not self.name.strip():
            raise ValueError("Section name must not be empty")
        return update_node(sequence, (self.section_index,),
                           lambda section: replace(section, name=self.name.strip()))

    @property
    def description(self) -> str:
        return "Rename Section"


class RemoveSectionCommand(Command):
    """Command to delete a section and everything in it."""

    def __init__(self, section_index: int):
        self.section_index = section_index

    def apply(self, sequence: Sequence) -> Sequence:
        _check_index(sequence.sections, self.section_index, "Section")
        sections = list(sequence.sections)
        sections.pop(self.section_index)
        return replace(sequence, sections=tuple(sections))

    @property
    def description(self) -> str:
        return "Delete Section"


class MoveSectionCommand(Command):
    """Command to move a section to a new position."""

    def __init__(self, section_index: int, new_index: int):
        self.section_index = section_index
        self.new_index = new_index

    def apply(self, sequence: Sequence) -> Sequence:
        _check_index(sequence.sections, self.section_index, "Section")
        _check_index(sequence.sections, self.new_index, "Section")
        sections = list(sequence.sections)
        section = sections.pop(self.section_index)
        sections.insert(self.new_index, section)
        return replace(sequence, sections=tuple(sections))

    @property
    def description(self) -> str:
        return "Move Section"


class AddItemCommand(Command):
    """Command to add a pose step or group block to a section or group block."""

    def __init__(self, parent_path: ItemPath, item: Item, index: Optional[int] = None):
        """
        Args:
            parent_path: Path of the Section or GroupBlock receiving the item
            item: PoseStep or GroupBlock to add
            index: Insert position (None appends)
        """
        if not isinstance(item, (PoseStep, GroupBlock)):
            raise ValueError(f"Not a sequence item: {type(item).__name__}")
        self.parent_path = tuple(parent_path)
        self.item = item
        self.index = index

    def apply(self, sequence: Sequence) -> Sequence:
        def add(parent):
            parent = _require_container(parent)
            items = list(parent.items)
            index = len(items) if self.index is None else self.index
            if not 0 <= index <= len(items):
                raise ValueError(f"Item index {index} out of range")
            items.insert(index, self.item)
            return replace(parent, items=tuple(items))

        return update_node(sequence, self.parent_path, add)

    @property
    def description(self) -> str:
        if isinstance(self.item, GroupBlock):
            return "Add Group Block"
        return "Add Pose"


class RemoveItemCommand(Command):
    """
    Command to delete an item.

    Substitutes in the parent block keep their item_index; one that now
    points past the end is inert during playback.
    """

    def __init__(self, path: ItemPath):
        if len(path) < 2:
            raise ValueError("Item path must address an item, not a section")
        self.path = tuple(path)

    def apply(self, sequence: Sequence) -> Sequence:
        index = self.path[-1]

        def remove(parent):
            parent = _require_container(parent)
            _check_index(parent.items, index, "Item")
            items = list(parent.items)
            items.pop(index)
            return replace(parent, items=tuple(items))

        return update_node(sequence, self.path[:-1], remove)

    @property
    def description(self) -> str:
        return "Delete Item"


class MoveItemCommand(Command):
    """Command to reorder an item within its parent."""

    def __init__(self, path: ItemPath, new_index: int):
        if len(path) < 2:
            raise ValueError("Item path must address an item, not a section")
        self.path = tuple(path)
        self.new_index = new_index

    def apply(self, sequence: Sequence) -> Sequence:
        index = self.path[-1]

        def move(parent):
            parent = _require_container(parent)
            _check_index(parent.items, index, "Item")
            _check_index(parent.items, self.new_index, "Item")
            items = list(parent.items)
            item = items.pop(index)
            items.insert(self.new_index, item)
            return replace(parent, items=tuple(items))

        return update_node(sequence, self.path[:-1], move)

    @property
    def description(self) -> str:
        return "Move Item"


class ReplaceItemCommand(Command):
    """Command to replace an item with a new value."""

    def __init__(self, path: ItemPath, item: Item):
        if len(path) < 2:
            raise ValueError("Item path must address an item, not a section")
        if not isinstance(item, (PoseStep, GroupBlock)):
            raise ValueError(f"Not a sequence item: {type(item).__name__}")
        self.path = tuple(path)
        self.item = item

    def apply(self, sequence: Sequence) -> Sequence:
        return update_node(sequence, self.path, lambda old: self.item)

    @property
    def description(self) -> str:
        return "Update Item"


class UpdatePoseStepCommand(Command):
    """Command to change a pose step's variation, duration or lock flag."""

    def __init__(self, path: ItemPath, pose_variation_id: Optional[str] = None,
                 duration_seconds: Optional[int] = None, locked: Optional[bool] = None):
        """
        Args:
            path: Path of the PoseStep
            pose_variation_id: New variation (None keeps current)
            duration_seconds: New duration (None keeps current)
            locked: New lock flag (None keeps current)
        """
        self.path = tuple(path)
        self.pose_variation_id = pose_variation_id
        self.duration_seconds = duration_seconds
        self.locked = locked

    def apply(self, sequence: Sequence) -> Sequence:
        def update(step):
            if not isinstance(step, PoseStep):
                raise ValueError("Path does not address a pose step")
            changes = {}
            if self.pose_variation_id is not None:
                changes["pose_variation_id"] = self.pose_variation_id
            if self.duration_seconds is not None:
                changes["duration_seconds"] = self.duration_seconds
            if self.locked is not None:
                changes["locked"] = self.locked
            return replace(step, **changes)

        return update_node(sequence, self.path, update)

    @property
    def description(self) -> str:
        return "Update Pose"


class SetGroupSetsCommand(Command):
    """
    Command to change how many rounds a group block plays.

    Round overrides and item substitutes for rounds beyond the new count
    are dropped.
    """

    def __init__(self, path: ItemPath, sets: int):
        self.path = tuple(path)
        self.sets = sets

    def apply(self, sequence: Sequence) -> Sequence:
        if self.sets < 1:
            raise ValueError(f"Sets must be 1 or greater, got {self.sets}")

        def set_sets(block):
            block = _require_group(block)
            return replace(
                block,
                sets=self.sets,
                round_overrides=tuple(o for o in block.round_overrides if o.round <= self.sets),
                item_substitutes=tuple(s for s in block.item_substitutes if s.round <= self.sets),
            )

        return update_node(sequence, self.path, set_sets)

    @property
    def description(self) -> str:
        return "Change Sets"


class AddRoundOverrideCommand(Command):
    """Command to add an extra ending to one round of a group block."""

    def __init__(self, path: ItemPath, override: RoundOverride):
        self.path = tuple(path)
        self.override = override

    def apply(self, sequence: Sequence) -> Sequence:
        def add(block):
            block = _require_group(block)
            if self.override.round > block.sets:
                raise ValueError(
                    f"Round {self.override.round} out of range (block has {block.sets} sets)"
                )
            if any(o.round == self.override.round for o in block.round_overrides):
                raise ValueError(f"Round {self.override.round} already has an override")
            overrides = sorted(block.round_overrides + (self.override,), key=lambda o: o.round)
            return replace(block, round_overrides=tuple(overrides))

        return update_node(sequence, self.path, add)

    @property
    def description(self) -> str:
        return "Add Round Override"


class ReplaceRoundOverrideCommand(Command):
    """Command to replace an existing round override (items or sets)."""

    def __init__(self, path: ItemPath, override: RoundOverride):
        self.path = tuple(path)
        self.override = override

    def apply(self, sequence: Sequence) -> Sequence:
        def update(block):
            block = _require_group(block)
            if not any(o.round == self.override.round for o in block.round_overrides):
                raise ValueError(f"Round {self.override.round} has no override")
            overrides = tuple(
                self.override if o.round == self.override.round else o
                for o in block.round_overrides
            )
            return replace(block, round_overrides=overrides)

        return update_node(sequence, self.path, update)

    @property
    def description(self) -> str:
        return "Update Round Override"


class RemoveRoundOverrideCommand(Command):
    """Command to delete a round override."""

    def __init__(self, path: ItemPath, round_number: int):
        self.path = tuple(path)
        self.round_number = round_number

    def apply(self, sequence: Sequence) -> Sequence:
        def remove(block):
            block = _require_group(block)
            return replace(
                block,
                round_overrides=tuple(
                    o for o in block.round_overrides if o.round != self.round_number
                ),
            )

        return update_node(sequence, self.path, remove)

    @property
    def description(self) -> str:
        return "Delete Round Override"


class SetItemSubstituteCommand(Command):
    """Command to substitute one base item in one round (replaces any existing one)."""

    def __init__(self, path: ItemPath, substitute: ItemSubstitute):
        self.path = tuple(path)
        self.substitute = substitute

    def apply(self, sequence: Sequence) -> Sequence:
        substitute = self.substitute

        def set_substitute(block):
            block = _require_group(block)
            if substitute.round > block.sets:
                raise ValueError(
                    f"Round {substitute.round} out of range (block has {block.sets} sets)"
                )
            _check_index(block.items, substitute.item_index, "Item")
            kept = tuple(
                s for s in block.item_substitutes
                if (s.round, s.item_index) != (substitute.round, substitute.item_index)
            )
            ordered = sorted(kept + (substitute,), key=lambda s: (s.round, s.item_index))
            return replace(block, item_substitutes=tuple(ordered))

        return update_node(sequence, self.path, set_substitute)

    @property
    def description(self) -> str:
        return "Substitute Item"


class RemoveItemSubstituteCommand(Command):
    """Command to delete an item substitute."""

    def __init__(self, path: ItemPath, round_number: int, item_index: int):
        self.path = tuple(path)
        self.round_number = round_number
        self.item_index = item_index

    def apply(self, sequence: Sequence) -> Sequence:
        key = (self.round_number, self.item_index)

        def remove(block):
            block = _require_group(block)
            return replace(
                block,
                item_substitutes=tuple(
                    s for s in block.item_substitutes if (s.round, s.item_index) != key
                ),
            )

        return update_node(sequence, self.path, remove)

    @property
    def description(self) -> str:
        return "Delete Substitute"
