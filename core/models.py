"""
Immutable data models for Yogaflow.

All models are immutable dataclasses to support:
- Copy-on-write edits (commands build a replacement tree)
- Pure, repeatable timeline flattening
- Safe sharing between the editor and the player
"""
import uuid
from dataclasses import dataclass, field
from typing import Tuple, Optional, Dict, Any, List, Iterator, Set, Union

from core.constants import (
    FILE_FORMAT_VERSION,
    ITEM_TYPE_GROUP_BLOCK,
    ITEM_TYPE_POSE_STEP,
    ITEM_TYPE_SECTION,
    DEFAULT_VARIATION_MARKER,
)
from core.durations import parse_duration, format_duration


def new_id() -> str:
    """Fresh unique ID for a new sequence node."""
    return str(uuid.uuid4())


@dataclass(frozen=True)
class Pose:
    """
    Pose from the pose library.

    Attributes:
        id: Unique pose ID
        name: Pose name (e.g., "Downward Dog")
    """
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Pose":
        """Create Pose from dictionary."""
        return cls(id=data["id"], name=data.get("name", ""))


@dataclass(frozen=True)
class PoseVariation:
    """
    Variation of a pose. Exactly one variation per pose is the default.

    Attributes:
        id: Unique variation ID
        pose_id: Reference to Pose.id
        name: Variation name
        is_default: Whether this is the pose's default variation
    """
    id: str
    pose_id: str
    name: str
    is_default: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "pose_id": self.pose_id,
            "name": self.name,
            "is_default": self.is_default,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoseVariation":
        """Create PoseVariation from dictionary."""
        return cls(
            id=data["id"],
            pose_id=data["pose_id"],
            name=data.get("name", ""),
            is_default=data.get("is_default", False),
        )


@dataclass(frozen=True)
class PoseLibrary:
    """
    Poses and their variations, used to name pose steps.

    Attributes:
        poses: Tuple of Pose objects
        variations: Tuple of PoseVariation objects
    """
    poses: Tuple[Pose, ...] = field(default_factory=tuple)
    variations: Tuple[PoseVariation, ...] = field(default_factory=tuple)

    def get_variation(self, variation_id: str) -> Optional[PoseVariation]:
        for variation in self.variations:
            if variation.id == variation_id:
                return variation
        return None

    def get_pose(self, pose_id: str) -> Optional[Pose]:
        for pose in self.poses:
            if pose.id == pose_id:
                return pose
        return None

    def variations_for_pose(self, pose_id: str) -> Tuple[PoseVariation, ...]:
        return tuple(v for v in self.variations if v.pose_id == pose_id)

    def display_name(self, variation_id: str) -> Optional[str]:
        """
        Spoken/printed name for a pose variation.

        The pose name, followed by the variation name unless the variation
        is marked "(Default)".

        Args:
            variation_id: PoseVariation.id

        Returns:
            Name text, or None if the variation or its pose is unknown
        """
        variation = self.get_variation(variation_id)
        if variation is None:
            return None
        pose = self.get_pose(variation.pose_id)
        if pose is None:
            return None
        if DEFAULT_VARIATION_MARKER in variation.name:
            return pose.name
        return f"{pose.name} {variation.name}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": FILE_FORMAT_VERSION,
            "poses": [p.to_dict() for p in self.poses],
            "variations": [v.to_dict() for v in self.variations],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoseLibrary":
        """Create PoseLibrary from dictionary."""
        return cls(
            poses=tuple(Pose.from_dict(p) for p in data.get("poses", [])),
            variations=tuple(PoseVariation.from_dict(v) for v in data.get("variations", [])),
        )


@dataclass(frozen=True)
class PoseStep:
    """
    Atomic unit of practice: one pose variation held for a duration.

    Attributes:
        id: Unique, stable step ID
        pose_variation_id: Reference to PoseVariation.id
        duration_seconds: Hold time in whole seconds
        locked: Excluded from auto-fit rebalancing; carried through flattening
    """
    ITEM_TYPE = ITEM_TYPE_POSE_STEP

    id: str
    pose_variation_id: str
    duration_seconds: int = 0
    locked: bool = False

    def __post_init__(self):
        """Validate pose step."""
        if not isinstance(self.duration_seconds, int) or isinstance(self.duration_seconds, bool):
            raise ValueError(f"Duration must be whole seconds, got {self.duration_seconds!r}")
        if self.duration_seconds < 0:
            raise ValueError(f"Duration must be non-negative, got {self.duration_seconds}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "type": self.ITEM_TYPE,
            "id": self.id,
            "pose_variation_id": self.pose_variation_id,
            "duration": format_duration(self.duration_seconds),
        }
        if self.locked:
            result["locked"] = True
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PoseStep":
        """Create PoseStep from dictionary (malformed durations load as 0)."""
        return cls(
            id=data["id"],
            pose_variation_id=data.get("pose_variation_id", ""),
            duration_seconds=parse_duration(data.get("duration", "")),
            locked=data.get("locked", False),
        )


@dataclass(frozen=True)
class RoundOverride:
    """
    Extra items appended after the base items of one round.

    Attributes:
        round: 1-based round number
        items: Tuple of PoseStep/GroupBlock appended to that round
        sets: How many times the override items repeat (default 1)
    """
    round: int
    items: Tuple["Item", ...] = field(default_factory=tuple)
    sets: int = 1

    def __post_init__(self):
        """Validate round override."""
        if self.round < 1:
            raise ValueError(f"Round must be 1 or greater, got {self.round}")
        if self.sets < 1:
            raise ValueError(f"Override sets must be 1 or greater, got {self.sets}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "round": self.round,
            "sets": self.sets,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoundOverride":
        """Create RoundOverride from dictionary."""
        return cls(
            round=data["round"],
            items=tuple(item_from_dict(i) for i in data.get("items", [])),
            sets=data.get("sets") or 1,
        )


@dataclass(frozen=True)
class ItemSubstitute:
    """
    Replacement for one base item in one round.

    Attributes:
        round: 1-based round number
        item_index: 0-based position in the owning GroupBlock's base items
        substitute_item: PoseStep/GroupBlock used instead of the base item
    """
    round: int
    item_index: int
    substitute_item: "Item"

    def __post_init__(self):
        """Validate item substitute."""
        if self.round < 1:
            raise ValueError(f"Round must be 1 or greater, got {self.round}")
        if self.item_index < 0:
            raise ValueError(f"Item index must be non-negative, got {self.item_index}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "round": self.round,
            "item_index": self.item_index,
            "substitute_item": self.substitute_item.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ItemSubstitute":
        """Create ItemSubstitute from dictionary."""
        return cls(
            round=data["round"],
            item_index=data["item_index"],
            substitute_item=item_from_dict(data["substitute_item"]),
        )


@dataclass(frozen=True)
class GroupBlock:
    """
    Repeat a sub-sequence of items `sets` times.

    Attributes:
        id: Unique, stable block ID
        sets: Number of rounds (1 or more)
        items: Base items played every round
        round_overrides: Extra items appended to specific rounds
        item_substitutes: Per-round replacements of single base items
    """
    ITEM_TYPE = ITEM_TYPE_GROUP_BLOCK

    id: str
    sets: int = 1
    items: Tuple["Item", ...] = field(default_factory=tuple)
    round_overrides: Tuple[RoundOverride, ...] = field(default_factory=tuple)
    item_substitutes: Tuple[ItemSubstitute, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate group block."""
        if self.sets < 1:
            raise ValueError(f"Sets must be 1 or greater, got {self.sets}")

    def override_for_round(self, round_number: int) -> Optional[RoundOverride]:
        """
        Get the override for a round (the first one if data holds duplicates).

        Rounds outside 1..sets have no effective override.
        """
        if not 1 <= round_number <= self.sets:
            return None
        for override in self.round_overrides:
            if override.round == round_number:
                return override
        return None

    def effective_items(self, round_number: int) -> Tuple["Item", ...]:
        """
        Base items for a round with that round's substitutions applied.

        Substitutes whose item_index is out of range are skipped.

        Args:
            round_number: 1-based round number

        Returns:
            Items in play order for the round
        """
        effective = list(self.items)
        for substitute in self.item_substitutes:
            if substitute.round != round_number:
                continue
            if 0 <= substitute.item_index < len(effective):
                effective[substitute.item_index] = substitute.substitute_item
        return tuple(effective)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.ITEM_TYPE,
            "id": self.id,
            "sets": self.sets,
            "items": [item.to_dict() for item in self.items],
            "round_overrides": [o.to_dict() for o in self.round_overrides],
            "item_substitutes": [s.to_dict() for s in self.item_substitutes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GroupBlock":
        """Create GroupBlock from dictionary."""
        return cls(
            id=data["id"],
            sets=data.get("sets", 1),
            items=tuple(item_from_dict(i) for i in data.get("items", [])),
            round_overrides=tuple(
                RoundOverride.from_dict(o) for o in data.get("round_overrides") or []
            ),
            item_substitutes=tuple(
                ItemSubstitute.from_dict(s) for s in data.get("item_substitutes") or []
            ),
        )


Item = Union[PoseStep, GroupBlock]


def item_from_dict(data: Dict[str, Any]) -> Item:
    """
    Create a PoseStep or GroupBlock from its tagged dictionary.

    Raises:
        ValueError: If the "type" discriminant is unknown
    """
    item_type = data.get("type")
    if item_type == ITEM_TYPE_POSE_STEP:
        return PoseStep.from_dict(data)
    if item_type == ITEM_TYPE_GROUP_BLOCK:
        return GroupBlock.from_dict(data)
    raise ValueError(f"Unknown item type: {item_type!r}")


@dataclass(frozen=True)
class Section:
    """
    Named stretch of a sequence (e.g., "Warm Up").

    Attributes:
        id: Unique, stable section ID
        name: Section name
        items: Tuple of PoseStep/GroupBlock in play order
    """
    ITEM_TYPE = ITEM_TYPE_SECTION

    id: str
    name: str
    items: Tuple[Item, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "type": self.ITEM_TYPE,
            "id": self.id,
            "name": self.name,
            "items": [item.to_dict() for item in self.items],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Section":
        """Create Section from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            items=tuple(item_from_dict(i) for i in data.get("items", [])),
        )


@dataclass(frozen=True)
class Sequence:
    """
    Complete playable routine.

    Attributes:
        id: Unique sequence ID (the document store key)
        name: Sequence name
        sections: Tuple of Section objects in play order
    """
    id: str
    name: str
    sections: Tuple[Section, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "version": FILE_FORMAT_VERSION,
            "id": self.id,
            "name": self.name,
            "sections": [s.to_dict() for s in self.sections],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Sequence":
        """Create Sequence from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", "Untitled"),
            sections=tuple(Section.from_dict(s) for s in data.get("sections", [])),
        )


def iter_pose_steps(node) -> Iterator[PoseStep]:
    """
    Yield every PoseStep reachable from a node.

    Walks base items, round override items and substitute items, so a
    variation used only as a substitute is still found.

    Args:
        node: Sequence, Section, GroupBlock or PoseStep
    """
    if isinstance(node, PoseStep):
        yield node
    elif isinstance(node, GroupBlock):
        for item in node.items:
            yield from iter_pose_steps(item)
        for override in node.round_overrides:
            for item in override.items:
                yield from iter_pose_steps(item)
        for substitute in node.item_substitutes:
            yield from iter_pose_steps(substitute.substitute_item)
    elif isinstance(node, Section):
        for item in node.items:
            yield from iter_pose_steps(item)
    elif isinstance(node, Sequence):
        for section in node.sections:
            yield from iter_pose_steps(section)
    else:
        raise TypeError(f"Not a sequence node: {type(node).__name__}")


def variation_ids_used(sequence: Sequence) -> Set[str]:
    """Pose variation IDs referenced anywhere in a sequence."""
    return {step.pose_variation_id for step in iter_pose_steps(sequence)}


def sequences_using_variation(sequences: List[Sequence], variation_id: str) -> List[str]:
    """
    Names of sequences that reference a pose variation.

    Used to block deleting a variation that is still in use.
    """
    return [s.name for s in sequences if variation_id in variation_ids_used(s)]


class EditorState:
    """
    Editing session state.

    Manages:
    - Sequence being edited
    - Unsaved-changes flag
    """

    def __init__(self, sequence: Optional[Sequence] = None):
        """Initialize state, optionally with a sequence loaded."""
        self._current_sequence: Optional[Sequence] = sequence
        self._is_dirty: bool = False

    def get_current_sequence(self) -> Optional[Sequence]:
        """Get sequence being edited."""
        return self._current_sequence

    def set_current_sequence(self, sequence: Sequence):
        """Replace the sequence being edited."""
        self._current_sequence = sequence

    def is_dirty(self) -> bool:
        """Check if sequence has unsaved changes."""
        return self._is_dirty

    def mark_dirty(self):
        """Mark sequence as having unsaved changes."""
        self._is_dirty = True

    def mark_clean(self):
        """Mark sequence as saved."""
        self._is_dirty = False
