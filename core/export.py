"""
Plain-text export of a sequence.

Renders structure and durations only (no timeline): sections with their
totals, group blocks with sets, per-round substitutions under the item they
replace, and round endings after the block's base items.
"""
import re
from pathlib import Path
from typing import List, Optional

from core.aggregator import duration_of
from core.constants import DEFAULT_VARIATION_MARKER
from core.durations import format_duration
from core.models import GroupBlock, PoseLibrary, PoseStep, Sequence, Item

LINE_WIDTH = 56
INDENT = "  "


def export_sequence_text(sequence: Sequence, library: Optional[PoseLibrary] = None) -> str:
    """
    Render a sequence as an indented text outline.

    Args:
        sequence: Sequence to render
        library: Pose library for pose names (variation IDs are shown if None)

    Returns:
        Text outline ending with a newline
    """
    lines = [_row(sequence.name, duration_of(sequence)), "=" * LINE_WIDTH]

    for section in sequence.sections:
        lines.append("")
        lines.append(_row(section.name, duration_of(section)))
        if not section.items:
            lines.append(INDENT + "(empty section)")
            continue
        for item in section.items:
            _render_item(item, 1, library, lines)

    return "\n".join(lines) + "\n"


def export_filename(sequence: Sequence) -> str:
    """File name for an exported sequence (e.g., "morning_flow.txt")."""
    return re.sub(r"[^a-z0-9]", "_", sequence.name, flags=re.IGNORECASE).lower() + ".txt"


def write_export(sequence: Sequence, path, library: Optional[PoseLibrary] = None) -> Path:
    """
    Write the text export to a file.

    Args:
        sequence: Sequence to export
        path: Destination file, or a directory to place export_filename() in
        library: Pose library for pose names

    Returns:
        Path written

    Raises:
        IOError: If writing fails
    """
    path = Path(path)
    if path.is_dir():
        path = path / export_filename(sequence)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(export_sequence_text(sequence, library), encoding="utf-8")
    except Exception as e:
        raise IOError(f"Failed to export sequence to {path}: {e}") from e
    return path


def step_name(step: PoseStep, library: Optional[PoseLibrary]) -> str:
    """Printed name for a pose step, e.g. "Downward Dog (with Bent Knees)"."""
    if library is None:
        return step.pose_variation_id
    variation = library.get_variation(step.pose_variation_id)
    if variation is None:
        return "Unknown"
    pose = library.get_pose(variation.pose_id)
    if pose is None:
        return "Unknown"
    if DEFAULT_VARIATION_MARKER in variation.name:
        return pose.name
    return f"{pose.name} ({variation.name})"


def _row(label: str, seconds: int) -> str:
    duration = format_duration(seconds)
    width = max(LINE_WIDTH - len(duration), len(label) + 1)
    return f"{label:<{width}}{duration}"


def _render_item(item: Item, depth: int, library: Optional[PoseLibrary], lines: List[str]):
    indent = INDENT * depth
    if isinstance(item, PoseStep):
        lines.append(_row(indent + step_name(item, library), item.duration_seconds))
    elif isinstance(item, GroupBlock):
        _render_group_block(item, depth, library, lines)
    else:
        raise TypeError(f"Not a sequence item: {type(item).__name__}")


def _render_group_block(block: GroupBlock, depth: int, library: Optional[PoseLibrary],
                        lines: List[str]):
    indent = INDENT * depth
    lines.append(_row(f"{indent}Group: {block.sets} sets", duration_of(block)))

    for index, item in enumerate(block.items):
        _render_item(item, depth + 1, library, lines)
        for substitute in block.item_substitutes:
            if substitute.item_index != index:
                continue
            sub = substitute.substitute_item
            if isinstance(sub, PoseStep):
                label = f"Round {substitute.round}: {step_name(sub, library)}"
            else:
                label = f"Round {substitute.round}: Group Block"
            lines.append(_row(INDENT * (depth + 2) + label, duration_of(sub)))

    for override in block.round_overrides:
        heading = f"Round {override.round} Ending"
        if override.sets > 1:
            heading += f" ({override.sets} sets)"
        lines.append(INDENT * (depth + 1) + heading + ":")
        for item in override.items:
            _render_item(item, depth + 2, library, lines)
