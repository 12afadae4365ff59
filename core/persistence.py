"""
Sequence document storage.

File format:
- MessagePack binary format (fast, compact)
- One document per sequence (.flow), keyed by sequence ID in a store directory
- Pose library in a single library.flowlib next to the sequences
"""
from pathlib import Path
from typing import Optional, List, Dict, Any
from urllib.parse import quote, unquote

import msgpack

from core.constants import (
    LIBRARY_FILE_NAME,
    SEQUENCE_FILE_SUFFIX,
    is_supported_version,
)
from core.models import PoseLibrary, Sequence


def _pack(data: Dict[str, Any], path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)
    packed_data = msgpack.packb(data, use_bin_type=True)
    with open(path, "wb") as f:
        f.write(packed_data)


def _unpack(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise IOError(f"File not found: {path}")
    with open(path, "rb") as f:
        packed_data = f.read()
    data = msgpack.unpackb(packed_data, raw=False)
    if not isinstance(data, dict):
        raise ValueError("Document must be a mapping")
    version = data.get("version", "unknown")
    if not is_supported_version(version):
        raise ValueError(f"Incompatible document version: {version}")
    return data


class SequenceFile:
    """Handles single .flow sequence file I/O."""

    @staticmethod
    def save(sequence: Sequence, path: Path) -> Path:
        """
        Save sequence to a .flow file.

        Args:
            sequence: Sequence to save
            path: Destination file path (suffix forced to .flow)

        Returns:
            Path written

        Raises:
            IOError: If save fails
        """
        path = Path(path)
        if path.suffix != SEQUENCE_FILE_SUFFIX:
            path = path.with_suffix(SEQUENCE_FILE_SUFFIX)
        try:
            _pack(sequence.to_dict(), path)
        except Exception as e:
            raise IOError(f"Failed to save sequence to {path}: {e}") from e
        return path

    @staticmethod
    def load(path: Path) -> Sequence:
        """
        Load sequence from a .flow file.

        Args:
            path: Source file path

        Returns:
            Loaded sequence

        Raises:
            IOError: If the file is missing, unreadable or invalid
        """
        path = Path(path)
        try:
            return Sequence.from_dict(_unpack(path))
        except msgpack.exceptions.ExtraData as e:
            raise IOError(f"Invalid sequence file format {path}: {e}") from e
        except Exception as e:
            raise IOError(f"Failed to load sequence from {path}: {e}") from e


class SequenceStore:
    """
    Key-value document store of sequences, keyed by sequence ID.

    Each sequence lives in <root>/<quoted id>.flow, where the ID is
    percent-encoded so every distinct ID gets its own file. The pose library
    lives in <root>/library.flowlib.
    """

    def __init__(self, root):
        """
        Args:
            root: Store directory (created on first save)
        """
        self.root = Path(root).expanduser()

    def path_for(self, sequence_id: str) -> Path:
        """File path for a sequence ID."""
        if not sequence_id:
            raise ValueError(f"Sequence ID cannot be used as a file name: {sequence_id!r}")
        return self.root / f"{quote(sequence_id, safe='')}{SEQUENCE_FILE_SUFFIX}"

    def save(self, sequence: Sequence) -> Path:
        """Store a sequence under its ID, replacing any previous version."""
        return SequenceFile.save(sequence, self.path_for(sequence.id))

    def load(self, sequence_id: str) -> Sequence:
        """
        Load a sequence by ID.

        Raises:
            IOError: If the sequence is not stored, cannot be read, or the
                document holds a different ID
        """
        path = self.path_for(sequence_id)
        sequence = SequenceFile.load(path)
        if sequence.id != sequence_id:
            raise IOError(f"Sequence file {path} holds ID {sequence.id!r}, expected {sequence_id!r}")
        return sequence

    def get(self, sequence_id: str) -> Optional[Sequence]:
        """Load a sequence by ID, or None if it is not stored."""
        if not self.contains(sequence_id):
            return None
        return self.load(sequence_id)

    def contains(self, sequence_id: str) -> bool:
        return self.path_for(sequence_id).exists()

    def delete(self, sequence_id: str) -> bool:
        """
        Remove a sequence.

        Returns:
            True if a stored sequence was deleted
        """
        path = self.path_for(sequence_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise IOError(f"Failed to delete sequence {sequence_id}: {e}") from e
        return True

    def list_ids(self) -> List[str]:
        """IDs of all stored sequences, sorted."""
        if not self.root.exists():
            return []
        return sorted(unquote(p.stem) for p in self.root.glob(f"*{SEQUENCE_FILE_SUFFIX}"))

    def load_all(self) -> List[Sequence]:
        """
        Load every stored sequence.

        Unreadable documents are skipped with a warning so one bad file does
        not hide the rest of the library.
        """
        sequences = []
        for sequence_id in self.list_ids():
            try:
                sequences.append(self.load(sequence_id))
            except IOError as e:
                print(f"[STORE] Skipping unreadable sequence {sequence_id}: {e}")
        return sequences

    @property
    def library_path(self) -> Path:
        return self.root / LIBRARY_FILE_NAME

    def save_library(self, library: PoseLibrary) -> Path:
        """
        Save the pose library.

        Raises:
            IOError: If save fails
        """
        path = self.library_path
        try:
            _pack(library.to_dict(), path)
        except Exception as e:
            raise IOError(f"Failed to save pose library to {path}: {e}") from e
        return path

    def load_library(self) -> PoseLibrary:
        """
        Load the pose library (empty if none has been saved).

        Raises:
            IOError: If the library file exists but cannot be read
        """
        path = self.library_path
        if not path.exists():
            return PoseLibrary()
        try:
            return PoseLibrary.from_dict(_unpack(path))
        except Exception as e:
            raise IOError(f"Failed to load pose library from {path}: {e}") from e
