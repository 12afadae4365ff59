"""
Shared constants.

Document discriminants, file format, playback speeds and timing.
"""

# Item "type" discriminants used in stored documents
ITEM_TYPE_POSE_STEP = "pose_instance"
ITEM_TYPE_GROUP_BLOCK = "group_block"
ITEM_TYPE_SECTION = "section"

# Document format version (major version must match on load)
FILE_FORMAT_VERSION = "1.0.0"
SEQUENCE_FILE_SUFFIX = ".flow"
LIBRARY_FILE_NAME = "library.flowlib"

# Variation names containing this marker are not spoken/printed
DEFAULT_VARIATION_MARKER = "(Default)"

# Playback speed multipliers offered to the user
SPEED_OPTIONS = (0.5, 1.0, 1.5, 2.0, 2.5, 3.0)
SPEED_DEFAULT = 1.0

# Real-time period between scheduler ticks (seconds), independent of speed
TICK_INTERVAL = 0.1

# Per-user data directory
APP_DIR_NAME = ".yogaflow"


def is_supported_version(version: str) -> bool:
    """
    Check whether a stored document version can be loaded.

    Args:
        version: Version string from the document (e.g., "1.0.0")

    Returns:
        True if the major version matches FILE_FORMAT_VERSION
    """
    if not isinstance(version, str):
        return False
    return version.split(".")[0] == FILE_FORMAT_VERSION.split(".")[0]
