from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides cross-platform resolution of the storage root, log file paths, and
small fail-safe filesystem helpers. Acts as an abstraction over the 'os'
module to ensure uniform behavior across Windows and Unix-like systems.
"""

import logging
import os
from typing import Optional, Tuple

from devicelogger.domain.constants import LOG_FILE_EXTENSION

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "DeviceLogger"
UNIX_APP_DIR_NAME = ".devicelogger"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent logger data.

    Automatically creates the hierarchy if it does not exist.
    Standards:
    - Windows: %LOCALAPPDATA%/DeviceLogger
    - Linux/Mac: ~/.devicelogger

    Returns:
        str: Absolute path to the data directory.
    """
    path: str = ""

    # Windows specific resolution
    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    # Posix fallback (Linux/Mac)
    if not path:
        try:
            home = os.path.expanduser("~")
            path = os.path.join(home, UNIX_APP_DIR_NAME)
        except Exception:
            path = os.path.abspath(UNIX_APP_DIR_NAME)

    # Idempotent directory creation
    try:
        os.makedirs(path, exist_ok=True)
    except OSError as e:
        logger.warning(f"Could not create data directory '{path}': {e}")

    return os.path.abspath(path)


def resolve_root(root_dir: Optional[str]) -> str:
    """
    Normalize an explicit storage root, or fall back to the user data dir.

    Args:
        root_dir: Caller supplied directory; may contain '~' or env vars.

    Returns:
        str: Absolute storage root.
    """
    p = (root_dir or "").strip()
    if not p:
        return get_user_data_dir()
    return os.path.abspath(os.path.expandvars(os.path.expanduser(p)))


def log_file_path(root_dir: str, file_name: str) -> str:
    """Return the absolute path of '<file_name>.log' inside the root."""
    return os.path.join(root_dir, f"{file_name}{LOG_FILE_EXTENSION}")


def is_valid_file_name(file_name: object) -> bool:
    """
    Check that a log file name is a plain, non-empty base name.

    Args:
        file_name: Candidate name without extension.

    Returns:
        bool: False for empty names and names carrying path separators.
    """
    if not isinstance(file_name, str):
        return False
    name = file_name.strip()
    if not name or name in (".", ".."):
        return False
    separators = {os.sep, "/"}
    if os.altsep:
        separators.add(os.altsep)
    return not any(sep in name for sep in separators)

# -----------------------------------------------------------------------------
# FILESYSTEM OPERATIONS API
# -----------------------------------------------------------------------------

def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)


def safe_remove(path: str) -> Tuple[bool, Optional[str]]:
    """
    Delete a file if it exists.

    Args:
        path: Target file path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
        A missing file counts as success.
    """
    try:
        os.remove(path)
        return True, None
    except FileNotFoundError:
        return True, None
    except OSError as e:
        return False, str(e)
