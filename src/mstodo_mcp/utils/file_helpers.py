"""Shared file utilities for mstodo-mcp.

Provides the write path used for the token file and the desktop host config:
- ensure_private_dir: Create a directory with owner-only permissions
- set_secure_permissions: Owner-only permissions on a file or directory
- atomic_write_json: Whole-file JSON replace via temp file + rename
"""

from __future__ import annotations

__all__ = [
    "atomic_write_json",
    "ensure_private_dir",
    "set_secure_permissions",
]

import json
import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any


def set_secure_permissions(path: Path, *, is_directory: bool = False) -> None:
    """Set owner-only permissions on a file or directory.

    - Directory: 0o700 (rwx------)
    - File: 0o600 (rw-------)

    Does nothing on Windows. Permission errors are ignored (some
    filesystems do not support chmod).

    Args:
        path: Path to file or directory.
        is_directory: If True, use directory permissions (0o700).
    """
    if sys.platform == "win32":
        return

    try:
        path.chmod(0o700 if is_directory else 0o600)
    except OSError:
        pass


def ensure_private_dir(path: Path) -> Path:
    """Create a directory (and parents) if missing.

    Permissions are only tightened when the directory is created here;
    an existing directory is left as the user configured it.

    Args:
        path: Directory to create.

    Returns:
        The same path, for chaining.

    Raises:
        OSError: If the directory cannot be created.
    """
    if not path.is_dir():
        path.mkdir(parents=True, exist_ok=True)
        set_secure_permissions(path, is_directory=True)
    return path


def atomic_write_json(path: Path, data: Any, *, private: bool = True) -> None:
    """Write JSON to path so readers never observe a partial file.

    Writes to a temporary file in the target directory, flushes it to disk,
    then renames it over the destination (os.replace is atomic on POSIX and
    Windows when source and target share a filesystem).

    Args:
        path: Destination file.
        data: JSON-serializable object.
        private: Restrict the written file to owner read/write. Otherwise
            an existing destination keeps its current mode.

    Raises:
        OSError: If the file cannot be written or renamed.
        TypeError: If data is not JSON-serializable.
    """
    payload = json.dumps(data, indent=2)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        if private:
            set_secure_permissions(tmp_path)
        elif path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
