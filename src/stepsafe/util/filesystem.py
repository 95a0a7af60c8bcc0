"""
Filesystem helpers for caches, history files and rendered pages.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Optional

from filelock import FileLock

logger = logging.getLogger(__name__)


def ensure_directory(path: Path | str) -> Path:
    """
    Create the directory (and parents) if needed and return its resolved Path.
    """
    resolved = Path(path).expanduser().resolve()
    resolved.mkdir(parents=True, exist_ok=True)
    return resolved


def _is_relative_to(path: Path, base: Path) -> bool:
    try:
        path.relative_to(base)
    except ValueError:
        return False
    return True


def safe_unlink(path: Path | str, *, base_dir: Path | str) -> bool:
    """Delete a file only when it lives under base_dir."""
    target = Path(path).expanduser().resolve()
    base = Path(base_dir).expanduser().resolve()
    if not _is_relative_to(target, base):
        logger.warning("Refusing to delete %s (outside %s)", target, base)
        return False
    try:
        target.unlink()
        return True
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.debug("Failed to delete %s (%s)", target, exc)
        return False


@contextmanager
def file_lock(path: Path | str):
    """Hold a `<name>.lock` file next to the target while the block runs."""
    target = Path(path).expanduser().resolve()
    lock_path = target.with_suffix(f"{target.suffix}.lock")
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    with FileLock(str(lock_path)):
        yield


def _atomic_write_text(target: Path, content: str, encoding: str) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding=encoding) as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    finally:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass


def write_text_file(path: Path | str, content: str, encoding: str = "utf-8", *, lock: bool = True) -> Path:
    """
    Write text atomically, creating parent directories as needed.
    """
    target = Path(path).expanduser().resolve()
    if lock:
        with file_lock(target):
            _atomic_write_text(target, content, encoding=encoding)
    else:
        _atomic_write_text(target, content, encoding=encoding)
    return target


def read_json_file(path: Path | str) -> Optional[Any]:
    """
    Load JSON from disk, returning None when the file is missing or corrupt.

    Corrupt files are deleted so the next write starts clean. Files that merely
    cannot be read are left in place.
    """
    target = Path(path).expanduser().resolve()
    if not target.exists():
        return None
    try:
        text = target.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        logger.warning("Corrupt JSON in %s (%s). Deleting.", target, exc)
        safe_unlink(target, base_dir=target.parent)
        return None
    except OSError as exc:
        logger.warning("Failed to read %s (%s).", target, exc)
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Corrupt JSON in %s (%s). Deleting.", target, exc)
        safe_unlink(target, base_dir=target.parent)
        return None
