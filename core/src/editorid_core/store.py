"""Reading and writing the editor identity store (storage.json).

The store is a flat JSON object. Besides the identifier keys it holds
arbitrary keys written by the editor and its extensions, so every write
replaces the whole document with the full record that was loaded.

There is no locking: the editor may rewrite the file while we hold a
loaded copy. save() can compare the modification time captured at load
and refuse to overwrite a file that changed underneath us.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import (
    ConcurrentModificationError,
    StoreIOError,
    StoreNotFoundError,
    StoreParseError,
)

logger = logging.getLogger(__name__)

IdentityRecord = Dict[str, Any]


@dataclass
class StoreSnapshot:
    """A loaded identity record and the file state it was read from."""

    path: Path
    record: IdentityRecord
    mtime_ns: int


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise StoreNotFoundError("Identity store not found", path) from e
    except OSError as e:
        raise StoreIOError(f"Failed to read identity store: {e.strerror or e}", path) from e
    except UnicodeDecodeError as e:
        raise StoreParseError(f"Identity store is not valid UTF-8: {e}", path) from e


def _decode(text: str, path: Path) -> IdentityRecord:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise StoreParseError(f"Identity store is not valid JSON: {e}", path) from e

    if not isinstance(data, dict):
        raise StoreParseError(
            f"Identity store must contain a JSON object, got {type(data).__name__}", path
        )
    return data


def load(path: Path) -> IdentityRecord:
    """Load the identity record from disk.

    Raises:
        StoreNotFoundError: If the file does not exist
        StoreParseError: If the content is not a JSON object
        StoreIOError: On any other read failure
    """
    path = Path(path)
    return _decode(_read_text(path), path)


def read_snapshot(path: Path) -> StoreSnapshot:
    """Load the identity record along with the file's modification time.

    Raises the same errors as load().
    """
    path = Path(path)
    try:
        mtime_ns = path.stat().st_mtime_ns
    except FileNotFoundError as e:
        raise StoreNotFoundError("Identity store not found", path) from e
    except OSError as e:
        raise StoreIOError(f"Failed to stat identity store: {e.strerror or e}", path) from e

    record = load(path)
    return StoreSnapshot(path=path, record=record, mtime_ns=mtime_ns)


def _current_mtime_ns(path: Path) -> Optional[int]:
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None


def save(
    path: Path,
    record: IdentityRecord,
    expected_mtime_ns: Optional[int] = None,
    atomic: bool = True,
) -> None:
    """Write the full identity record, replacing the file.

    Args:
        path: Store file path
        record: Complete record to write (unknown keys included)
        expected_mtime_ns: Modification time seen at load; if the file now
            differs, nothing is written
        atomic: Write to a temporary sibling and rename it over the target

    Raises:
        ConcurrentModificationError: If the file changed since it was loaded
        StoreIOError: If the write fails
    """
    path = Path(path)

    if expected_mtime_ns is not None:
        try:
            current = _current_mtime_ns(path)
        except OSError as e:
            raise StoreIOError(f"Failed to stat identity store: {e.strerror or e}", path) from e
        if current != expected_mtime_ns:
            raise ConcurrentModificationError(
                "Identity store was modified by another process since it was loaded", path
            )

    content = json.dumps(record, indent=2, ensure_ascii=False)

    try:
        if atomic:
            _write_atomic(path, content)
        else:
            path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise StoreIOError(f"Failed to write identity store: {e.strerror or e}", path) from e

    logger.debug(f"Wrote {len(record)} keys to {path}")


def _write_atomic(path: Path, content: str) -> None:
    # Replace the link target, not the link itself
    path = path.resolve()
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())

        # Keep the original file's permission bits
        try:
            os.chmod(tmp_path, path.stat().st_mode & 0o777)
        except FileNotFoundError:
            pass

        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
