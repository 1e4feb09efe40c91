"""Operations on an editor's identity files.

Each operation takes a RunContext, returns Found/NotFound, and raises
EditorIdError subclasses for real failures. Absence of the target file or
directory is never an error.
"""

from __future__ import annotations

import shutil
import time
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from . import store
from .context import RunContext
from .errors import BackupNotFoundError, StoreIOError, StoreNotFoundError, TelemetryBackupError
from .identifiers import new_identifier_set
from .results import (
    DeviceInfo,
    Found,
    IdentifierSet,
    NotFound,
    TelemetryBackup,
    WorkspaceClearResult,
)

IDENTIFIER_KEYS = (
    "telemetry.machineId",
    "telemetry.devDeviceId",
    "telemetry.sessionId",
    "machineId",
    "deviceId",
    "sessionId",
)

CACHE_KEY_PREFIX = "scoreInfo_"
BACKUP_MARKER = ".backup."


def _identifier_for_key(key: str, ids: IdentifierSet) -> str:
    lowered = key.lower()
    if "machine" in lowered:
        return ids.machine_id
    if "device" in lowered:
        return ids.device_id
    return ids.session_id


def _snapshot_or_none(path: Path) -> Optional[store.StoreSnapshot]:
    try:
        return store.read_snapshot(path)
    except StoreNotFoundError:
        return None


def _persist(ctx: RunContext, snapshot: store.StoreSnapshot) -> None:
    store.save(
        snapshot.path,
        snapshot.record,
        expected_mtime_ns=snapshot.mtime_ns if ctx.detect_concurrent_writes else None,
        atomic=ctx.atomic_writes,
    )


def reset_identifiers(ctx: RunContext):
    """Replace the identifiers stored in storage.json with fresh ones.

    Only identifier keys already present are rewritten; missing keys are
    not created. Every other key is written back untouched.

    Returns:
        Found(IdentifierSet) with the new identifiers, or
        NotFound(storage_path) if there is no storage file
    """
    log = ctx.logger
    storage_path = ctx.paths.storage_file

    # Generate before touching the disk so an entropy failure changes nothing
    ids = new_identifier_set()

    snapshot = _snapshot_or_none(storage_path)
    if snapshot is None:
        log.info(f"No identity store at {storage_path}, skipping identifier reset")
        return NotFound(storage_path)

    log.info(f"Resetting device identifiers for {ctx.variant}...")
    for key in IDENTIFIER_KEYS:
        if key in snapshot.record:
            snapshot.record[key] = _identifier_for_key(key, ids)
            log.info(f"Reset {key}")

    _persist(ctx, snapshot)
    log.info("Device identifiers reset successfully")
    return Found(ids)


def _backup_path_for(path: Path) -> Path:
    millis = int(time.time() * 1000)
    candidate = path.with_name(f"{path.name}{BACKUP_MARKER}{millis}")
    # Never reuse the name of an earlier backup
    while candidate.exists():
        millis += 1
        candidate = path.with_name(f"{path.name}{BACKUP_MARKER}{millis}")
    return candidate


def _backup_telemetry_db(path: Path) -> Path:
    backup_path = _backup_path_for(path)
    try:
        shutil.copy2(path, backup_path)
        if backup_path.stat().st_size != path.stat().st_size:
            raise OSError(f"backup size mismatch for {backup_path}")
    except OSError as e:
        backup_path.unlink(missing_ok=True)
        raise TelemetryBackupError(f"Failed to back up telemetry database: {e}", path) from e
    return backup_path


def clean_telemetry_data(ctx: RunContext):
    """Back up the telemetry database and delete it.

    The backup is a byte-for-byte copy at ``<db>.backup.<unix-millis>``.
    The original is only deleted once the copy is complete.

    Returns:
        Found(backup_path), or NotFound(db_path) if there is no database

    Raises:
        TelemetryBackupError: If the copy failed (original kept)
        StoreIOError: If the original could not be deleted (backup kept)
    """
    log = ctx.logger
    telemetry_path = ctx.paths.telemetry_db

    if not telemetry_path.is_file():
        log.info(f"No telemetry database at {telemetry_path}, nothing to clean")
        return NotFound(telemetry_path)

    log.info("Cleaning telemetry data...")
    backup_path = _backup_telemetry_db(telemetry_path)

    try:
        telemetry_path.unlink()
    except OSError as e:
        raise StoreIOError(
            f"Backup created at {backup_path} but the database could not be deleted: {e}",
            telemetry_path,
        ) from e

    log.info("Telemetry data cleared")
    log.info(f"Backup created at: {backup_path}")
    return Found(backup_path)


def clear_workspace_storage(ctx: RunContext):
    """Remove every per-workspace directory under workspaceStorage.

    Plain files at the top level are left alone. A failure to remove one
    entry is recorded and the remaining entries are still processed.

    Returns:
        Found(WorkspaceClearResult), or NotFound(dir) if there is no directory
    """
    log = ctx.logger
    workspace_path = ctx.paths.workspace_storage

    if not workspace_path.is_dir():
        log.info(f"No workspace storage at {workspace_path}, nothing to clear")
        return NotFound(workspace_path)

    log.info("Clearing workspace storage...")
    try:
        entries = sorted(workspace_path.iterdir())
    except OSError as e:
        raise StoreIOError(f"Failed to list workspace storage: {e.strerror or e}", workspace_path) from e

    result = WorkspaceClearResult()
    for entry in entries:
        if not entry.is_dir():
            continue
        try:
            if entry.is_symlink():
                entry.unlink()
            else:
                shutil.rmtree(entry)
            result.removed += 1
        except OSError as e:
            log.warning(f"Failed to remove workspace storage {entry.name}: {e}")
            result.failures.append(f"{entry.name}: {e.strerror or e}")

    log.info(f"Cleared {result.removed} workspace storage items")
    return Found(result)


def cache_key(user_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}{user_id}"


def remove_cache_entry(record: store.IdentityRecord, user_id: Optional[str]) -> bool:
    """Drop a user's cached score entry from a record in memory.

    Returns:
        True if an entry was removed
    """
    if not user_id:
        return False

    key = cache_key(user_id)
    if key not in record:
        return False
    del record[key]
    return True


def clear_cache_entry(ctx: RunContext, user_id: Optional[str]):
    """Remove a user's cached score entry from storage.json.

    Returns:
        Found(True) if removed, Found(False) if there was nothing to remove,
        or NotFound(storage_path) if there is no storage file
    """
    log = ctx.logger
    storage_path = ctx.paths.storage_file

    if not user_id:
        log.debug("No user id given, skipping cache clear")
        return Found(False)

    snapshot = _snapshot_or_none(storage_path)
    if snapshot is None:
        return NotFound(storage_path)

    if not remove_cache_entry(snapshot.record, user_id):
        log.debug(f"No cache entry {cache_key(user_id)} in {storage_path}")
        return Found(False)

    _persist(ctx, snapshot)
    log.info(f"Cleared scoreInfo cache for user {user_id}")
    return Found(True)


def get_current_info(ctx: RunContext):
    """Read the identifiers currently stored for the editor.

    ``telemetry.*`` keys take precedence over the bare keys.

    Returns:
        Found(DeviceInfo), or NotFound(storage_path) if there is no storage file

    Raises:
        StoreParseError, StoreIOError: If the store exists but can't be read
    """
    paths = ctx.paths
    try:
        record = store.load(paths.storage_file)
    except StoreNotFoundError:
        return NotFound(paths.storage_file)

    def pick(prefixed: str, bare: str) -> Optional[str]:
        return record.get(prefixed) or record.get(bare)

    return Found(DeviceInfo(
        machine_id=pick("telemetry.machineId", "machineId"),
        device_id=pick("telemetry.devDeviceId", "deviceId"),
        session_id=pick("telemetry.sessionId", "sessionId"),
        storage_path=paths.storage_file,
        variant=ctx.variant.display_name,
        user_data_dir=paths.user_data_dir,
    ))


def _parse_backup_millis(path: Path, db_name: str) -> Optional[int]:
    suffix = path.name[len(db_name) + len(BACKUP_MARKER):]
    return int(suffix) if suffix.isdigit() else None


def list_telemetry_backups(ctx: RunContext) -> List[TelemetryBackup]:
    """List telemetry database backups, newest first."""
    telemetry_path = ctx.paths.telemetry_db
    if not telemetry_path.parent.is_dir():
        return []

    backups = []
    for candidate in telemetry_path.parent.glob(f"{telemetry_path.name}{BACKUP_MARKER}*"):
        millis = _parse_backup_millis(candidate, telemetry_path.name)
        if millis is None or not candidate.is_file():
            continue
        try:
            created = datetime.fromtimestamp(millis / 1000)
        except (OverflowError, ValueError, OSError):
            ctx.logger.debug(f"Skipping backup with unusable timestamp: {candidate.name}")
            continue
        backups.append(TelemetryBackup(
            path=candidate,
            size=candidate.stat().st_size,
            created=created,
        ))

    return sorted(backups, key=lambda b: b.created, reverse=True)


def restore_telemetry_backup(ctx: RunContext, backup: Optional[Path] = None) -> Path:
    """Copy a telemetry backup back over the database path.

    A database already at the path is backed up first, so restoring never
    discards data.

    Args:
        ctx: Run context
        backup: Backup file to restore (defaults to the newest)

    Returns:
        Path of the restored database

    Raises:
        BackupNotFoundError: If no backup exists
        TelemetryBackupError: If the current database could not be backed up
        StoreIOError: If the copy fails
    """
    telemetry_path = ctx.paths.telemetry_db

    if backup is None:
        available = list_telemetry_backups(ctx)
        if not available:
            raise BackupNotFoundError("No telemetry backups found", telemetry_path.parent)
        backup = available[0].path

    backup = Path(backup)
    if not backup.is_file():
        raise BackupNotFoundError("Telemetry backup not found", backup)

    if telemetry_path.is_file():
        previous = _backup_telemetry_db(telemetry_path)
        ctx.logger.info(f"Current telemetry database backed up to {previous}")

    try:
        shutil.copy2(backup, telemetry_path)
    except OSError as e:
        raise StoreIOError(f"Failed to restore telemetry backup: {e}", backup) from e

    ctx.logger.info(f"Restored telemetry database from {backup}")
    return telemetry_path
