"""Result models for editorid operations.

Operations report their outcome as one of three tagged results:

- Found(value): the target existed and the operation produced ``value``
- NotFound(path): the target was absent; nothing was done
- Failed(error): the operation raised (only produced by the orchestrator)

Keeping "absent" separate from "failed" lets callers treat a missing
storage file as a successful no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union


@dataclass(frozen=True)
class Found:
    value: Any

    found = True
    failed = False


@dataclass(frozen=True)
class NotFound:
    path: Optional[Path] = None

    found = False
    failed = False


@dataclass(frozen=True)
class Failed:
    error: BaseException

    found = False
    failed = True


Outcome = Union[Found, NotFound, Failed]


@dataclass(frozen=True)
class IdentifierSet:
    """A machine, device and session identifier triple."""

    machine_id: str
    device_id: str
    session_id: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "machineId": self.machine_id,
            "deviceId": self.device_id,
            "sessionId": self.session_id,
        }


@dataclass
class DeviceInfo:
    """Identifiers currently stored for an editor, plus where they live."""

    machine_id: Optional[str]
    device_id: Optional[str]
    session_id: Optional[str]
    storage_path: Path
    variant: str
    user_data_dir: Path

    def to_dict(self) -> Dict[str, Any]:
        return {
            "machineId": self.machine_id,
            "deviceId": self.device_id,
            "sessionId": self.session_id,
            "storagePath": str(self.storage_path),
            "variant": self.variant,
            "userDataPath": str(self.user_data_dir),
        }


@dataclass
class WorkspaceClearResult:
    """Outcome of clearing workspace storage."""

    removed: int = 0
    failures: List[str] = field(default_factory=list)


@dataclass
class TelemetryBackup:
    """A telemetry database backup found on disk."""

    path: Path
    size: int
    created: datetime


@dataclass
class RefreshOptions:
    """Which steps a refresh run performs."""

    reset_identifiers: bool = True
    clean_telemetry: bool = True
    clear_workspace: bool = False
    clear_cache: bool = True
    user_id: Optional[str] = None


@dataclass
class StepError:
    """A non-fatal failure recorded during a refresh run."""

    step: str
    kind: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"step": self.step, "kind": self.kind, "message": self.message}


@dataclass
class OperationResult:
    """Aggregate result of a refresh run.

    Each step field is None when the step was not enabled.
    """

    identifiers: Optional[Outcome] = None
    telemetry: Optional[Outcome] = None
    workspace: Optional[Outcome] = None
    cache: Optional[Outcome] = None
    errors: List[StepError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def new_identifiers(self) -> Optional[IdentifierSet]:
        if isinstance(self.identifiers, Found):
            return self.identifiers.value
        return None

    @property
    def telemetry_cleared(self) -> bool:
        # An absent database counts as cleared
        return self.telemetry is not None and not self.telemetry.failed

    @property
    def telemetry_backup(self) -> Optional[Path]:
        if isinstance(self.telemetry, Found):
            return self.telemetry.value
        return None

    @property
    def workspace_cleared(self) -> Optional[int]:
        if isinstance(self.workspace, Found):
            return self.workspace.value.removed
        if isinstance(self.workspace, NotFound):
            return 0
        return None

    @property
    def cache_cleared(self) -> bool:
        return isinstance(self.cache, Found) and bool(self.cache.value)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}

        if self.identifiers is not None:
            new_ids = self.new_identifiers
            data["identifiers"] = new_ids.to_dict() if new_ids else None
            data["storageFound"] = self.identifiers.found

        if self.telemetry is not None:
            data["telemetryCleared"] = self.telemetry_cleared
            backup = self.telemetry_backup
            data["telemetryBackup"] = str(backup) if backup else None

        if self.workspace is not None:
            data["workspaceCleared"] = self.workspace_cleared

        if self.cache is not None:
            data["cacheCleared"] = self.cache_cleared

        data["errors"] = [e.to_dict() for e in self.errors]
        return data
