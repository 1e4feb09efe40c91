"""Tests for the refresh orchestrator."""

import json
import os

import pytest
from unittest.mock import patch

from editorid_core import refresh, store
from editorid_core.errors import IdentifierGenerationError, StoreParseError
from editorid_core.results import Failed, Found, NotFound, RefreshOptions


@pytest.fixture
def populated(run_ctx, write_store):
    """Fake editor tree with store, telemetry database and workspaces."""
    write_store({
        "telemetry.machineId": "old-m",
        "telemetry.devDeviceId": "old-d",
        "telemetry.sessionId": "old-s",
        "scoreInfo_42": "cached",
    })
    paths = run_ctx.paths
    paths.telemetry_db.write_bytes(b"telemetry")
    for name in ("w1", "w2"):
        (paths.workspace_storage / name).mkdir(parents=True)
    return paths


class TestRefreshDefaults:
    """Test default step selection."""

    def test_default_options(self):
        options = RefreshOptions()

        assert options.reset_identifiers is True
        assert options.clean_telemetry is True
        assert options.clear_workspace is False
        assert options.clear_cache is True

    def test_default_run(self, run_ctx, populated, read_store):
        result = refresh(run_ctx)

        assert result.ok
        assert result.new_identifiers is not None
        assert read_store()["telemetry.machineId"] == result.new_identifiers.machine_id
        assert result.telemetry_cleared
        assert not populated.telemetry_db.exists()
        assert result.workspace is None
        assert result.workspace_cleared is None
        assert (populated.workspace_storage / "w1").exists()
        # No user id configured, so nothing to clear
        assert result.cache == Found(False)
        assert read_store()["scoreInfo_42"] == "cached"


class TestRefreshSteps:
    """Test individual steps through the orchestrator."""

    def test_all_steps(self, run_ctx, populated, read_store):
        options = RefreshOptions(clear_workspace=True, user_id="42")

        result = refresh(run_ctx, options)

        assert result.ok
        assert result.workspace_cleared == 2
        assert result.cache_cleared
        assert "scoreInfo_42" not in read_store()
        assert result.telemetry_backup.exists()

    def test_disabled_steps_are_none(self, run_ctx, populated):
        options = RefreshOptions(
            reset_identifiers=False,
            clean_telemetry=False,
            clear_workspace=False,
            clear_cache=False,
        )

        result = refresh(run_ctx, options)

        assert result.identifiers is None
        assert result.telemetry is None
        assert result.workspace is None
        assert result.cache is None
        assert populated.telemetry_db.exists()
        assert result.to_dict() == {"errors": []}

    def test_empty_home(self, run_ctx):
        """Test a missing config tree is a successful no-op."""
        result = refresh(run_ctx, RefreshOptions(clear_workspace=True, user_id="42"))

        assert result.ok
        assert isinstance(result.identifiers, NotFound)
        assert result.new_identifiers is None
        assert isinstance(result.telemetry, NotFound)
        assert result.telemetry_cleared
        assert result.telemetry_backup is None
        assert result.workspace_cleared == 0
        assert isinstance(result.cache, NotFound)
        assert not result.cache_cleared


class TestRefreshFailures:
    """Test partial-failure tolerance."""

    def test_parse_error_does_not_stop_other_steps(self, run_ctx, populated):
        populated.storage_file.write_text("{broken")

        result = refresh(run_ctx, RefreshOptions(clear_workspace=True, user_id="42"))

        assert isinstance(result.identifiers, Failed)
        assert isinstance(result.identifiers.error, StoreParseError)
        assert result.telemetry_cleared
        assert result.workspace_cleared == 2
        assert isinstance(result.cache, Failed)

        assert not result.ok
        assert [(e.step, e.kind) for e in result.errors] == [
            ("identifiers", "parse_error"),
            ("cache", "parse_error"),
        ]

    def test_telemetry_failure_recorded(self, run_ctx, populated):
        with patch("editorid_core.operations.shutil.copy2", side_effect=OSError("read-only fs")):
            result = refresh(run_ctx)

        assert result.new_identifiers is not None
        assert isinstance(result.telemetry, Failed)
        assert not result.telemetry_cleared
        assert populated.telemetry_db.exists()
        assert result.errors[0].step == "telemetry"
        assert result.errors[0].kind == "io_error"

    def test_workspace_entry_failures_recorded(self, run_ctx, populated):
        with patch("editorid_core.operations.shutil.rmtree", side_effect=PermissionError(13, "denied")):
            result = refresh(run_ctx, RefreshOptions(clear_workspace=True))

        assert isinstance(result.workspace, Found)
        assert result.workspace_cleared == 0
        assert [e.step for e in result.errors] == ["workspace", "workspace"]

    def test_concurrent_host_write_recorded(self, run_ctx, populated, read_store):
        real_read = store.read_snapshot

        def read_then_host_writes(path):
            snapshot = real_read(path)
            path.write_text(json.dumps({"telemetry.machineId": "host", "scoreInfo_42": "cached"}))
            bumped = snapshot.mtime_ns + 5_000_000
            os.utime(path, ns=(bumped, bumped))
            return snapshot

        with patch("editorid_core.operations.store.read_snapshot", side_effect=read_then_host_writes):
            result = refresh(run_ctx, RefreshOptions(user_id="42"))

        assert isinstance(result.identifiers, Failed)
        assert isinstance(result.cache, Failed)
        assert result.telemetry_cleared
        assert [(e.step, e.kind) for e in result.errors] == [
            ("identifiers", "concurrent_modification"),
            ("cache", "concurrent_modification"),
        ]
        assert read_store() == {"telemetry.machineId": "host", "scoreInfo_42": "cached"}

    def test_identifier_generation_failure_is_fatal(self, run_ctx, populated, read_store):
        with patch("editorid_core.identifiers.uuid.uuid4", side_effect=NotImplementedError):
            with pytest.raises(IdentifierGenerationError):
                refresh(run_ctx)

        assert read_store()["telemetry.machineId"] == "old-m"
        assert populated.telemetry_db.exists()


class TestOperationResultSerialization:
    def test_to_dict(self, run_ctx, populated):
        result = refresh(run_ctx, RefreshOptions(clear_workspace=True, user_id="42"))

        data = result.to_dict()

        assert data["storageFound"] is True
        assert set(data["identifiers"]) == {"machineId", "deviceId", "sessionId"}
        assert data["telemetryCleared"] is True
        assert data["telemetryBackup"].endswith(result.telemetry_backup.name)
        assert data["workspaceCleared"] == 2
        assert data["cacheCleared"] is True
        assert data["errors"] == []
