"""Tests for configuration loading and run context construction."""

import pytest
import yaml
from pathlib import Path

from editorid_core import Config, RunContext
from editorid_core.errors import UnknownVariantError
from editorid_core.variants import ApplicationVariant


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("EDITORID_HOME", "EDITORID_VARIANT", "EDITORID_USER_ID", "EDITORID_LOG_LEVEL",
                 "VSCODE_PID", "WINDSURF_PID", "CURSOR_PID"):
        monkeypatch.delenv(name, raising=False)


class TestConfigDefaults:
    """Test built-in defaults."""

    def test_defaults_without_file(self, tmp_path):
        config = Config(tmp_path / "config.yaml")

        assert config.home_directory is None
        assert config.variant is None
        assert config.user_id is None
        assert config.atomic_writes is True
        assert config.detect_concurrent_writes is True
        assert config.log_level == "WARNING"

    def test_refresh_options_defaults(self, tmp_path):
        options = Config(tmp_path / "config.yaml").refresh_options()

        assert options.reset_identifiers is True
        assert options.clean_telemetry is True
        assert options.clear_workspace is False
        assert options.clear_cache is True
        assert options.user_id is None

    def test_no_file_created_on_load(self, tmp_path):
        Config(tmp_path / "sub" / "config.yaml")

        assert not (tmp_path / "sub").exists()


class TestConfigFile:
    """Test file loading and precedence."""

    def test_file_merges_with_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({
            "variant": "cursor",
            "refresh": {"clear_workspace": True},
            "cache": {"user_id": 42},
        }))

        config = Config(path)

        assert config.variant is ApplicationVariant.CURSOR
        assert config.get("refresh.clear_workspace") is True
        assert config.get("refresh.reset_identifiers") is True
        assert config.user_id == "42"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert Config(path).get("refresh.clean_telemetry") is True

    def test_environment_overrides_file(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"variant": "cursor", "cache": {"user_id": "file"}}))
        monkeypatch.setenv("EDITORID_VARIANT", "windsurf")
        monkeypatch.setenv("EDITORID_USER_ID", "env")
        monkeypatch.setenv("EDITORID_HOME", str(tmp_path / "h"))
        monkeypatch.setenv("EDITORID_LOG_LEVEL", "debug")

        config = Config(path)

        assert config.variant is ApplicationVariant.WINDSURF
        assert config.user_id == "env"
        assert config.home_directory == tmp_path / "h"
        assert config.log_level == "DEBUG"

    def test_invalid_variant(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("variant: notepad\n")

        with pytest.raises(UnknownVariantError):
            Config(path).variant


class TestConfigSetSave:
    """Test dot-notation access and persistence."""

    def test_set_persists(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        config = Config(path)

        config.set("refresh.clean_telemetry", False)
        config.set("cache.user_id", "7")

        reloaded = Config(path)
        assert reloaded.get("refresh.clean_telemetry") is False
        assert reloaded.user_id == "7"

    def test_environment_overrides_not_saved(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"variant": "cursor"}))
        monkeypatch.setenv("EDITORID_VARIANT", "windsurf")
        monkeypatch.setenv("EDITORID_USER_ID", "env-user")
        monkeypatch.setenv("EDITORID_HOME", str(tmp_path / "h"))

        config = Config(path)
        config.set("refresh.clear_workspace", True)

        saved = yaml.safe_load(path.read_text())
        assert saved["variant"] == "cursor"
        assert saved["cache"]["user_id"] is None
        assert saved["home_directory"] is None
        assert saved["refresh"]["clear_workspace"] is True
        assert config.variant is ApplicationVariant.WINDSURF
        assert config.user_id == "env-user"

    def test_get_missing_key(self, tmp_path):
        config = Config(tmp_path / "config.yaml")

        assert config.get("does.not.exist") is None
        assert config.get("does.not.exist", "fallback") == "fallback"


class TestRunContextFromConfig:
    """Test building a RunContext from configuration."""

    def test_detects_variant_when_unconfigured(self, tmp_path):
        config = Config(tmp_path / "config.yaml")

        ctx = RunContext.from_config(config, home_directory=tmp_path, environ={"WINDSURF_PID": "1"})

        assert ctx.variant is ApplicationVariant.WINDSURF
        assert ctx.paths.user_data_dir == tmp_path / ".windsurf"

    def test_configured_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({
            "home_directory": str(tmp_path / "h"),
            "variant": "Cursor",
            "store": {"atomic_writes": False, "detect_concurrent_writes": False},
        }))

        ctx = RunContext.from_config(Config(path), environ={"VSCODE_PID": "1"})

        assert ctx.home_directory == tmp_path / "h"
        assert ctx.variant is ApplicationVariant.CURSOR
        assert ctx.atomic_writes is False
        assert ctx.detect_concurrent_writes is False

    def test_explicit_arguments_win(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"home_directory": "/elsewhere", "variant": "cursor"}))

        ctx = RunContext.from_config(
            Config(path),
            home_directory=tmp_path,
            variant=ApplicationVariant.CODE,
        )

        assert ctx.home_directory == tmp_path
        assert ctx.variant is ApplicationVariant.CODE

    def test_detect_uses_home(self, monkeypatch):
        ctx = RunContext.detect(environ={})

        assert ctx.home_directory == Path.home()
        assert ctx.variant is ApplicationVariant.CODE
