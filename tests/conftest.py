"""Pytest configuration and shared fixtures."""

import json
import logging

import pytest
import sys
from pathlib import Path

# Add core and cli packages to path for testing
root = Path(__file__).parent.parent
sys.path.insert(0, str(root / "core" / "src"))
sys.path.insert(0, str(root / "cli" / "src"))

from editorid_core import ApplicationVariant, RunContext  # noqa: E402


@pytest.fixture
def home(tmp_path):
    """Empty fake home directory."""
    path = tmp_path / "home"
    path.mkdir()
    return path


@pytest.fixture
def run_ctx(home):
    """Run context for the Code variant rooted at the fake home."""
    return RunContext(
        home_directory=home,
        variant=ApplicationVariant.CODE,
        logger=logging.getLogger("editorid_core.tests"),
    )


@pytest.fixture
def write_store(run_ctx):
    """Write a storage.json for the fake editor and return its path."""
    def _write(data):
        path = run_ctx.paths.storage_file
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2))
        return path

    return _write


@pytest.fixture
def read_store(run_ctx):
    """Read the fake editor's storage.json back."""
    def _read():
        return json.loads(run_ctx.paths.storage_file.read_text())

    return _read
