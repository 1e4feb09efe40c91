"""editorid CLI - Command-line interface for editorid

This package provides the CLI commands for editorid.
It depends on editorid-core for all business logic.
"""

from editorid_core import __version__

__all__ = ["__version__"]
