"""CLI context management for editorid.

Provides a context object that holds the loaded configuration and the
per-invocation overrides, and is passed through Click commands via the
pass decorator.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from editorid_core import Config, RunContext, ApplicationVariant

logger = logging.getLogger(__name__)


@dataclass
class CliContext:
    """Context object passed through Click commands.

    Core components stay pure library code; this only remembers which
    home directory and editor variant the user asked for.
    """
    config: Config
    home: Optional[Path] = None
    variant: Optional[ApplicationVariant] = None
    verbose: bool = field(default=False, repr=False)

    @classmethod
    def create(cls) -> "CliContext":
        """Create a new CLI context with default configuration."""
        return cls(config=Config())

    def get_run_context(self) -> RunContext:
        """Build the run context for this invocation.

        Command-line overrides win over configuration values; without
        either, the editor variant is detected from the environment.

        Raises:
            UnknownVariantError: If the configured variant name is invalid
        """
        run_ctx = RunContext.from_config(
            self.config,
            home_directory=self.home,
            variant=self.variant,
        )
        logger.debug(f"Using {run_ctx.variant} config tree at {run_ctx.paths.user_data_dir}")
        return run_ctx
