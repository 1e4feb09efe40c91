"""Per-invocation run context.

A RunContext carries everything an operation needs to locate its files.
It is built fresh for each invocation and passed explicitly, so no
operation reads the process environment or home directory on its own.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, TYPE_CHECKING

from .variants import ApplicationVariant, ConfigPaths, resolve_paths, resolve_variant

if TYPE_CHECKING:
    from .config import Config


@dataclass
class RunContext:
    """Home directory, editor variant and logger for one run."""

    home_directory: Path
    variant: ApplicationVariant = field(default_factory=ApplicationVariant.default)
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("editorid_core"), repr=False
    )
    atomic_writes: bool = True
    detect_concurrent_writes: bool = True

    def __post_init__(self):
        if isinstance(self.home_directory, str):
            self.home_directory = Path(self.home_directory)

    @property
    def paths(self) -> ConfigPaths:
        return resolve_paths(self.home_directory, self.variant)

    @classmethod
    def detect(
        cls,
        home_directory: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        **kwargs,
    ) -> "RunContext":
        """Build a context for the current user, detecting the variant."""
        return cls(
            home_directory=home_directory or Path.home(),
            variant=resolve_variant(environ),
            **kwargs,
        )

    @classmethod
    def from_config(
        cls,
        config: "Config",
        home_directory: Optional[Path] = None,
        variant: Optional[ApplicationVariant] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "RunContext":
        """Build a context from tool configuration.

        Explicit arguments win over config values. Without a configured
        variant, the variant is detected from the environment.
        """
        home = home_directory or config.home_directory or Path.home()
        if variant is None:
            variant = config.variant or resolve_variant(environ)

        return cls(
            home_directory=home,
            variant=variant,
            atomic_writes=config.atomic_writes,
            detect_concurrent_writes=config.detect_concurrent_writes,
        )
