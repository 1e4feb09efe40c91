"""Device refresh: run several operations in one pass.

Steps always run in the same order:

    reset identifiers -> clean telemetry -> clear workspace -> clear cache

A failing step is recorded in the result and the next step still runs.
Only IdentifierGenerationError aborts the whole run.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from . import operations
from .context import RunContext
from .errors import EditorIdError, IdentifierGenerationError
from .results import Failed, Found, OperationResult, Outcome, RefreshOptions, StepError

logger = logging.getLogger(__name__)

STEP_IDENTIFIERS = "identifiers"
STEP_TELEMETRY = "telemetry"
STEP_WORKSPACE = "workspace"
STEP_CACHE = "cache"


def _error_kind(error: Exception) -> str:
    if isinstance(error, EditorIdError):
        return error.kind
    return "io_error"


def _run_step(
    ctx: RunContext,
    result: OperationResult,
    step: str,
    action: Callable[[], Outcome],
) -> Outcome:
    try:
        return action()
    except IdentifierGenerationError:
        raise
    except (EditorIdError, OSError) as e:
        ctx.logger.error(f"Error during {step} step: {e}")
        result.errors.append(StepError(step=step, kind=_error_kind(e), message=str(e)))
        return Failed(e)


def refresh(ctx: RunContext, options: Optional[RefreshOptions] = None) -> OperationResult:
    """Refresh an editor's device identity.

    Args:
        ctx: Run context selecting the editor and home directory
        options: Steps to run (defaults to RefreshOptions())

    Returns:
        OperationResult with one outcome per enabled step and any errors

    Raises:
        IdentifierGenerationError: If fresh identifiers cannot be generated
    """
    options = options or RefreshOptions()
    result = OperationResult()

    ctx.logger.info(f"Starting device refresh for {ctx.variant}...")

    if options.reset_identifiers:
        result.identifiers = _run_step(
            ctx, result, STEP_IDENTIFIERS, lambda: operations.reset_identifiers(ctx)
        )

    if options.clean_telemetry:
        result.telemetry = _run_step(
            ctx, result, STEP_TELEMETRY, lambda: operations.clean_telemetry_data(ctx)
        )

    if options.clear_workspace:
        result.workspace = _run_step(
            ctx, result, STEP_WORKSPACE, lambda: operations.clear_workspace_storage(ctx)
        )
        if isinstance(result.workspace, Found):
            for failure in result.workspace.value.failures:
                result.errors.append(StepError(step=STEP_WORKSPACE, kind="io_error", message=failure))

    if options.clear_cache:
        if options.user_id:
            result.cache = _run_step(
                ctx, result, STEP_CACHE,
                lambda: operations.clear_cache_entry(ctx, options.user_id),
            )
        else:
            logger.debug("Cache clear enabled but no user id configured")
            result.cache = Found(False)

    if result.ok:
        ctx.logger.info("Device refresh completed successfully")
    else:
        ctx.logger.warning(f"Device refresh completed with {len(result.errors)} error(s)")

    return result
