"""Random identifier generation.

Identifiers are random (version 4) UUIDs in canonical lowercase form,
the same shape the editors themselves write into storage.json.
"""

import re
import uuid

from .errors import IdentifierGenerationError
from .results import IdentifierSet

IDENTIFIER_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)


def new_identifier() -> str:
    """Generate a fresh identifier.

    Returns:
        36-character UUID string, version nibble 4, variant nibble 8/9/a/b

    Raises:
        IdentifierGenerationError: If the OS has no randomness source
    """
    try:
        return str(uuid.uuid4())
    except NotImplementedError as e:
        raise IdentifierGenerationError(f"No entropy source available: {e}") from e


def new_identifier_set() -> IdentifierSet:
    """Generate a machine, device and session identifier in one go."""
    return IdentifierSet(
        machine_id=new_identifier(),
        device_id=new_identifier(),
        session_id=new_identifier(),
    )


def is_identifier(value) -> bool:
    """Check whether a value has the shape produced by new_identifier()."""
    return isinstance(value, str) and bool(IDENTIFIER_PATTERN.match(value))
