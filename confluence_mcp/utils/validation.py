"""Input validation helpers for MCP tool arguments.

Tool arguments are checked here before any network call is made.
"""

import re
from typing import Any

from ..exceptions import ValidationError

# Markup that is never accepted in tool arguments.
_UNSAFE_PATTERNS = (
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
)


def validate_input(value: Any, label: str, required: bool = True) -> str | None:
    """Validate and strip one string argument.

    Args:
        value: Raw argument value
        label: Human-readable argument name used in error messages
        required: Reject None and blank strings when True

    Returns:
        The stripped string, or None for an omitted optional value

    Raises:
        ValidationError: If the value is missing, not a string, or unsafe
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            raise ValidationError(f"{label} is required", field=label)
        return None

    if not isinstance(value, str):
        raise ValidationError(f"{label} must be a string", field=label, value=repr(value))

    for pattern in _UNSAFE_PATTERNS:
        if pattern.search(value):
            raise ValidationError(f"{label} contains potentially unsafe content", field=label)

    return value.strip()


def validate_version(value: Any, label: str = "Baseline version") -> int | None:
    """Validate an optional positive version number."""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{label} must be an integer", field=label, value=repr(value))
    if value < 1:
        raise ValidationError(f"{label} must be a positive integer", field=label, value=value)
    return value
