"""Common utility functions."""
from typing import Any, Mapping, Sequence
from uuid import UUID


def is_valid_uuid(uuid_string: str) -> bool:
    """Check if string is valid UUID."""
    try:
        UUID(uuid_string)
        return True
    except ValueError:
        return False


def format_validation_errors(errors: Sequence[Mapping[str, Any]]) -> str:
    """Human-readable message for the first validation failure."""
    if not errors:
        return "Validation error"
    first = errors[0]
    location = ".".join(
        str(part)
        for part in first.get("loc", ())
        if part not in ("body", "query", "path", "header")
    )
    message = first.get("msg", "Invalid value")
    if first.get("type") == "value_error":
        # Custom validator messages, without pydantic's "Value error, " prefix
        message = str((first.get("ctx") or {}).get("error", message))
    return f"{location}: {message}" if location else message
