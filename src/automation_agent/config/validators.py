"""Custom Pydantic validators for configuration.

This module provides validators for cross-field validation and
custom type conversions.
"""

from pathlib import Path


def validate_log_level(value: str) -> str:
    """Validate log level is one of the standard levels.

    Args:
        value: Log level string.

    Returns:
        Validated log level.

    Raises:
        ValueError: If log level is not valid.
    """
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if value.upper() not in valid_levels:
        raise ValueError(f"log_level must be one of {valid_levels}, got {value}")
    return value.upper()


def normalize_model_name(value: str | None) -> str | None:
    """Normalize a configured model name.

    Strips whitespace and quotes, and drops the ``models/`` prefix that the
    model listing endpoint returns. Empty values are treated as unset.

    Args:
        value: Raw model name from the environment or a .env file.

    Returns:
        Normalized model name, or None if the value is empty.
    """
    if value is None:
        return None
    cleaned = value.strip().strip("'\"")
    if cleaned.startswith("models/"):
        cleaned = cleaned[len("models/") :]
    return cleaned or None


def resolve_path(value: Path | str) -> Path:
    """Resolve relative paths to absolute paths.

    Relative paths are resolved against the current working directory, which is
    where the agent was launched from.

    Args:
        value: Path value (can be string or Path).

    Returns:
        Resolved Path object.
    """
    path = Path(value) if isinstance(value, str) else value
    return path.expanduser().resolve()
