"""Shared parsing helpers for configuration value normalization."""

from __future__ import annotations


def normalize_optional_string(value: object) -> str | None:
    """Normalize an optional value to a stripped non-empty string.

    Args:
        value: Arbitrary input value.

    Returns:
        Stripped string value, or `None` when the value is empty after trimming.
    """

    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    return text


def parse_optional_positive_float(value: object, field_name: str) -> float | None:
    """Parse an optional strictly positive number.

    Args:
        value: Number or numeric text; blank values yield `None`.
        field_name: Field name for an actionable validation error message.

    Raises:
        ValueError: If the value is not a positive number.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive number.")
    if isinstance(value, int | float):
        parsed = float(value)
    else:
        normalized = normalize_optional_string(value)
        if normalized is None:
            return None
        try:
            parsed = float(normalized)
        except ValueError as exc:
            raise ValueError(f"`{field_name}` must be a positive number.") from exc

    if parsed <= 0.0:
        raise ValueError(f"`{field_name}` must be a positive number.")
    return parsed
