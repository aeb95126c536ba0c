"""Shared parsing helpers for configuration value normalization."""

from __future__ import annotations

import math


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


def parse_positive_int(value: object, field_name: str) -> int:
    """Parse a strictly positive integer from an int or decimal string.

    Raises:
        ValueError: If the value is not a positive integer.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive integer.")
    if isinstance(value, int):
        parsed = value
    else:
        text = normalize_optional_string(value)
        if text is None or not text.lstrip("+").isdigit():
            raise ValueError(f"`{field_name}` must be a positive integer.")
        parsed = int(text)
    if parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive integer.")
    return parsed


def parse_positive_float(value: object, field_name: str) -> float:
    """Parse a strictly positive finite number.

    Raises:
        ValueError: If the value is not a positive finite number.
    """

    if isinstance(value, bool):
        raise ValueError(f"`{field_name}` must be a positive number.")
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValueError(f"`{field_name}` must be a positive number.") from None
    if not math.isfinite(parsed) or parsed <= 0:
        raise ValueError(f"`{field_name}` must be a positive number.")
    return parsed
