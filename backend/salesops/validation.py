from __future__ import annotations

from datetime import date, datetime
from typing import Any, Iterable

from salesops.time_utils import parse_iso_datetime


class ValidationError(ValueError):
    """400-level input problem."""


def parse_id(value: Any, field: str) -> int | None:
    """
    Parse a record id supplied by a caller.

    None / "" -> None. Accepts ints and plain digit strings; rejects bools,
    floats, signs, decimals and scientific notation.
    """
    if value is None:
        return None

    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a valid id")

    if isinstance(value, int):
        if value <= 0:
            raise ValidationError(f"{field} must be a valid id")
        return value

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        if not (stripped.isascii() and stripped.isdigit()):
            raise ValidationError(f"{field} must be a valid id")
        parsed = int(stripped)
        if parsed <= 0:
            raise ValidationError(f"{field} must be a valid id")
        return parsed

    raise ValidationError(f"{field} must be a valid id")


def parse_id_list(values: Iterable[Any] | Any | None, field: str) -> tuple[int, ...]:
    """Parse one id or a list of ids; a comma separated string is accepted."""
    if values is None:
        return ()
    if isinstance(values, str):
        values = [part for part in values.split(",") if part.strip()]
    elif not isinstance(values, (list, tuple, set, frozenset)):
        values = [values]

    parsed = []
    for value in values:
        item = parse_id(value, field)
        if item is not None and item not in parsed:
            parsed.append(item)
    return tuple(parsed)


def parse_int(value: Any, field: str, *, default: int | None = None, minimum: int | None = None) -> int | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str):
        stripped = value.strip()
        digits = stripped[1:] if stripped.startswith("-") else stripped
        if not (digits.isascii() and digits.isdigit()):
            raise ValidationError(f"{field} must be an integer")
        parsed = int(stripped)
    else:
        raise ValidationError(f"{field} must be an integer")

    if minimum is not None and parsed < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return parsed


def parse_choice(value: Any, field: str, choices: Iterable[str], *, default: str | None = None) -> str | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be one of: {', '.join(choices)}")
    normalized = value.strip().lower()
    allowed = tuple(choices)
    if normalized not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}")
    return normalized


def parse_date(value: Any, field: str) -> date | None:
    """Accepts date/datetime objects or ISO-8601 strings; returns a calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            parsed = parse_iso_datetime(value)
        except ValueError:
            raise ValidationError(f"{field} must be an ISO-8601 date")
        return parsed.date() if parsed else None
    raise ValidationError(f"{field} must be an ISO-8601 date")


def parse_optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None
