from __future__ import annotations

from typing import Any, Iterable, Mapping


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level persistence conflict (duplicate name, dependent rows still present)."""


class NotFoundError(LookupError):
    """404-level missing entity."""


def _raw(form: Mapping[str, Any], field: str):
    value = form.get(field)
    if isinstance(value, str):
        value = value.strip()
    return value


def require_text(form: Mapping[str, Any], field: str, *, max_length: int | None = None) -> str:
    """Required, non-blank string field."""
    value = _raw(form, field)
    if value is None or value == "":
        raise ValidationError(f"{field} is required")
    value = str(value)
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return value


def optional_text(form: Mapping[str, Any], field: str, *, max_length: int | None = None) -> str | None:
    value = _raw(form, field)
    if value is None or value == "":
        return None
    value = str(value)
    if max_length is not None and len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return value


def coerce_int(value: Any, field: str) -> int:
    """
    Strict integer parsing.

    Rejects bools, floats, decimals and scientific notation; accepts ints and
    plain digit strings with an optional leading minus.
    """
    # Already an int (but not bool which is a subclass of int)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if 'e' in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    if isinstance(value, float):
        raise ValidationError(f"{field} must be an integer, not a decimal")
    raise ValidationError(f"{field} must be an integer")


def require_int(form: Mapping[str, Any], field: str) -> int:
    value = _raw(form, field)
    if value is None or value == "":
        raise ValidationError(f"{field} is required")
    return coerce_int(value, field)


def optional_int(form: Mapping[str, Any], field: str) -> int | None:
    """Blank or absent -> None."""
    value = _raw(form, field)
    if value is None or value == "":
        return None
    return coerce_int(value, field)


def coerce_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            raise ValidationError(f"{field} must be a number")
    # float() accepts "nan" and "inf"
    if number != number or number in (float("inf"), float("-inf")):
        raise ValidationError(f"{field} must be a finite number")
    return number


def optional_float(form: Mapping[str, Any], field: str, default: float | None = None) -> float | None:
    value = _raw(form, field)
    if value is None or value == "":
        return default
    return coerce_float(value, field)


def require_choice(value: Any, choices: Iterable[str], field: str) -> str:
    allowed = tuple(choices)
    if isinstance(value, str):
        value = value.strip().upper()
    if value not in allowed:
        raise ValidationError(f"{field} must be one of: {', '.join(allowed)}")
    return value
