# Overview: UTC helpers shared by models and the session token; naive datetimes are always UTC.

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the form stored and signed everywhere)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_aware(dt: datetime) -> datetime:
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Read an ISO-8601 timestamp back into naive UTC.

    Accepts a trailing "Z" or an explicit offset; a string without either is
    taken to be UTC already. Blank input gives None, garbage raises ValueError.
    """
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        return parsed
    return parsed.astimezone(timezone.utc).replace(tzinfo=None)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Whole-second ISO-8601 in UTC with a "Z" suffix, e.g. 2026-10-19T08:00:00Z."""
    if dt is None:
        return None
    in_utc = _as_aware(dt).astimezone(timezone.utc).replace(microsecond=0)
    return in_utc.strftime("%Y-%m-%dT%H:%M:%SZ")


def to_epoch_seconds(dt: datetime) -> int:
    """Whole seconds since the epoch; the JWT "exp" claim."""
    return int(_as_aware(dt).timestamp())
