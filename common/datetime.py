"""Datetime helpers for vendor payloads.

Provides:
    parse_iso8601(s): ISO-8601 parser that always returns an *aware* UTC
        datetime (accepts a trailing "Z", explicit offsets, fractions).
    parse_timestamp(v): token expiry parser accepting epoch seconds
        (int/float) or anything ``parse_iso8601`` accepts.

Both raise ``ValueError`` on bad input so pydantic validators can surface it
as a validation error.
"""
from __future__ import annotations

import datetime as _dt
from typing import Union

from dateutil.parser import isoparse as _isoparse

__all__ = ["parse_iso8601", "parse_timestamp"]


def _ensure_utc(dt: _dt.datetime) -> _dt.datetime:
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        # naive → assume already UTC
        return dt.replace(tzinfo=_dt.timezone.utc)
    return dt.astimezone(_dt.timezone.utc)


def parse_iso8601(value: Union[str, _dt.datetime]) -> _dt.datetime:
    """Parse *value* into a timezone-aware UTC datetime."""
    if isinstance(value, _dt.datetime):
        return _ensure_utc(value)

    if not isinstance(value, str):
        raise ValueError("expected an ISO-8601 string, got " + type(value).__name__)

    try:
        dt = _isoparse(value)
    except (ValueError, OverflowError) as exc:
        raise ValueError(f"invalid ISO-8601 datetime: {value}") from exc

    return _ensure_utc(dt)


def parse_timestamp(value: Union[int, float, str, _dt.datetime]) -> _dt.datetime:
    """Parse epoch seconds or an ISO-8601 value into an aware UTC datetime."""
    if isinstance(value, bool):
        raise ValueError("expected a timestamp, got bool")
    if isinstance(value, (int, float)):
        try:
            return _dt.datetime.fromtimestamp(value, tz=_dt.timezone.utc)
        except (OverflowError, OSError) as exc:
            raise ValueError(f"timestamp out of range: {value}") from exc
    return parse_iso8601(value)
