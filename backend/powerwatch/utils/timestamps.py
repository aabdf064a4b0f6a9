"""Timestamp parsing for readings supplied by meters and the remote API."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

# Epoch values above this are taken as milliseconds (year 33658 in seconds)
_EPOCH_MS_CUTOFF = 1e12


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a reading timestamp into an aware UTC datetime.

    Accepts datetimes, ISO-8601 strings (``Z`` suffix and space separator
    allowed) and epoch numbers in seconds or milliseconds. Naive values are
    taken as UTC. Returns None when the value cannot be interpreted.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        seconds = value / 1000.0 if abs(value) >= _EPOCH_MS_CUTOFF else float(value)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.isdigit():
            return parse_timestamp(int(text))
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)
