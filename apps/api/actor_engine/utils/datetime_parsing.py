"""Datetime parsing helpers for loosely typed patches."""

from __future__ import annotations

import re
from datetime import datetime, timezone


def parse_timestamp(raw_value: object) -> datetime | None:
    """
    Parse a timestamp supplied as a datetime, epoch number or ISO 8601 string.

    Naive values are treated as UTC. Returns None for anything unrecognized.
    """
    if isinstance(raw_value, datetime):
        dt = raw_value
    elif isinstance(raw_value, bool):
        return None
    elif isinstance(raw_value, (int, float)):
        dt = _from_epoch(float(raw_value))
    elif isinstance(raw_value, str):
        value = raw_value.strip()
        if not value:
            return None
        # Epoch timestamps (seconds or milliseconds)
        if re.fullmatch(r"\d{10,13}", value):
            ts = float(value)
            if len(value) == 13:
                ts = ts / 1000
            dt = _from_epoch(ts)
        else:
            try:
                dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
            except ValueError:
                return None
    else:
        return None

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _from_epoch(ts: float) -> datetime:
    if ts > 10_000_000_000:
        ts = ts / 1000
    return datetime.fromtimestamp(ts, tz=timezone.utc)
