"""
Timestamp normalization for provider payloads.

Providers disagree on formats. Accepted inputs:
- ISO 8601 with 'Z' ("2024-06-15T14:05:00Z")
- ISO 8601 with offset ("2024-06-15T10:05:00-04:00")
- ISO 8601 with fractional seconds ("2024-06-15T14:05:00.000Z")
- Naive ISO 8601 (interpreted as UTC)
- Unix epoch seconds or milliseconds (int, float or digit string)

Everything comes back as a timezone-aware UTC datetime.
"""
from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any, Optional

# Anything above this is treated as epoch milliseconds (year ~2286 in seconds)
_EPOCH_MS_THRESHOLD = 10_000_000_000

# fromisoformat before 3.11 only takes 3 or 6 fraction digits
_FRACTION_RE = re.compile(r"\.(\d+)(?=[+-]\d\d:?\d\d$|$)")


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a provider timestamp into an aware UTC datetime.

    Returns None for None / empty strings.

    Raises:
        ValueError: If the value is present but not a recognizable timestamp
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return _from_epoch(value)

    text = str(value).strip()
    if not text:
        return None
    if text.lstrip("-").isdigit():
        return _from_epoch(int(text))

    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Unrecognized timestamp format: {value!r}")
    return _as_utc(parsed)


def to_unix_seconds(value: Optional[datetime]) -> Optional[int]:
    """Unix seconds for the wire, None passes through."""
    if value is None:
        return None
    return int(_as_utc(value).timestamp())


def _from_epoch(value: float) -> datetime:
    try:
        if abs(value) >= _EPOCH_MS_THRESHOLD:
            value = value / 1000
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        raise ValueError(f"Epoch value out of range: {value!r}") from e


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
