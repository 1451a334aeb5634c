"""
Canonical JSON Serialization

Provides deterministic JSON serialization for hashing and comparison.
Based on RFC 8785 (JSON Canonicalization Scheme) principles:
- Sorted keys (lexicographic)
- No whitespace
- Decimals as strings
- UTF-8 encoding

The same ClaimDecision always produces the same canonical bytes, which is
what lets a settlement request be replayed and recognized by decision id.
"""
from __future__ import annotations

import hashlib
import json
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any


def _default_serializer(obj: Any) -> Any:
    """Decimals serialize as strings so precision survives hashing."""
    if isinstance(obj, Decimal):
        return str(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def format_timestamp(value: datetime) -> str:
    """Render a datetime as second-precision UTC ISO 8601 with a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def canonical_json(obj: Any) -> str:
    """
    Serialize object to canonical JSON string.

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        default=_default_serializer,
        ensure_ascii=False,
    )


def content_hash(obj: Any) -> str:
    """Hex SHA-256 of the canonical JSON, UTF-8 encoded."""
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()
