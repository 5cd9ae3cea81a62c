"""
Canonical JSON Serialization

Deterministic JSON serialization for hashing and byte-level comparison of
engine output:
- Sorted keys (lexicographic)
- No whitespace
- Dates as ISO 8601
- Enums as their value

Two coordinator runs over the same CaseInput must produce the same canonical
JSON. Callers may key a result cache on input_hash().
"""
from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


def _default_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for non-standard types.

    Handles:
    - datetime/date: ISO 8601 format
    - Enum: value
    - dataclass: dict
    - set/frozenset: sorted list
    """
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_json(obj: Any) -> str:
    """
    Serialize object to canonical JSON string.

    Args:
        obj: Any JSON-serializable object (including dataclasses)

    Returns:
        Canonical JSON string (sorted keys, no whitespace)

    Example:
        >>> canonical_json({"b": 1, "a": 2})
        '{"a":2,"b":1}'
    """
    if is_dataclass(obj) and not isinstance(obj, type):
        obj = asdict(obj)
    return json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        default=_default_serializer,
        ensure_ascii=False,
    )


def content_hash(obj: Any) -> str:
    """
    Compute SHA-256 hash of canonical JSON representation.

    Returns:
        Hex-encoded SHA-256 hash string (64 characters)
    """
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()


def content_hash_short(obj: Any, length: int = 12) -> str:
    """Truncated content hash for log lines and display."""
    return content_hash(obj)[:length]


def _snapshot_serializer(obj: Any) -> Any:
    try:
        return _default_serializer(obj)
    except TypeError:
        # storage layers hand over Decimal, bytes and the like in extracted JSON
        return str(obj)


def input_hash(case_input: Any) -> str:
    """
    Hash of a CaseInput snapshot.

    The reference date is part of the snapshot, so the same case assessed on
    different days hashes differently. Values canonical JSON cannot represent
    are hashed by their str() form.
    """
    if is_dataclass(case_input) and not isinstance(case_input, type):
        case_input = asdict(case_input)
    payload = json.dumps(
        case_input,
        sort_keys=True,
        separators=(",", ":"),
        default=_snapshot_serializer,
        ensure_ascii=False,
    )
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
