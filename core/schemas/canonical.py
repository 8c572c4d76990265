"""
Canonical JSON

Byte-stable serialization for everything that gets hashed or pinned:
transcript bundles, certificate metadata and audit records. Two processes
serializing equal values must emit identical bytes, because the local
fallback CID of an unpinned transcript is derived from them.

Encoding rules:
    - object keys sorted, separators ``,`` and ``:``, no ASCII escaping
    - dict entries whose value is None are dropped (list items are kept)
    - datetimes as UTC ISO-8601 with a ``Z`` suffix
    - enums by value, bytes as lowercase hex
    - pydantic models dumped in JSON mode by alias without None fields
    - NaN and infinities are rejected
"""

import json
import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel

from .errors import CanonicalizationException

CANONICAL_JSON_SEPARATORS: tuple[str, str] = (",", ":")


def ensure_utc(dt: datetime) -> datetime:
    """Aware UTC datetime; naive values are read as UTC."""
    return dt.replace(tzinfo=timezone.utc) if dt.tzinfo is None else dt.astimezone(timezone.utc)


def format_datetime_canonical(dt: datetime) -> str:
    """
    ``2026-01-27T21:35:00Z``, or ``2026-01-27T21:35:00.123456Z`` when there
    are microseconds.
    """
    dt = ensure_utc(dt)
    fmt = "%Y-%m-%dT%H:%M:%S.%fZ" if dt.microsecond else "%Y-%m-%dT%H:%M:%SZ"
    return dt.strftime(fmt)


def _child(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else str(key)


def canonicalize_value(value: Any, path: str = "") -> Any:
    """
    Reduce ``value`` to plain JSON types following the module's encoding
    rules. ``path`` locates the offending value in error details.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if math.isfinite(value):
            return value
        raise CanonicalizationException(
            message=f"Non-finite float value encountered: {value}",
            details={"path": path, "value": str(value)},
        )
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return format_datetime_canonical(value)
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, BaseModel):
        return canonicalize_value(
            value.model_dump(mode="json", by_alias=True, exclude_none=True), path
        )
    if isinstance(value, dict):
        return {
            str(key): canonicalize_value(item, _child(path, key))
            for key, item in value.items()
            if item is not None
        }
    if isinstance(value, (list, tuple)):
        return [canonicalize_value(item, _child(path, i)) for i, item in enumerate(value)]

    raise CanonicalizationException(
        message=f"Cannot canonicalize value of type {type(value).__name__}",
        details={"path": path, "type": type(value).__name__},
    )


def dumps_canonical(obj: Any) -> str:
    """
    >>> dumps_canonical({"b": 2, "a": 1, "skip": None})
    '{"a":1,"b":2}'
    """
    plain = canonicalize_value(obj)
    try:
        return json.dumps(
            plain, sort_keys=True, separators=CANONICAL_JSON_SEPARATORS, ensure_ascii=False
        )
    except (TypeError, ValueError) as e:
        raise CanonicalizationException(
            message=f"Failed to serialize to canonical JSON: {e}",
            details={"type": type(obj).__name__},
        ) from e


def canonical_bytes(obj: Any) -> bytes:
    return dumps_canonical(obj).encode("utf-8")


def canonical_equals(a: Any, b: Any) -> bool:
    """Equal canonical encodings; values that cannot be encoded are never equal."""
    try:
        return dumps_canonical(a) == dumps_canonical(b)
    except CanonicalizationException:
        return False
