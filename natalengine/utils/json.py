"""JSON encoding for chart records handed to persistence collaborators."""

from __future__ import annotations

from typing import Any

import orjson

OPT_SORT_KEYS = orjson.OPT_SORT_KEYS
JSONDecodeError = orjson.JSONDecodeError

__all__ = ["JSONDecodeError", "OPT_SORT_KEYS", "dumps", "loads"]


def dumps(value: Any, *, sort_keys: bool = False) -> bytes:
    """Serialize ``value`` to UTF-8 encoded JSON bytes."""

    option = OPT_SORT_KEYS if sort_keys else None
    return orjson.dumps(value, option=option)


def loads(data: bytes | bytearray | str) -> Any:
    return orjson.loads(data)
