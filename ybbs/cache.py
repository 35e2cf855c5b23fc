"""Bounded in-memory byte cache and JSON helpers around it."""

from __future__ import annotations

import dataclasses
import json
import threading
from collections import OrderedDict
from typing import Any


def _b(value: bytes | bytearray | str) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


class Cache:
    """Byte cache holding at most ``max_bytes`` of keys and values, least recent evicted first."""

    def __init__(self, max_bytes: int):
        if max_bytes <= 0:
            raise ValueError("max_bytes must be positive")
        self._max = max_bytes
        self._data: OrderedDict[bytes, bytes] = OrderedDict()
        self._size = 0
        self._lock = threading.Lock()

    def get(self, key) -> bytes | None:
        k = _b(key)
        with self._lock:
            value = self._data.get(k)
            if value is not None:
                self._data.move_to_end(k)
            return value

    def set(self, key, value) -> None:
        k, v = _b(key), _b(value)
        cost = len(k) + len(v)
        with self._lock:
            self._drop(k)
            if cost > self._max:
                return
            self._data[k] = v
            self._size += cost
            while self._size > self._max:
                old_key, old_value = self._data.popitem(last=False)
                self._size -= len(old_key) + len(old_value)

    def delete(self, key) -> None:
        with self._lock:
            self._drop(_b(key))

    def reset(self) -> None:
        with self._lock:
            self._data.clear()
            self._size = 0

    def __len__(self) -> int:
        return len(self._data)

    def _drop(self, k: bytes) -> None:
        value = self._data.pop(k, None)
        if value is not None:
            self._size -= len(k) + len(value)


def _to_json(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"cannot serialise {type(obj).__name__}")


def obj_cached_set(cache: Cache, key, value: Any) -> None:
    """Store text and bytes as they are, anything else as JSON; unserialisable values are skipped."""
    if isinstance(value, str):
        data = value.encode("utf-8")
    elif isinstance(value, (bytes, bytearray)):
        data = bytes(value)
    else:
        try:
            data = json.dumps(
                value, default=_to_json, ensure_ascii=False, separators=(",", ":")
            ).encode("utf-8")
        except (TypeError, ValueError):
            return
    cache.set(key, data)


def obj_cached_get(cache: Cache, key, raw: bool = False) -> Any:
    """Return the cached bytes when ``raw``, else the decoded JSON; None when missing or undecodable."""
    data = cache.get(key)
    if not data:
        return None
    if raw:
        return data
    try:
        return json.loads(data)
    except ValueError:
        return None