"""Persistent hash and sorted-set tables kept in SQLite.

Keys are byte strings ordered bytewise; numbers are stored as 8-byte
big-endian integers so that their byte order matches numeric order.
"""

from __future__ import annotations

import os
import sqlite3
import threading
from collections.abc import Iterable, Mapping

_U64_MAX = 2**64 - 1
_DB_FILE = "store.sqlite3"


def i2b(n: int) -> bytes:
    """Encode an unsigned 64-bit integer as 8 big-endian bytes."""
    if not 0 <= n <= _U64_MAX:
        raise ValueError(f"value out of uint64 range: {n}")
    return n.to_bytes(8, "big")


def b2i(data: bytes) -> int:
    """Decode big-endian bytes into an integer."""
    return int.from_bytes(data, "big")


def _b(value: bytes | bytearray | str | None) -> bytes:
    if value is None:
        return b""
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class Store:
    """A small key-value store with named hash and sorted-set tables."""

    def __init__(self, path: str | os.PathLike = ":memory:"):
        if os.fspath(path) == ":memory:":
            target = ":memory:"
        else:
            os.makedirs(path, exist_ok=True)
            target = os.path.join(path, _DB_FILE)
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(target, check_same_thread=False)
        with self._conn:
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS hash (name TEXT NOT NULL, key BLOB NOT NULL,"
                " value BLOB NOT NULL, PRIMARY KEY (name, key)) WITHOUT ROWID"
            )
            self._conn.execute(
                "CREATE TABLE IF NOT EXISTS zset (name TEXT NOT NULL, key BLOB NOT NULL,"
                " score BLOB NOT NULL, PRIMARY KEY (name, key)) WITHOUT ROWID"
            )
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS zset_score ON zset (name, score, key)"
            )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def __enter__(self) -> Store:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def _query(self, sql: str, params: tuple) -> list[tuple]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()

    # hash tables

    def hget(self, name: str, key) -> bytes | None:
        rows = self._query("SELECT value FROM hash WHERE name = ? AND key = ?", (name, _b(key)))
        return bytes(rows[0][0]) if rows else None

    def hset(self, name: str, key, value) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO hash (name, key, value) VALUES (?, ?, ?)",
                (name, _b(key), _b(value)),
            )

    def hmset(self, name: str, pairs: Mapping | Iterable[tuple]) -> None:
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        rows = [(name, _b(k), _b(v)) for k, v in items]
        with self._lock, self._conn:
            self._conn.executemany(
                "INSERT OR REPLACE INTO hash (name, key, value) VALUES (?, ?, ?)", rows
            )

    def hdel(self, name: str, key) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM hash WHERE name = ? AND key = ?", (name, _b(key)))

    def hincr(self, name: str, key, step: int = 1) -> int:
        """Add ``step`` to a counter and return the new value (never below zero)."""
        with self._lock:
            current = self.hget(name, key)
            value = max(0, (b2i(current) if current else 0) + step)
            self.hset(name, key, i2b(value))
            return value

    def hget_int(self, name: str, key) -> int:
        data = self.hget(name, key)
        return b2i(data) if data else 0

    def hmget(self, name: str, keys: Iterable) -> list[tuple[bytes, bytes]]:
        """Return ``(key, value)`` for each existing key, in the order asked."""
        found = []
        for key in keys:
            value = self.hget(name, key)
            if value is not None:
                found.append((_b(key), value))
        return found

    def hscan(self, name: str, key_start, limit: int) -> list[tuple[bytes, bytes]]:
        """Entries with keys after ``key_start``, ascending."""
        if limit <= 0:
            return []
        start = _b(key_start)
        if start:
            sql = "SELECT key, value FROM hash WHERE name = ? AND key > ? ORDER BY key LIMIT ?"
            params: tuple = (name, start, limit)
        else:
            sql = "SELECT key, value FROM hash WHERE name = ? ORDER BY key LIMIT ?"
            params = (name, limit)
        return [(bytes(k), bytes(v)) for k, v in self._query(sql, params)]

    def hrscan(self, name: str, key_start, limit: int) -> list[tuple[bytes, bytes]]:
        """Entries with keys before ``key_start``, descending."""
        if limit <= 0:
            return []
        start = _b(key_start)
        if start:
            sql = "SELECT key, value FROM hash WHERE name = ? AND key < ? ORDER BY key DESC LIMIT ?"
            params: tuple = (name, start, limit)
        else:
            sql = "SELECT key, value FROM hash WHERE name = ? ORDER BY key DESC LIMIT ?"
            params = (name, limit)
        return [(bytes(k), bytes(v)) for k, v in self._query(sql, params)]

    # sorted sets

    def zset(self, name: str, key, score: int) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                "INSERT OR REPLACE INTO zset (name, key, score) VALUES (?, ?, ?)",
                (name, _b(key), i2b(score)),
            )

    def zget(self, name: str, key) -> int | None:
        rows = self._query("SELECT score FROM zset WHERE name = ? AND key = ?", (name, _b(key)))
        return b2i(rows[0][0]) if rows else None

    def zdel(self, name: str, key) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM zset WHERE name = ? AND key = ?", (name, _b(key)))

    def zincr(self, name: str, key, step: int = 1) -> int:
        """Add ``step`` to a score and return the new score (never below zero)."""
        with self._lock:
            value = max(0, (self.zget(name, key) or 0) + step)
            self.zset(name, key, value)
            return value

    def zscan(self, name: str, key_start, score_start: int | None, limit: int) -> list[tuple[bytes, int]]:
        """Members after ``(score_start, key_start)``, by ascending score then key."""
        return self._zrange(name, key_start, score_start, limit, reverse=False)

    def zrscan(self, name: str, key_start, score_start: int | None, limit: int) -> list[tuple[bytes, int]]:
        """Members before ``(score_start, key_start)``, by descending score then key."""
        return self._zrange(name, key_start, score_start, limit, reverse=True)

    def _zrange(self, name, key_start, score_start, limit, reverse):
        if limit <= 0:
            return []
        order = "DESC" if reverse else "ASC"
        where = "name = ?"
        params: list = [name]
        if score_start is not None:
            score = i2b(score_start)
            key = _b(key_start)
            if key:
                op = "<" if reverse else ">"
                where += f" AND (score {op} ? OR (score = ? AND key {op} ?))"
                params += [score, score, key]
            else:
                op = "<=" if reverse else ">="
                where += f" AND score {op} ?"
                params.append(score)
        sql = f"SELECT key, score FROM zset WHERE {where} ORDER BY score {order}, key {order} LIMIT ?"
        params.append(limit)
        return [(bytes(k), b2i(s)) for k, s in self._query(sql, tuple(params))]