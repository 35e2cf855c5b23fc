"""Small string and hashing helpers."""

from __future__ import annotations

import hashlib
import struct

_BASE62 = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"

_M = 0xFFFFFFFFFFFFFFFF
_P1 = 0x9E3779B185EBCA87
_P2 = 0xC2B2AE3D27D4EB4F
_P3 = 0x165667B19E3779F9
_P4 = 0x85EBCA77C2B2AE63
_P5 = 0x27D4EB2F165667C5


def md5(text: str) -> str:
    """Hex MD5 digest of a string."""
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def _rotl(x: int, r: int) -> int:
    return ((x << r) | (x >> (64 - r))) & _M


def _round(acc: int, lane: int) -> int:
    acc = (acc + lane * _P2) & _M
    return (_rotl(acc, 31) * _P1) & _M


def _merge(acc: int, val: int) -> int:
    acc ^= _round(0, val)
    return (acc * _P1 + _P4) & _M


def xxhash64(data: bytes | bytearray | str) -> int:
    """XXH64 of ``data`` with seed 0."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    data = bytes(data)
    n = len(data)
    pos = 0
    if n >= 32:
        v1 = (_P1 + _P2) & _M
        v2 = _P2
        v3 = 0
        v4 = (-_P1) & _M
        while pos + 32 <= n:
            a, b, c, d = struct.unpack_from("<4Q", data, pos)
            v1, v2, v3, v4 = _round(v1, a), _round(v2, b), _round(v3, c), _round(v4, d)
            pos += 32
        h = (_rotl(v1, 1) + _rotl(v2, 7) + _rotl(v3, 12) + _rotl(v4, 18)) & _M
        for v in (v1, v2, v3, v4):
            h = _merge(h, v)
    else:
        h = _P5
    h = (h + n) & _M
    while pos + 8 <= n:
        (lane,) = struct.unpack_from("<Q", data, pos)
        h ^= _round(0, lane)
        h = (_rotl(h, 27) * _P1 + _P4) & _M
        pos += 8
    if pos + 4 <= n:
        (lane,) = struct.unpack_from("<I", data, pos)
        h ^= (lane * _P1) & _M
        h = (_rotl(h, 23) * _P2 + _P3) & _M
        pos += 4
    for byte in data[pos:]:
        h ^= (byte * _P5) & _M
        h = (_rotl(h, 11) * _P1) & _M
    h ^= h >> 33
    h = (h * _P2) & _M
    h ^= h >> 29
    h = (h * _P3) & _M
    h ^= h >> 32
    return h


def get_domain_from_url(full_url: str) -> tuple[str, str]:
    """Return ``(scheme://host, host)``, or two empty strings when there is no host part."""
    parts = full_url.split("/")
    if len(parts) <= 2:
        return "", ""
    return "/".join(parts[:3]), parts[2]


def slice_uniq_str(s: str, sep: str = ",") -> str:
    """Split, strip, drop empties and duplicates, sort and join again."""
    sep = sep or ","
    unique = {part.strip() for part in s.split(sep)} - {""}
    return sep.join(sorted(unique))


def ip_trim_right_dot(s: str) -> str:
    """Drop a trailing dot unless the last part could still be a prefix of a larger octet."""
    if not s.endswith("."):
        return s
    s = s[:-1]
    last = s.split(".")[-1]
    try:
        last_part = int(last)
    except ValueError:
        last_part = 0
    return s if last_part > 25 else s + "."


def ten_to_62(n: int) -> str:
    """Write a non-negative integer in base 62 using 0-9a-zA-Z."""
    if n < 0:
        raise ValueError("negative number")
    digits = []
    while True:
        n, rem = divmod(n, 62)
        digits.append(_BASE62[rem])
        if n == 0:
            break
    return "".join(reversed(digits))