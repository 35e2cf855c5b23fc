"""Timestamp formatting and human-readable ages."""

from __future__ import annotations

import re
import time
from datetime import datetime, timedelta, timezone

from ybbs.const import TIME_OFFSET

DEFAULT_LAYOUT = "%Y-%m-%d %H:%M:%S"
RFC3339 = "%Y-%m-%dT%H:%M:%SZ"
STAMP = "%b %e %H:%M:%S"

_INT_RE = re.compile(r"[+-]?\d+")

_CLOCKS = {
    f"{hour}:{half}": f"&#x{0x1F550 + half * 12 + hour - 1:X};"
    for hour in range(1, 13)
    for half in (0, 1)
}


def _to_int(ts) -> int | None:
    if isinstance(ts, int):
        return int(ts)
    if isinstance(ts, str):
        return int(ts) if _INT_RE.fullmatch(ts) else None
    return 0


def time_fmt(ts: int, layout: str = "") -> str:
    """Format a Unix timestamp in UTC with a strftime layout (``%e`` is a space-padded day)."""
    layout = layout or DEFAULT_LAYOUT
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    if "%e" in layout:
        layout = layout.replace("%e", f"{dt.day:2d}")
    return dt.strftime(layout)


def get_cntm(offset: timedelta = TIME_OFFSET) -> int:
    """Current Unix time shifted by ``offset``."""
    return int(time.time() + offset.total_seconds())


def time_human(ts, offset: timedelta = TIME_OFFSET, now: float | None = None) -> str:
    """Describe how long ago ``ts`` was; an unparsable string gives an empty result."""
    t = _to_int(ts)
    if t is None:
        return ""
    if now is None:
        now = time.time()
    seconds = now + offset.total_seconds() - t
    hours = seconds / 3600
    days = int(hours) // 24
    if days > 0:
        if days >= 365:
            y, d = divmod(days, 365)
            return f"{y}年前" if d == 0 else f"{y}年{d}天前"
        if days >= 30:
            m, d = divmod(days, 30)
            return f"{m}月前" if d == 0 else f"{m}月{d}天前"
        if days >= 7:
            w, d = divmod(days, 7)
            return f"{w}周前" if d == 0 else f"{w}周{d}天前"
        h = int(hours) % 24
        return f"{days}天前" if h == 0 else f"{days}天{h}小时前"

    if seconds >= 3600:
        h = int(seconds / 3600)
        rest = int(seconds) % 3600
        return f"{h}小时前" if rest == 0 else f"{h}小时{rest // 60}分前"
    if seconds >= 60:
        m = int(seconds / 60)
        s = int(seconds) % 60
        return f"{m}分钟前" if s == 0 else f"{m}分{s}秒前"
    return "刚刚"


def get_time_unicode_clock(ts) -> str:
    """HTML entity of the clock-face emoji for the time of ``ts``."""
    t = _to_int(ts)
    if t is None:
        return ""
    dt = datetime.fromtimestamp(t, tz=timezone.utc)
    return _CLOCKS[f"{dt.hour % 12 + 1}:{dt.minute // 30}"]