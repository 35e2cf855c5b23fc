"""Process-wide mutable state shared by the request handlers."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ybbs.safeslice import SafeStrList


@dataclass
class AppState:
    """Rate limits, IP and bot filters and the logged-in user map."""

    rate_limit_day: int = 0
    rate_limit_hour: int = 0
    bad_ip_prefixes: SafeStrList = field(default_factory=SafeStrList, compare=False)
    allow_ip_prefixes: SafeStrList = field(default_factory=SafeStrList, compare=False)
    bad_bot_names: dict[str, Any] = field(default_factory=dict)
    users: dict[int, Any] = field(default_factory=dict)
    users_lock: Any = field(default_factory=threading.RLock, compare=False, repr=False)


STATE = AppState()


def sync_dict(target: dict, source: dict) -> None:
    """Make ``target`` equal to ``source`` in place, dropping keys that ``source`` lacks."""
    for key in [k for k in target if k not in source]:
        del target[key]
    target.update(source)