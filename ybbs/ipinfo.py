"""Known client addresses and the names seen behind them."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields

from ybbs.const import TBN_IP_INFO
from ybbs.store import Store


@dataclass
class IpInfo:
    ip: str = ""
    names: str = ""
    add_time: int = 0
    up_time: int = 0


def _decode(data: bytes) -> IpInfo | None:
    try:
        raw = json.loads(data)
    except ValueError:
        return None
    if not isinstance(raw, dict):
        return None
    known = {f.name for f in fields(IpInfo)}
    return IpInfo(**{k: v for k, v in raw.items() if k in known})


def ip_info_get_by_key_start(db: Store, key_start: str, limit: int) -> list[IpInfo]:
    """Entries after ``key_start`` in address order; undecodable ones are skipped."""
    start = key_start.encode("utf-8") if key_start else None
    return [
        info
        for _, value in db.hscan(TBN_IP_INFO, start, limit)
        if (info := _decode(value)) is not None
    ]