"""Custom routes that serve stored content under a path."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields

from ybbs.store import Store

CUSTOM_ROUTER_TB = "custom_router"


@dataclass
class CustomRouter:
    router: str = ""
    mime_type: str = ""
    content: str = ""


def _decode(data: bytes) -> CustomRouter:
    try:
        raw = json.loads(data)
    except ValueError:
        return CustomRouter()
    if not isinstance(raw, dict):
        return CustomRouter()
    known = {f.name for f in fields(CustomRouter)}
    return CustomRouter(**{k: v for k, v in raw.items() if k in known})


def custom_router_get_all(db: Store) -> list[CustomRouter]:
    """Every custom route, ordered by path."""
    routes = []
    start = None
    while rows := db.hscan(CUSTOM_ROUTER_TB, start, 20):
        for key, value in rows:
            start = key
            routes.append(_decode(value))
    return routes


def custom_router_set(db: Store, obj: CustomRouter) -> None:
    """Save a route under its path."""
    data = json.dumps(asdict(obj), ensure_ascii=False, separators=(",", ":"))
    db.hset(CUSTOM_ROUTER_TB, obj.router, data)


def custom_router_get_by_key(db: Store, key) -> CustomRouter | None:
    """The route stored under ``key``, or None."""
    data = db.hget(CUSTOM_ROUTER_TB, key)
    return _decode(data) if data is not None else None