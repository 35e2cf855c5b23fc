"""Friendly links shown in the sidebar."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace

from ybbs.cache import Cache, obj_cached_get, obj_cached_set
from ybbs.store import Store, b2i, i2b

LINK_TB_NAME = "link"
LINK_LIST_CACHE_KEY = "LinkList"


@dataclass
class Link:
    id: int = 0
    name: str = ""
    url: str = ""
    score: int = 0


def _from_dict(raw) -> Link | None:
    if not isinstance(raw, dict):
        return None
    known = {f.name for f in fields(Link)}
    return Link(**{k: v for k, v in raw.items() if k in known})


def _decode(data: bytes) -> Link | None:
    try:
        return _from_dict(json.loads(data))
    except ValueError:
        return None


def link_get_by_id(db: Store, lid) -> Link | None:
    """The link with this id (a number or decimal string), or None."""
    try:
        n = int(lid)
        key = i2b(n)
    except (TypeError, ValueError):
        return None
    data = db.hget(LINK_TB_NAME, key)
    return _decode(data) if data is not None else None


def link_set(db: Store, obj: Link) -> Link:
    """Save a link; a link without id gets one more than the highest."""
    if obj.id == 0:
        last = db.hrscan(LINK_TB_NAME, None, 1)
        new_id = (b2i(last[0][0]) if last else 0) + 1
        obj = replace(obj, id=new_id)
    data = json.dumps(asdict(obj), ensure_ascii=False, separators=(",", ":"))
    db.hset(LINK_TB_NAME, i2b(obj.id), data)
    return obj


def link_list(mc: Cache, db: Store, get_all: bool = False) -> list[Link]:
    """Links by descending score; without ``get_all`` only positive scores, cached."""
    if not get_all:
        cached = obj_cached_get(mc, LINK_LIST_CACHE_KEY)
        if isinstance(cached, list):
            links = [_from_dict(item) for item in cached]
            if all(link is not None for link in links):
                return links

    items: dict[int, Link] = {}
    start = b""
    while rows := db.hscan(LINK_TB_NAME, start, 20):
        for key, value in rows:
            start = key
            link = _decode(value) or Link()
            if get_all or link.score > 0:
                items[b2i(key)] = link

    links = [items[k] for k in sorted(items, key=lambda k: (-items[k].score, k))]
    if links and not get_all:
        obj_cached_set(mc, LINK_LIST_CACHE_KEY, links)
    return links