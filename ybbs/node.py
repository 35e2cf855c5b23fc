"""Nodes: the categories topics are posted in."""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from dataclasses import asdict, dataclass, fields, replace

from ybbs.cache import Cache, obj_cached_get, obj_cached_set
from ybbs.const import COUNT_TB
from ybbs.store import Store, b2i, i2b

NODE_TB_NAME = "node"
NODE_TOPIC_NUM_TB_NAME = "node_topic_num"
NODE_GET_ALL_CACHE_KEY = "NodeGetAll"

_name_cache: dict[int, str] = {}
_name_cache_lock = threading.Lock()


@dataclass
class Node:
    id: int = 0
    name: str = ""
    about: str = ""
    score: int = 0
    topic_num: int = 0


def _from_dict(raw) -> Node | None:
    if not isinstance(raw, dict):
        return None
    known = {f.name for f in fields(Node)}
    return Node(**{k: v for k, v in raw.items() if k in known})


def _decode(data: bytes) -> Node | None:
    try:
        return _from_dict(json.loads(data))
    except ValueError:
        return None


def node_set(db: Store, obj: Node) -> Node:
    """Save a node; a node without id gets the next one."""
    if obj.id == 0:
        obj = replace(obj, id=db.hincr(COUNT_TB, NODE_TB_NAME, 1))
    data = json.dumps(asdict(obj), ensure_ascii=False, separators=(",", ":"))
    db.hset(NODE_TB_NAME, i2b(obj.id), data)
    with _name_cache_lock:
        _name_cache[obj.id] = obj.name
    return obj


def node_get_by_id(db: Store, node_id: int) -> Node | None:
    """The node with its topic count, or None."""
    data = db.hget(NODE_TB_NAME, i2b(node_id))
    if data is None:
        return None
    node = _decode(data)
    if node is None:
        return None
    node.topic_num = db.hget_int(NODE_TOPIC_NUM_TB_NAME, i2b(node.id))
    return node


def node_get_all(mc: Cache, db: Store) -> list[Node]:
    """The first hundred nodes with their topic counts, cached."""
    cached = obj_cached_get(mc, NODE_GET_ALL_CACHE_KEY)
    if isinstance(cached, list):
        nodes = [_from_dict(item) for item in cached]
        if all(node is not None for node in nodes):
            return nodes

    keys: list[bytes] = []
    nodes = []
    for key, value in db.hscan(NODE_TB_NAME, None, 100):
        node = _decode(value)
        if node is None:
            continue
        keys.append(key)
        nodes.append(node)

    counts = {b2i(k): b2i(v) for k, v in db.hmget(NODE_TOPIC_NUM_TB_NAME, keys)}
    for node in nodes:
        node.topic_num = counts.get(node.id, 0)

    obj_cached_set(mc, NODE_GET_ALL_CACHE_KEY, nodes)
    return nodes


def node_get_names_by_ids(db: Store, ids: Iterable[int]) -> dict[int, str]:
    """Map of node id to name, served from a process-wide cache where possible."""
    names: dict[int, str] = {}
    missing = []
    with _name_cache_lock:
        for nid in ids:
            if nid in _name_cache:
                names[nid] = _name_cache[nid]
            else:
                missing.append(i2b(nid))
    if missing:
        for key, value in db.hmget(NODE_TB_NAME, missing):
            node = _decode(value)
            name = node.name if node is not None else ""
            nid = b2i(key)
            names[nid] = name
            with _name_cache_lock:
                _name_cache[nid] = name
    return names