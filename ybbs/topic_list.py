"""Paged topic listings: timelines, archives, search and message topics."""

from __future__ import annotations

import json
from dataclasses import asdict, fields
from datetime import datetime, timedelta, timezone
from typing import Any

from ybbs.cache import Cache, obj_cached_get, obj_cached_set
from ybbs.comment import comment_get_num_by_keys
from ybbs.const import TIME_OFFSET
from ybbs.content import get_desc
from ybbs.node import node_get_names_by_ids
from ybbs.records import Msg
from ybbs.store import Store, b2i, i2b
from ybbs.timefmt import RFC3339, time_fmt, time_human
from ybbs.topic import (
    TOPIC_TB_NAME,
    Topic,
    TopicLstLi,
    TopicLstLiMsg,
    TopicPageInfo,
    TopicPageInfoMsg,
)
from ybbs.user import user_get_names_by_ids

SEARCH_CACHE_PREFIX = "SearchTopicList:"
CONTENT_QUERY_PREFIX = "c:"

_MSG_LIMIT = 10
_SEARCH_BATCH = 20
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _utc(ts: int) -> datetime:
    return _EPOCH + timedelta(seconds=ts)


def _stamp(ts: int) -> str:
    dt = _utc(ts)
    return f"{dt:%b} {dt.day:2d} {dt:%H:%M:%S}"


def _from_dict(cls, raw: Any):
    if not isinstance(raw, dict):
        return None
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in raw.items() if k in known})


def _load(cls, data: bytes):
    try:
        raw = json.loads(data)
    except ValueError:
        return None
    return _from_dict(cls, raw)


def _key_cursor(value: str) -> bytes | None:
    return i2b(int(value)) if value else None


def _score_cursor(value: str) -> int | None:
    return int(value) if value else None


def _load_topics(db: Store, keys: list[bytes]) -> list[Topic]:
    """Topics stored under ``keys``, in order, with their comment counts."""
    if not keys:
        return []
    comments = comment_get_num_by_keys(db, keys)
    topics = []
    for _, value in db.hmget(TOPIC_TB_NAME, keys):
        topic = _load(Topic, value) or Topic()
        topic.comments = comments.get(topic.id, 0)
        topics.append(topic)
    return topics


def _names(db: Store, topics: list[Topic]) -> tuple[dict[int, str], dict[int, str]]:
    user_ids = list(dict.fromkeys(t.user_id for t in topics))
    node_ids = list(dict.fromkeys(t.node_id for t in topics))
    return user_get_names_by_ids(db, user_ids), node_get_names_by_ids(db, node_ids)


def _archive_items(db: Store, topics: list[Topic]) -> list[TopicLstLi]:
    users, nodes = _names(db, topics)
    seen_years: set[str] = set()
    items = []
    for topic in topics:
        dt = _utc(topic.add_time)
        year, month, date = f"{dt:%Y}", f"{dt:%b}", f"{dt:%d}"
        item = TopicLstLi(
            **asdict(topic),
            first_con=get_desc(topic.content),
            author_name=users.get(topic.user_id, ""),
            edit_time_fmt=_stamp(topic.edit_time),
            node_name=nodes.get(topic.node_id, ""),
            add_year=year,
            add_month=month,
            add_date=date,
        )
        if year not in seen_years:
            seen_years.add(year)
            item.add_year_show = year
        items.append(item)
    return items


def get_topic_list(
    db: Store, cmd: str, table: str, key: str, score: str, limit: int
) -> TopicPageInfo:
    """A page of a sorted timeline; ``cmd`` is ``zrscan`` (older) or ``zscan`` (newer)."""
    key_start = _key_cursor(key)
    score_start = _score_cursor(score)
    if cmd == "zrscan":
        rows = list(db.zrscan(table, key_start, score_start, limit))
    elif cmd == "zscan":
        rows = list(reversed(list(db.zscan(table, key_start, score_start, limit))))
    else:
        rows = []
    if not rows:
        return TopicPageInfo()

    edit_times = {b2i(k): int(s) for k, s in rows}
    first_key, first_score = b2i(rows[0][0]), int(rows[0][1])
    last_key = last_score = 0
    if len(rows) > 1:
        last_key, last_score = b2i(rows[-1][0]), int(rows[-1][1])

    topics = _load_topics(db, [k for k, _ in rows])
    users, nodes = _names(db, topics)
    items = [
        TopicLstLi(
            **asdict(topic),
            author_name=users.get(topic.user_id, ""),
            add_time_fmt=time_fmt(topic.add_time, RFC3339),
            edit_time_fmt=time_human(edit_times.get(topic.id, 0), TIME_OFFSET, None),
            node_name=nodes.get(topic.node_id, ""),
        )
        for topic in topics
    ]

    return TopicPageInfo(
        items=items,
        has_prev=bool(db.zscan(table, i2b(first_key), first_score, 1)),
        has_next=bool(db.zrscan(table, i2b(last_key), last_score, 1)),
        first_key=first_key,
        first_score=first_score,
        last_key=last_key,
        last_score=last_score,
    )


def get_topic_list_archives(
    db: Store, cmd: str, table: str, key: str, limit: int
) -> TopicPageInfo:
    """A page of an archive table keyed by topic id, for node and tag pages."""
    key_start = _key_cursor(key)
    if cmd == "zrscan":
        keys = [k for k, _ in db.hrscan(table, key_start, limit)]
    elif cmd == "zscan":
        keys = [k for k, _ in reversed(list(db.hscan(table, key_start, limit)))]
    else:
        keys = []
    if not keys:
        return TopicPageInfo()

    items = _archive_items(db, _load_topics(db, keys))
    first_key = next((item.id for item in items if item.id), 0)
    last_key = items[-1].id if items else 0
    return TopicPageInfo(
        items=items,
        has_prev=bool(db.hscan(table, i2b(first_key), 1)),
        has_next=bool(db.hrscan(table, i2b(last_key), 1)),
        first_key=first_key,
        last_key=last_key,
    )


def _page_from_cache(raw: Any) -> TopicPageInfo | None:
    if not isinstance(raw, dict):
        return None
    items_raw = raw.get("items")
    if not isinstance(items_raw, list) or not all(isinstance(i, dict) for i in items_raw):
        return None
    known = {f.name for f in fields(TopicPageInfo)} - {"items"}
    rest = {k: v for k, v in raw.items() if k in known}
    return TopicPageInfo(items=[_from_dict(TopicLstLi, i) for i in items_raw], **rest)


def search_topic_list(mc: Cache, db: Store, q: str, limit: int) -> TopicPageInfo:
    """Newest topics whose title, or with a ``c:`` prefix whose content, contains ``q``."""
    in_content = q.startswith(CONTENT_QUERY_PREFIX)
    if in_content:
        q = q[len(CONTENT_QUERY_PREFIX):].strip()
    if not q:
        return TopicPageInfo()
    q_low = q.lower()

    cache_key = f"{SEARCH_CACHE_PREFIX}{CONTENT_QUERY_PREFIX if in_content else ''}{q_low}"
    cached = _page_from_cache(obj_cached_get(mc, cache_key))
    if cached is not None:
        return cached

    found: list[Topic] = []
    keys: list[bytes] = []
    start = None
    while rows := db.hrscan(TOPIC_TB_NAME, start, _SEARCH_BATCH):
        for key, value in rows:
            start = key
            topic = _load(Topic, value)
            if topic is None:
                continue
            haystack = topic.content if in_content else topic.title
            if q_low in haystack.lower() and len(found) < limit:
                keys.append(key)
                found.append(topic)
        if len(found) >= limit:
            break

    comments = comment_get_num_by_keys(db, keys) if keys else {}
    for topic in found:
        topic.comments = comments.get(topic.id, 0)
    items = _archive_items(db, found)

    page = TopicPageInfo(items=items)
    if items:
        page.first_key, page.first_score = items[0].id, items[0].edit_time
        page.last_key, page.last_score = items[-1].id, items[-1].edit_time
        obj_cached_set(mc, cache_key, page)
    return page


def get_msg_topic_list(db: Store, uid: int) -> TopicPageInfoMsg:
    """Topics the user was notified about, the latest notice first."""
    msgs: dict[int, Msg] = {}
    keys: list[bytes] = []
    for key, value in db.hscan(f"user_msg:{uid}", None, _MSG_LIMIT):
        msg = _load(Msg, value)
        if msg is None:
            continue
        msgs[msg.topic_id] = msg
        keys.append(key)
    if not keys:
        return TopicPageInfoMsg()

    topics = {topic.id: topic for topic in _load_topics(db, keys)}
    users, nodes = _names(db, list(topics.values()))

    items = []
    for notice in sorted(msgs.values(), key=lambda m: m.add_time, reverse=True):
        topic = topics.get(notice.topic_id, Topic())
        msg = msgs.get(topic.id, Msg())
        href = f"/t/{msg.topic_id}"
        if msg.comment_id > 0:
            href += f"#comment-{msg.comment_id}"
        items.append(
            TopicLstLiMsg(
                **asdict(topic),
                author_name=users.get(topic.user_id, ""),
                edit_time_fmt=time_human(topic.edit_time, TIME_OFFSET, None),
                node_name=nodes.get(topic.node_id, ""),
                href=href,
            )
        )
    return TopicPageInfoMsg(items=items)