"""Topics: storage, timeline indexes, review queue, feeds and related topics."""

from __future__ import annotations

import json
from collections import Counter
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any

from ybbs.cache import Cache, obj_cached_get, obj_cached_set
from ybbs.const import COUNT_TB, TBN_POST_UPDATE
from ybbs.content import get_desc
from ybbs.node import NODE_GET_ALL_CACHE_KEY, NODE_TOPIC_NUM_TB_NAME
from ybbs.store import Store, b2i, i2b
from ybbs.tag import TAG_ARTICLE_NUM_TB, TAG_TB_NAME, TAGS_FOR_SIDE_CACHE_KEY
from ybbs.timefmt import RFC3339, time_fmt

TOPIC_TB_NAME = "topic"
TOPIC_REVIEW_TB_NAME = "review_topic"
READ_MORE_BREAK = "<!-- read more -->"
TOPIC_ALL_NUMBER_KEY = "topic:all_number"
TAG_COUNT_TB = "tag_count"
RELATIVE_CACHE_PREFIX = "TopicGetRelative:"

_RELATIVE_MAX = 10
_RELATIVE_SCAN_MAX = 100
_REVIEW_LIMIT = 10


@dataclass
class Topic:
    id: int = 0
    node_id: int = 0
    user_id: int = 0
    title: str = ""
    content: str = ""
    client_ip: str = ""
    tags: str = ""
    read_authed: bool = False
    read_reply: bool = False
    add_time: int = 0
    edit_time: int = 0
    comments: int = 0


@dataclass
class TopicRecForm:
    """A topic as submitted, waiting for review."""

    id: int = 0
    act: str = ""
    node_id: int = 0
    user_id: int = 0
    title: str = ""
    content: str = ""
    tags: str = ""
    read_authed: bool = False
    read_reply: bool = False
    add_time: int = 0
    add_time_fmt: str = ""


@dataclass
class TopicTag:
    """Tag change of a topic, handed to the background tag job."""

    id: int = 0
    old_tags: str = ""
    new_tags: str = ""


@dataclass
class TopicLoc:
    """Sitemap entry."""

    id: int = 0
    title: str = ""
    slug: str = ""
    add_time: int = 0


@dataclass
class TopicLi:
    id: int = 0
    title: str = ""


@dataclass
class TopicLstLi(Topic):
    first_con: str = ""
    author_name: str = ""
    add_time_fmt: str = ""
    edit_time_fmt: str = ""
    node_name: str = ""
    add_year_show: str = ""
    add_year: str = ""
    add_month: str = ""
    add_date: str = ""


@dataclass
class TopicLstLiMsg(TopicLstLi):
    href: str = ""


@dataclass
class TopicPageInfo:
    items: list[TopicLstLi] = field(default_factory=list)
    has_prev: bool = False
    has_next: bool = False
    first_key: int = 0
    first_score: int = 0
    last_key: int = 0
    last_score: int = 0


@dataclass
class TopicPageInfoMsg:
    items: list[TopicLstLiMsg] = field(default_factory=list)


@dataclass
class TopicFmt(Topic):
    """A topic prepared for its detail page."""

    name: str = ""
    views: int = 0
    add_time_fmt: str = ""
    edit_time_fmt: str = ""
    content_fmt: str = ""
    clock_emoji: str = ""
    relative: list[TopicLi] = field(default_factory=list)


@dataclass
class TopicFeed(Topic):
    add_time_fmt: str = ""
    edit_time_fmt: str = ""
    des: str = ""


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


def _dumps(obj) -> bytes:
    return json.dumps(asdict(obj), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _html_escape(text: str) -> str:
    return (
        text.replace("&", "&amp;")
        .replace("'", "&#39;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&#34;")
    )


def topic_set(db: Store, obj: Topic) -> Topic:
    """Save a topic as it is, without touching any index."""
    db.hset(TOPIC_TB_NAME, i2b(obj.id), _dumps(obj))
    return obj


def topic_add(mc: Cache, db: Store, obj: Topic) -> Topic:
    """Store a new topic under the next id and add it to every timeline."""
    obj = replace(obj, id=db.hincr(COUNT_TB, TOPIC_TB_NAME, 1))
    key = i2b(obj.id)
    db.hset(TOPIC_TB_NAME, key, _dumps(obj))
    db.zset(TBN_POST_UPDATE, key, obj.add_time)
    db.zset(f"topic_update:{obj.node_id}", key, obj.add_time)
    db.zset(f"user_topic:{obj.user_id}", key, obj.add_time)
    db.hset(f"topic_node:{obj.node_id}", key, i2b(obj.add_time))
    db.hincr(NODE_TOPIC_NUM_TB_NAME, i2b(obj.node_id), 1)
    db.hincr(COUNT_TB, TOPIC_ALL_NUMBER_KEY, 1)
    mc.delete(NODE_GET_ALL_CACHE_KEY)
    return obj


def topic_del(mc: Cache, db: Store, obj: Topic) -> None:
    """Remove a topic, its timeline entries and its tag references."""
    key = i2b(obj.id)
    db.zdel(TBN_POST_UPDATE, key)
    db.zdel(f"topic_update:{obj.node_id}", key)
    db.zdel(f"user_topic:{obj.user_id}", key)
    db.hdel(f"topic_node:{obj.node_id}", key)
    db.hincr(NODE_TOPIC_NUM_TB_NAME, i2b(obj.node_id), -1)
    db.hincr(COUNT_TB, TOPIC_ALL_NUMBER_KEY, -1)
    for tag in obj.tags.split(",") if obj.tags else ():
        tag_lower = tag.lower()
        if not tag_lower:
            continue
        table = f"{TAG_TB_NAME}:{tag_lower}"
        db.hdel(table, key)
        if db.hscan(table, None, 1):
            db.zincr(TAG_ARTICLE_NUM_TB, tag_lower, -1)
        else:
            db.zdel(TAG_ARTICLE_NUM_TB, tag_lower)
            db.hdel(TAG_TB_NAME, tag_lower)
            db.hincr(TAG_COUNT_TB, TAG_TB_NAME, -1)
    db.hdel(TOPIC_TB_NAME, key)
    mc.delete(NODE_GET_ALL_CACHE_KEY)
    mc.delete(TAGS_FOR_SIDE_CACHE_KEY)


def topic_get_by_id(db: Store, tid: int) -> Topic | None:
    """The topic with this id, or None."""
    data = db.hget(TOPIC_TB_NAME, i2b(tid))
    return _load(Topic, data) if data is not None else None


def topic_get_titles_by_ids(db: Store, ids: Iterable[int]) -> dict[int, str]:
    """Map of topic id to title for the topics that exist."""
    keys = [i2b(tid) for tid in ids]
    if not keys:
        return {}
    titles: dict[int, str] = {}
    for key, value in db.hmget(TOPIC_TB_NAME, keys):
        topic = _load(Topic, value)
        titles[b2i(key)] = topic.title if topic is not None else ""
    return titles


def topic_get_relative(mc: Cache, db: Store, aid: int, tags: str) -> list[TopicLi]:
    """Up to ten topics sharing the most tags with topic ``aid``, cached."""
    if not tags:
        return []
    cache_key = f"{RELATIVE_CACHE_PREFIX}{aid}"
    cached = obj_cached_get(mc, cache_key)
    if isinstance(cached, list):
        items = [_from_dict(TopicLi, raw) for raw in cached]
        if all(item is not None for item in items):
            return items

    counts: Counter[int] = Counter()
    for tag in tags.lower().split(","):
        for key, _ in db.hrscan(f"{TAG_TB_NAME}:{tag}", None, _RELATIVE_SCAN_MAX):
            other = b2i(key)
            if other != aid:
                counts[other] += 1

    related: list[TopicLi] = []
    if counts:
        best = sorted(counts.items(), key=lambda kv: (-kv[1], -kv[0]))[:_RELATIVE_MAX]
        for _, value in db.hmget(TOPIC_TB_NAME, [i2b(tid) for tid, _ in best]):
            related.append(_load(TopicLi, value) or TopicLi())

    if related:
        obj_cached_set(mc, cache_key, related)
    return related


def topic_get_review_num(db: Store, uid: int) -> int:
    """Topics of the user waiting for review, counted up to ten."""
    return len(db.hscan(f"{TOPIC_REVIEW_TB_NAME}:{uid}", None, _REVIEW_LIMIT))


def topic_get_review(db: Store, uid: int) -> list[TopicRecForm]:
    """Topics of the user waiting for review, newest key first."""
    ids: list[bytes] = []
    start = None
    while rows := db.hrscan(f"{TOPIC_REVIEW_TB_NAME}:{uid}", start, _REVIEW_LIMIT):
        for key, _ in rows:
            start = key
            ids.append(key)
    if not ids:
        return []
    forms = []
    for _, value in db.hmget(TOPIC_REVIEW_TB_NAME, ids):
        form = _load(TopicRecForm, value)
        if form is None:
            continue
        form.add_time_fmt = time_fmt(form.add_time, "%Y-%m-%d %H:%M")
        forms.append(form)
    return forms


def check_has_topic_to_review(db: Store) -> bool:
    """True when any topic waits for review."""
    return bool(db.hscan(TOPIC_REVIEW_TB_NAME, None, 1))


def topic_get_for_feed(db: Store, limit: int) -> list[TopicFeed]:
    """Newest topics with escaped titles and descriptions for a feed."""
    feed = []
    for _, value in db.hrscan(TOPIC_TB_NAME, None, limit):
        item = _load(TopicFeed, value)
        if item is None:
            continue
        item.title = _html_escape(item.title)
        item.add_time_fmt = time_fmt(item.add_time, RFC3339)
        item.edit_time_fmt = time_fmt(item.edit_time, RFC3339)
        item.des = _html_escape(get_desc(item.content))
        feed.append(item)
    return feed


def article_get_nearby(db: Store, tid: int) -> tuple[TopicLi | None, TopicLi | None]:
    """The older and the newer neighbour of a topic; None where there is none."""
    key = i2b(tid)
    older = db.hrscan(TOPIC_TB_NAME, key, 1)
    newer = db.hscan(TOPIC_TB_NAME, key, 1)
    old_obj = (_load(TopicLi, older[0][1]) or TopicLi()) if older else None
    new_obj = (_load(TopicLi, newer[0][1]) or TopicLi()) if newer else None
    return old_obj, new_obj