"""Comments on topics: storage, notifications, listings and the review queue."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from ybbs.cache import Cache, obj_cached_get, obj_cached_set
from ybbs.const import COUNT_TB, TBN_POST_REPLY, TBN_POST_UPDATE, TIME_OFFSET
from ybbs.content import content_fmt, get_mention, get_short_con
from ybbs.records import Msg
from ybbs.store import Store, b2i, i2b
from ybbs.timefmt import get_cntm, time_fmt
from ybbs.topic import RELATIVE_CACHE_PREFIX, Topic, topic_get_by_id, topic_get_titles_by_ids
from ybbs.user import USER_NAME2UID_TB, user_get_by_ids, user_get_names_by_ids

COMMENT_TB_NAME = "comment:"
COMMENT_NUM_TB_NAME = "comment_count"
COMMENT_REVIEW_TB_NAME = "review_comment"
RECENT_COMMENT_TB = "recent_comment"
RECENT_CACHE_KEY = "CommentGetRecent"

_REVIEW_LIMIT = 10
_TIME_LAYOUT = "%Y-%m-%d %H:%M"


@dataclass
class Comment:
    id: int = 0
    reply_id: int = 0
    topic_id: int = 0
    user_id: int = 0
    add_time: int = 0
    content: str = ""
    client_ip: str = ""


@dataclass
class CommentFmt(Comment):
    name: str = ""
    add_time_fmt: str = ""
    link: str = ""
    content_fmt: str = ""


@dataclass
class CommentReview(Comment):
    """A comment waiting for review, with the title of its topic."""

    topic_title: str = ""
    add_time_fmt: str = ""
    content_fmt: str = ""


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


def _link(topic_id: int, comment_id: int) -> str:
    return f"/t/{topic_id}#r{comment_id}"


def comment_get_by_id(db: Store, tid: int, cid: int) -> Comment | None:
    """Comment ``cid`` of topic ``tid``, or None."""
    data = db.hget(f"{COMMENT_TB_NAME}{tid}", i2b(cid))
    return _load(Comment, data) if data is not None else None


def comment_set(db: Store, obj: Comment) -> Comment:
    """Save an edited comment."""
    db.hset(f"{COMMENT_TB_NAME}{obj.topic_id}", i2b(obj.id), _dumps(obj))
    return obj


def comment_add(mc: Cache, db: Store, obj: Comment) -> Comment:
    """Store a new comment, bump the topic's timelines and notify the author and mentioned users."""
    db.hincr(COUNT_TB, "comment", 1)
    new_id = db.hincr(COMMENT_NUM_TB_NAME, i2b(obj.topic_id), 1)
    obj = replace(obj, id=new_id)
    tid_key = i2b(obj.topic_id)
    db.hset(f"{COMMENT_TB_NAME}{obj.topic_id}", i2b(new_id), _dumps(obj))

    topic = topic_get_by_id(db, obj.topic_id) or Topic()
    db.zset(TBN_POST_UPDATE, tid_key, obj.add_time)
    db.zset(f"topic_update:{topic.node_id}", tid_key, obj.add_time)
    db.zset(f"user_comment:{obj.user_id}", tid_key, obj.add_time)
    db.hset(RECENT_COMMENT_TB, f"{obj.add_time}_{obj.topic_id}", i2b(obj.id))
    db.hset(f"{TBN_POST_REPLY}{obj.topic_id}", i2b(obj.user_id), b"")

    mc.delete(RECENT_CACHE_KEY)
    mc.delete(f"{RELATIVE_CACHE_PREFIX}{obj.topic_id}")
    mc.delete(f"{COMMENT_TB_NAME}{topic.id}")

    to_notify: list[int] = []
    if topic.user_id != obj.user_id:
        to_notify.append(topic.user_id)
    names = get_mention(obj.content, [])
    if names:
        for _, value in db.hmget(USER_NAME2UID_TB, names):
            uid = b2i(value)
            if uid not in (obj.user_id, topic.user_id):
                to_notify.append(uid)

    if to_notify:
        msg = _dumps(Msg(topic_id=topic.id, comment_id=obj.id, add_time=get_cntm(TIME_OFFSET)))
        for uid in to_notify:
            db.hset(f"user_msg:{uid}", i2b(topic.id), msg)
    return obj


def get_all_topic_comment(mc: Cache, db: Store, topic: Topic) -> list[CommentFmt]:
    """All comments of a topic, rendered and named, cached per topic."""
    table = f"{COMMENT_TB_NAME}{topic.id}"
    cached = obj_cached_get(mc, table)
    if isinstance(cached, list):
        items = [_from_dict(CommentFmt, raw) for raw in cached]
        if all(item is not None for item in items):
            return items

    items: list[CommentFmt] = []
    for _, value in db.hscan(table, None, topic.comments):
        item = _load(CommentFmt, value)
        if item is None:
            continue
        item.add_time_fmt = time_fmt(item.add_time, _TIME_LAYOUT)
        item.content_fmt = content_fmt(item.content)
        item.link = _link(item.topic_id, item.id)
        items.append(item)

    uids = list(dict.fromkeys(item.user_id for item in items))
    users = {user.id: user for user in user_get_by_ids(db, uids)}
    for item in items:
        user = users.get(item.user_id)
        if user is not None:
            item.name = user.name

    if items:
        obj_cached_set(mc, table, items)
    return items


def check_has_comment_to_review(db: Store) -> bool:
    """True when any comment waits for review."""
    return bool(db.hscan(COMMENT_REVIEW_TB_NAME, None, 1))


def comment_get_num_by_keys(db: Store, keys: Iterable[bytes]) -> dict[int, int]:
    """Map of topic id to comment count for the encoded topic ids given."""
    return {b2i(k): b2i(v) for k, v in db.hmget(COMMENT_NUM_TB_NAME, list(keys))}


def comment_get_recent(mc: Cache, db: Store, limit: int) -> list[CommentFmt]:
    """The newest comments, shortened, cached."""
    cached = obj_cached_get(mc, RECENT_CACHE_KEY)
    if isinstance(cached, list):
        items = [_from_dict(CommentFmt, raw) for raw in cached]
        if all(item is not None for item in items):
            return items

    order: list[str] = []
    wanted: dict[str, list[bytes]] = {}
    for key, value in db.hrscan(RECENT_COMMENT_TB, None, limit):
        parts = key.decode("utf-8", errors="replace").split("_")
        if len(parts) < 2:
            continue
        tid_str = parts[1]
        order.append(f"{tid_str}_{b2i(value)}")
        wanted.setdefault(f"{COMMENT_TB_NAME}{tid_str}", []).append(value)
    if not order:
        return []

    comments: dict[str, Comment] = {}
    uids: list[int] = []
    for table, keys in wanted.items():
        for _, value in db.hmget(table, keys):
            comment = _load(Comment, value)
            if comment is None:
                continue
            comments[f"{comment.topic_id}_{comment.id}"] = comment
            if comment.user_id not in uids:
                uids.append(comment.user_id)

    names = user_get_names_by_ids(db, uids)
    items = []
    for key in order:
        comment = comments.get(key, Comment())
        short = get_short_con(comment.content)
        items.append(
            CommentFmt(
                **{**asdict(comment), "content": short},
                name=names.get(comment.user_id, ""),
                add_time_fmt=time_fmt(comment.add_time, _TIME_LAYOUT),
                content_fmt=short,
                link=_link(comment.topic_id, comment.id),
            )
        )

    obj_cached_set(mc, RECENT_CACHE_KEY, items)
    return items


def comment_get_review_num(db: Store, uid: int) -> int:
    """Comments of the user waiting for review, counted up to ten."""
    return len(db.hscan(f"{COMMENT_REVIEW_TB_NAME}:{uid}", None, _REVIEW_LIMIT))


def comment_get_review(db: Store, uid: int) -> list[CommentReview]:
    """Comments of the user waiting for review, newest key first."""
    ids: list[bytes] = []
    start = None
    while rows := db.hrscan(f"{COMMENT_REVIEW_TB_NAME}:{uid}", start, _REVIEW_LIMIT):
        for key, _ in rows:
            start = key
            ids.append(key)
    if not ids:
        return []

    comments: dict[bytes, Comment] = {}
    topic_ids: list[int] = []
    for key, value in db.hmget(COMMENT_REVIEW_TB_NAME, ids):
        comment = _load(Comment, value)
        if comment is None:
            continue
        comments[key] = comment
        topic_ids.append(comment.topic_id)

    titles = topic_get_titles_by_ids(db, topic_ids)
    reviews = []
    for key in ids:
        comment = comments.get(key, Comment())
        reviews.append(
            CommentReview(
                **asdict(comment),
                topic_title=titles.get(comment.topic_id, ""),
                add_time_fmt=time_fmt(comment.add_time, ""),
                content_fmt=content_fmt(comment.content),
            )
        )
    return reviews