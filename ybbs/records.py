"""Small records: remote posts, sign-in data, messages, mail and mp3 entries."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass

from ybbs.const import TBN_MP3_INFO
from ybbs.store import Store, i2b

MAIL_QUEUE_TB = "mail_queue"


@dataclass
class TopicRemotePostForm:
    """A topic or comment posted remotely by an administrator."""

    topic_id: int = 0
    node_id: int = 0
    user_name: str = ""
    title: str = ""
    content: str = ""


@dataclass
class AuthInfo:
    uid: int = 0
    name: str = ""
    openid: str = ""


@dataclass
class AuthProfileInfo:
    login_by: str = ""
    open_id: str = ""
    name: str = ""
    avatar: str = ""
    agent: str = ""
    url: str = ""
    about: str = ""


@dataclass
class AvatarTask:
    uid: int = 0
    name: str = ""
    avatar: str = ""
    save_path: str = ""
    agent: str = ""
    try_count: int = 0


@dataclass
class Kv:
    key: int = 0
    value: int = 0


@dataclass
class KvStr:
    key: str = ""
    value: str = ""


@dataclass
class Msg:
    """Notice that a topic got a reply or a mention; keyed by topic id."""

    topic_id: int = 0
    comment_id: int = 0
    add_time: int = 0


@dataclass
class EmailInfo:
    key: int = 0
    to_email: str = ""
    subject: str = ""
    body: str = ""


@dataclass
class Mp3Info:
    title: str = ""
    song: str = ""
    word: str = ""
    singer0: str = ""
    singer: str = ""
    path: str = ""


def _dumps(obj) -> bytes:
    return json.dumps(asdict(obj), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def msg_check_has_one(db: Store, uid: int) -> bool:
    """True when the user has at least one unread message."""
    return bool(db.hscan(f"user_msg:{uid}", None, 1))


def email_info_update(db: Store, obj: EmailInfo) -> None:
    """Store a mail in the outgoing queue under its key."""
    db.hset(MAIL_QUEUE_TB, i2b(obj.key), _dumps(obj))


def mp3_info_set(db: Store, key: str) -> None:
    """Record an mp3 path unless it is already known."""
    if db.hget(TBN_MP3_INFO, key) is not None:
        return
    db.hset(TBN_MP3_INFO, key, _dumps(Mp3Info(path=key)))