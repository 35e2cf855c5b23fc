"""User records and lookups."""

from __future__ import annotations

import json
import threading
from collections.abc import Iterable
from dataclasses import asdict, dataclass, fields
from enum import IntEnum

from ybbs.state import STATE
from ybbs.store import Store, b2i, i2b

USER_TB_NAME = "user"
USER_NAME2UID_TB = "user_name2uid"
ADMIN_FLAG_TB = "user_flag:99"

_name_cache: dict[int, str] = {}
_name_cache_lock = threading.Lock()


class UserFlag(IntEnum):
    """Permission levels of a user."""

    FORBIDDEN = 0
    REVIEW = 1
    AUTHOR = 5
    TRUST = 10
    ADMIN = 99


@dataclass
class User:
    id: int = 0
    name: str = ""
    flag: int = 0
    password: str = ""
    email: str = ""
    url: str = ""
    topics: int = 0
    replies: int = 0
    reg_time: int = 0
    last_post_time: int = 0
    last_reply_time: int = 0
    last_login_time: int = 0
    about: str = ""
    hidden: bool = False
    session: str = ""


@dataclass
class UserFmt(User):
    reg_time_fmt: str = ""


def _decode(data: bytes) -> User | None:
    try:
        raw = json.loads(data)
    except ValueError:
        return None
    if not isinstance(raw, dict):
        return None
    known = {f.name for f in fields(User)}
    return User(**{k: v for k, v in raw.items() if k in known})


def _dumps(obj: User) -> bytes:
    return json.dumps(asdict(obj), ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def _decode_all(rows: Iterable[tuple[bytes, bytes]]) -> list[User]:
    return [user for _, value in rows if (user := _decode(value)) is not None]


def user_get_by_name(db: Store, name: str) -> User:
    """Look a user up by name; raise KeyError when there is none."""
    uid = db.hget(USER_NAME2UID_TB, name)
    if uid is None:
        raise KeyError(f"no user named {name!r}")
    data = db.hget(USER_TB_NAME, uid)
    if data is None:
        raise KeyError(f"user {name!r} has no record")
    return _decode(data) or User()


def user_get_by_id(db: Store, uid: int) -> User | None:
    """The user with this id, or None."""
    data = db.hget(USER_TB_NAME, i2b(uid))
    return _decode(data) if data is not None else None


def user_get_by_ids(db: Store, ids: Iterable[int]) -> list[User]:
    """Existing users among ``ids``, in the order asked."""
    keys = [i2b(uid) for uid in ids]
    if not keys:
        return []
    return _decode_all(db.hmget(USER_TB_NAME, keys))


def user_get_names_by_ids(db: Store, ids: Iterable[int]) -> dict[int, str]:
    """Map of id to name, served from a process-wide cache where possible."""
    names: dict[int, str] = {}
    missing = []
    with _name_cache_lock:
        for uid in ids:
            if uid in _name_cache:
                names[uid] = _name_cache[uid]
            else:
                missing.append(i2b(uid))
    if missing:
        for key, value in db.hmget(USER_TB_NAME, missing):
            user = _decode(value)
            name = user.name if user is not None else ""
            uid = b2i(key)
            names[uid] = name
            with _name_cache_lock:
                _name_cache[uid] = name
    return names


def user_get_recent_by_kw(db: Store, kw: str, limit: int) -> list[User]:
    """Newest users whose id equals ``kw`` or whose name contains it."""
    if limit <= 0:
        return []
    found: list[User] = []
    start = None
    while rows := db.hrscan(USER_TB_NAME, start, 50):
        for key, value in rows:
            start = key
            user = _decode(value)
            if user is None:
                continue
            if str(user.id) == kw or kw in user.name:
                found.append(user)
                if len(found) == limit:
                    return found
    return found


def user_get_recent_by_flag(db: Store, table: str, limit: int) -> list[User]:
    """Newest users of the user table, or of a table of user ids such as ``user_flag:5``."""
    if table == USER_TB_NAME:
        return _decode_all(db.hrscan(table, None, limit))
    keys = [key for key, _ in db.hrscan(table, None, limit)]
    if not keys:
        return []
    return _decode_all(db.hmget(USER_TB_NAME, keys))


def user_set(db: Store, obj: User) -> User:
    """Save a user and refresh it in the logged-in user map."""
    db.hset(USER_TB_NAME, i2b(obj.id), _dumps(obj))
    with STATE.users_lock:
        if obj.id in STATE.users:
            STATE.users[obj.id] = obj
    return obj


def user_get_all_admin(db: Store) -> list[User]:
    """Every administrator."""
    keys: list[bytes] = []
    start = None
    while rows := db.hscan(ADMIN_FLAG_TB, start, 10):
        for key, _ in rows:
            start = key
            keys.append(key)
    if not keys:
        return []
    return _decode_all(db.hmget(USER_TB_NAME, keys))