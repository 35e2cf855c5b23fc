import pytest

from ybbs.state import STATE
from ybbs.store import Store, i2b
from ybbs.user import (
    USER_NAME2UID_TB,
    USER_TB_NAME,
    User,
    UserFlag,
    UserFmt,
    user_get_all_admin,
    user_get_by_id,
    user_get_by_ids,
    user_get_by_name,
    user_get_names_by_ids,
    user_get_recent_by_flag,
    user_get_recent_by_kw,
    user_set,
)


@pytest.fixture
def db():
    with Store() as store:
        yield store


def _add(db, uid, name, flag=UserFlag.AUTHOR):
    user = User(id=uid, name=name, flag=int(flag))
    user_set(db, user)
    db.hset(USER_NAME2UID_TB, name, i2b(uid))
    db.hset(f"user_flag:{int(flag)}", i2b(uid), b"")
    return user


def test_set_and_get_by_id(db):
    user = _add(db, 1, "alice")
    assert user_get_by_id(db, 1) == user


def test_get_by_id_missing(db):
    assert user_get_by_id(db, 42) is None


def test_get_by_name(db):
    user = _add(db, 2, "bob")
    assert user_get_by_name(db, "bob") == user


def test_get_by_name_missing(db):
    with pytest.raises(KeyError):
        user_get_by_name(db, "nobody")


def test_get_by_ids_skips_missing(db):
    a = _add(db, 3, "carol")
    b = _add(db, 4, "dave")
    assert user_get_by_ids(db, [4, 99, 3]) == [b, a]
    assert user_get_by_ids(db, []) == []


def test_names_by_ids(db):
    _add(db, 1001, "erin")
    _add(db, 1002, "frank")
    assert user_get_names_by_ids(db, [1001, 1002, 1003]) == {1001: "erin", 1002: "frank"}
    # a second lookup is served from the cache
    assert user_get_names_by_ids(db, [1001]) == {1001: "erin"}


def test_recent_by_kw(db):
    for uid, name in [(1, "anna"), (2, "annie"), (3, "zed"), (4, "hannah")]:
        _add(db, uid, name)
    found = user_get_recent_by_kw(db, "ann", 10)
    assert [u.id for u in found] == [4, 2, 1]
    assert [u.id for u in user_get_recent_by_kw(db, "ann", 2)] == [4, 2]
    assert [u.name for u in user_get_recent_by_kw(db, "3", 5)] == ["zed"]
    assert user_get_recent_by_kw(db, "ann", 0) == []


def test_recent_by_kw_pages_through_many_users(db):
    for uid in range(1, 121):
        _add(db, uid, f"u{uid}")
    found = user_get_recent_by_kw(db, "u1", 100)
    assert all("u1" in u.name for u in found)
    assert [u.id for u in found] == sorted((u.id for u in found), reverse=True)
    assert found[-1].id == 1


def test_recent_by_flag(db):
    _add(db, 1, "a1")
    _add(db, 2, "a2", UserFlag.TRUST)
    _add(db, 3, "a3")
    assert [u.id for u in user_get_recent_by_flag(db, USER_TB_NAME, 2)] == [3, 2]
    assert [u.id for u in user_get_recent_by_flag(db, f"user_flag:{int(UserFlag.AUTHOR)}", 10)] == [3, 1]
    assert user_get_recent_by_flag(db, "user_flag:0", 10) == []


def test_all_admin(db):
    _add(db, 1, "root", UserFlag.ADMIN)
    _add(db, 2, "plain")
    _add(db, 3, "boss", UserFlag.ADMIN)
    assert [u.name for u in user_get_all_admin(db)] == ["root", "boss"]


def test_user_set_refreshes_logged_in_map(db):
    uid = 5005
    with STATE.users_lock:
        STATE.users[uid] = User(id=uid, name="old")
    try:
        saved = user_set(db, User(id=uid, name="new"))
        assert saved.name == "new"
        assert STATE.users[uid] == saved
        other = user_set(db, User(id=uid + 1, name="other"))
        assert other.id == uid + 1
        assert uid + 1 not in STATE.users
        assert user_get_by_id(db, uid + 1) == other
    finally:
        STATE.users.pop(uid, None)


def test_user_fmt_extends_user():
    fmt = UserFmt(id=7, name="g", reg_time_fmt="2020-01-01")
    assert isinstance(fmt, User)
    assert (fmt.id, fmt.reg_time_fmt) == (7, "2020-01-01")