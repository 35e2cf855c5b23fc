import time

import pytest

from ybbs.cache import Cache
from ybbs.const import COUNT_TB
from ybbs.link import link_list
from ybbs.node import NODE_TB_NAME
from ybbs.siteinfo import SITE_CREATE_TIME_KEY, get_site_info
from ybbs.store import Store, b2i, i2b
from ybbs.user import User, user_set


@pytest.fixture
def db(tmp_path):
    store = Store(str(tmp_path / "db"))
    yield store
    store.close()


def test_new_site_gets_default_node_and_link(db):
    info = get_site_info(db)
    assert info.node_num == 1
    assert info.days == "1天"
    assert b2i(db.hget(COUNT_TB, NODE_TB_NAME)) == 1
    links = link_list(Cache(1 << 20), db, True)
    assert [link.name for link in links] == ["youBBS"]
    assert info.week_num.endswith(" week")


def test_second_call_does_not_seed_again(db):
    get_site_info(db)
    info = get_site_info(db)
    assert info.node_num == 1
    assert len(link_list(Cache(1 << 20), db, True)) == 1


def test_counters_are_read(db):
    db.hincr(COUNT_TB, "user", 3)
    db.hincr(COUNT_TB, "topic", 7)
    db.hincr(COUNT_TB, "comment", 11)
    db.hincr(COUNT_TB, "tag", 2)
    db.hincr(COUNT_TB, "node", 4)
    info = get_site_info(db)
    assert (info.user_num, info.post_num, info.reply_num, info.tag_num, info.node_num) == (
        3,
        7,
        11,
        2,
        4,
    )


def test_site_age_in_years_and_days(db):
    created = int(time.time()) - 400 * 86400 - 3600
    db.hset(COUNT_TB, SITE_CREATE_TIME_KEY, i2b(created))
    assert get_site_info(db).days == "1年35天"


def test_create_time_taken_from_first_user(db):
    reg_time = int(time.time()) - 10 * 86400
    user_set(db, User(id=1, name="first", reg_time=reg_time))
    get_site_info(db)
    assert b2i(db.hget(COUNT_TB, SITE_CREATE_TIME_KEY)) == reg_time


def test_create_time_is_stored_once(db):
    get_site_info(db)
    stored = db.hget(COUNT_TB, SITE_CREATE_TIME_KEY)
    get_site_info(db)
    assert db.hget(COUNT_TB, SITE_CREATE_TIME_KEY) == stored