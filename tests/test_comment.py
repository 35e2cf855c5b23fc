import json
from dataclasses import asdict

import pytest

from ybbs.cache import Cache
from ybbs.comment import (
    COMMENT_NUM_TB_NAME,
    Comment,
    check_has_comment_to_review,
    comment_add,
    comment_get_by_id,
    comment_get_num_by_keys,
    comment_get_recent,
    comment_get_review,
    comment_get_review_num,
    comment_set,
    get_all_topic_comment,
)
from ybbs.const import COUNT_TB, TBN_POST_REPLY, TBN_POST_UPDATE
from ybbs.records import msg_check_has_one
from ybbs.store import Store, i2b
from ybbs.timefmt import time_fmt
from ybbs.topic import Topic, topic_add, topic_get_by_id
from ybbs.user import User, user_set

AUTHOR = 8101
BOB = 8102
CAROL = 8103
T0 = 1_600_000_000


@pytest.fixture
def db():
    with Store() as store:
        for uid, name in ((AUTHOR, "author8101"), (BOB, "bob8102"), (CAROL, "carol8103")):
            user_set(store, User(id=uid, name=name))
            store.hset("user_name2uid", name, i2b(uid))
        yield store


@pytest.fixture
def mc():
    return Cache(1 << 20)


@pytest.fixture
def topic(db, mc):
    return topic_add(mc, db, Topic(node_id=2, user_id=AUTHOR, title="Topic", add_time=T0))


def _comment(topic, user, content, t):
    return Comment(topic_id=topic.id, user_id=user, content=content, add_time=t)


def test_comment_add_ids_and_round_trip(db, mc, topic):
    c1 = comment_add(mc, db, _comment(topic, BOB, "first", T0 + 10))
    c2 = comment_add(mc, db, _comment(topic, CAROL, "second", T0 + 20))
    assert c2.id == c1.id + 1
    assert comment_get_by_id(db, topic.id, c1.id) == c1
    assert db.hget_int(COMMENT_NUM_TB_NAME, i2b(topic.id)) == c2.id
    assert db.hget_int(COUNT_TB, "comment") == 2
    assert db.zget(TBN_POST_UPDATE, i2b(topic.id)) == c2.add_time
    assert db.zget(f"topic_update:{topic.node_id}", i2b(topic.id)) == c2.add_time
    assert db.zget(f"user_comment:{BOB}", i2b(topic.id)) == c1.add_time
    assert db.hget(f"{TBN_POST_REPLY}{topic.id}", i2b(BOB)) == b""
    assert db.hget("recent_comment", f"{c1.add_time}_{topic.id}") == i2b(c1.id)


def test_comment_get_by_id_missing(db):
    assert comment_get_by_id(db, 1, 1) is None


def test_comment_set_edits(db, mc, topic):
    c = comment_add(mc, db, _comment(topic, BOB, "old", T0))
    c.content = "new"
    comment_set(db, c)
    assert comment_get_by_id(db, topic.id, c.id).content == "new"


def test_comment_add_notifies_author_and_mentions(db, mc, topic):
    c = comment_add(mc, db, _comment(topic, BOB, "hi @carol8103 ok", T0))
    raw = json.loads(db.hget(f"user_msg:{AUTHOR}", i2b(topic.id)))
    assert raw["topic_id"] == topic.id
    assert raw["comment_id"] == c.id
    assert msg_check_has_one(db, CAROL) is True
    assert msg_check_has_one(db, BOB) is False


def test_self_reply_sends_no_message(db, mc, topic):
    comment_add(mc, db, _comment(topic, AUTHOR, "my own note", T0))
    assert msg_check_has_one(db, AUTHOR) is False


def test_comment_add_clears_caches(db, mc, topic):
    mc.set("CommentGetRecent", b"x")
    mc.set(f"TopicGetRelative:{topic.id}", b"x")
    mc.set(f"comment:{topic.id}", b"x")
    comment_add(mc, db, _comment(topic, BOB, "text", T0))
    assert mc.get("CommentGetRecent") is None
    assert mc.get(f"TopicGetRelative:{topic.id}") is None
    assert mc.get(f"comment:{topic.id}") is None


def test_get_all_topic_comment(db, mc, topic):
    c1 = comment_add(mc, db, _comment(topic, BOB, "first words", T0 + 60))
    c2 = comment_add(mc, db, _comment(topic, CAROL, "second words", T0 + 120))
    stored = topic_get_by_id(db, topic.id)
    stored.comments = db.hget_int(COMMENT_NUM_TB_NAME, i2b(topic.id))

    items = get_all_topic_comment(mc, db, stored)
    assert [i.name for i in items] == ["bob8102", "carol8103"]
    assert [i.link for i in items] == [f"/t/{topic.id}#r{c.id}" for c in (c1, c2)]
    assert "first words" in items[0].content_fmt
    assert items[0].add_time_fmt == time_fmt(c1.add_time, "%Y-%m-%d %H:%M")

    db.hdel(f"comment:{topic.id}", i2b(c1.id))
    assert get_all_topic_comment(mc, db, stored) == items


def test_comment_get_num_by_keys(db, mc, topic):
    for n in range(3):
        comment_add(mc, db, _comment(topic, BOB, "x", T0 + n))
    assert comment_get_num_by_keys(db, [i2b(topic.id), i2b(999)]) == {topic.id: 3}


def test_comment_get_recent(db, mc, topic):
    other = topic_add(mc, db, Topic(node_id=2, user_id=AUTHOR, title="Other", add_time=T0))
    long_text = "y" * 80
    comment_add(mc, db, _comment(topic, BOB, "short", T0 + 100))
    newest = comment_add(mc, db, _comment(other, CAROL, long_text, T0 + 200))

    recent = comment_get_recent(mc, db, 10)
    assert [r.topic_id for r in recent] == [other.id, topic.id]
    assert recent[0].name == "carol8103"
    assert recent[0].content_fmt == long_text[:50] + "..."
    assert recent[0].link == f"/t/{other.id}#r{newest.id}"
    assert recent[1].content == "short"
    assert comment_get_recent(mc, db, 10) == recent


def test_comment_get_recent_empty(db, mc):
    assert comment_get_recent(mc, db, 10) == []


def test_review(db, mc, topic):
    pending = [
        Comment(id=0, topic_id=topic.id, user_id=BOB, content=f"pending {n}", add_time=T0 + n)
        for n in range(2)
    ]
    for n, c in enumerate(pending):
        key = f"r{n}"
        db.hset(f"review_comment:{BOB}", key, b"")
        db.hset("review_comment", key, json.dumps(asdict(c)))

    assert check_has_comment_to_review(db) is True
    assert comment_get_review_num(db, BOB) == len(pending)
    got = comment_get_review(db, BOB)
    assert [g.content for g in got] == ["pending 1", "pending 0"]
    assert got[0].topic_title == topic.title
    assert got[0].add_time_fmt == time_fmt(pending[1].add_time, "")
    assert "pending 1" in got[0].content_fmt


def test_no_review(db):
    assert check_has_comment_to_review(db) is False
    assert comment_get_review(db, BOB) == []
    assert comment_get_review_num(db, BOB) == 0