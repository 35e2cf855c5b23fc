import json
from dataclasses import asdict

import pytest

from ybbs.const import TBN_MP3_INFO
from ybbs.records import (
    EmailInfo,
    Msg,
    Mp3Info,
    email_info_update,
    mp3_info_set,
    msg_check_has_one,
)
from ybbs.store import Store, i2b


@pytest.fixture
def db():
    with Store(":memory:") as store:
        yield store


def test_msg_check_has_one(db):
    assert msg_check_has_one(db, 3) is False
    msg = Msg(topic_id=5, comment_id=2, add_time=100)
    db.hset("user_msg:3", i2b(5), json.dumps(asdict(msg)))
    assert msg_check_has_one(db, 3) is True
    assert msg_check_has_one(db, 4) is False


def test_email_info_update_round_trip(db):
    obj = EmailInfo(key=7, to_email="someone@example.com", subject="Hi", body="text")
    email_info_update(db, obj)
    stored = json.loads(db.hget("mail_queue", i2b(7)))
    assert EmailInfo(**stored) == obj


def test_email_info_update_overwrites(db):
    email_info_update(db, EmailInfo(key=1, subject="old"))
    email_info_update(db, EmailInfo(key=1, subject="new"))
    stored = json.loads(db.hget("mail_queue", i2b(1)))
    assert stored["subject"] == "new"


def test_mp3_info_set_stores_path(db):
    mp3_info_set(db, "music/a.mp3")
    stored = json.loads(db.hget(TBN_MP3_INFO, "music/a.mp3"))
    assert Mp3Info(**stored) == Mp3Info(path="music/a.mp3")


def test_mp3_info_set_keeps_existing(db):
    existing = json.dumps(asdict(Mp3Info(title="kept", path="b.mp3")))
    db.hset(TBN_MP3_INFO, "b.mp3", existing)
    mp3_info_set(db, "b.mp3")
    assert json.loads(db.hget(TBN_MP3_INFO, "b.mp3"))["title"] == "kept"