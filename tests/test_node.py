import pytest

from ybbs.cache import Cache
from ybbs.node import (
    NODE_GET_ALL_CACHE_KEY,
    NODE_TOPIC_NUM_TB_NAME,
    Node,
    node_get_all,
    node_get_by_id,
    node_get_names_by_ids,
    node_set,
)
from ybbs.store import Store, i2b


@pytest.fixture
def db():
    with Store() as store:
        yield store


@pytest.fixture
def mc():
    return Cache(1 << 20)


def test_node_set_assigns_sequential_ids(db):
    first = node_set(db, Node(name="Go"))
    second = node_set(db, Node(name="Python"))
    assert first.id >= 1
    assert second.id == first.id + 1


def test_node_set_keeps_given_id(db):
    node = node_set(db, Node(id=50, name="fixed"))
    assert node.id == 50
    assert node_get_by_id(db, 50).name == "fixed"


def test_get_by_id_with_topic_count(db):
    node = node_set(db, Node(name="News", about="about"))
    db.hincr(NODE_TOPIC_NUM_TB_NAME, i2b(node.id), 3)
    loaded = node_get_by_id(db, node.id)
    assert loaded.about == "about"
    assert loaded.topic_num == 3


def test_get_by_id_missing(db):
    assert node_get_by_id(db, 77) is None


def test_get_all_is_cached(db, mc):
    a = node_set(db, Node(name="A"))
    db.hincr(NODE_TOPIC_NUM_TB_NAME, i2b(a.id), 2)
    first = node_get_all(mc, db)
    assert [(n.name, n.topic_num) for n in first] == [("A", 2)]
    node_set(db, Node(name="B"))
    assert node_get_all(mc, db) == first
    mc.delete(NODE_GET_ALL_CACHE_KEY)
    assert [n.name for n in node_get_all(mc, db)] == ["A", "B"]


def test_get_all_empty(db, mc):
    assert node_get_all(mc, db) == []


def test_names_by_ids(db):
    node_set(db, Node(id=901, name="x"))
    node_set(db, Node(id=902, name="y"))
    assert node_get_names_by_ids(db, [901, 902, 903]) == {901: "x", 902: "y"}
    node_set(db, Node(id=901, name="renamed"))
    assert node_get_names_by_ids(db, [901]) == {901: "renamed"}
    assert node_get_names_by_ids(db, []) == {}