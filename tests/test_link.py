import pytest

from ybbs.cache import Cache
from ybbs.link import LINK_LIST_CACHE_KEY, Link, link_get_by_id, link_list, link_set
from ybbs.store import Store


@pytest.fixture
def db():
    with Store() as store:
        yield store


@pytest.fixture
def mc():
    return Cache(1 << 20)


def test_link_set_assigns_next_id(db):
    first = link_set(db, Link(name="a", url="https://a.example.com", score=1))
    second = link_set(db, Link(name="b", url="https://b.example.com", score=2))
    assert first.id == 1
    assert second.id == first.id + 1


def test_get_by_id_round_trip(db):
    link = link_set(db, Link(name="a", url="https://a.example.com", score=5))
    assert link_get_by_id(db, str(link.id)) == link
    assert link_get_by_id(db, link.id) == link


def test_get_by_id_missing_or_invalid(db):
    assert link_get_by_id(db, "3") is None
    assert link_get_by_id(db, "abc") is None
    assert link_get_by_id(db, "-1") is None


def test_list_orders_by_score_and_hides_zero(db, mc):
    link_set(db, Link(name="low", score=1))
    link_set(db, Link(name="hidden", score=0))
    link_set(db, Link(name="high", score=9))
    assert [l.name for l in link_list(mc, db, False)] == ["high", "low"]
    assert [l.name for l in link_list(mc, db, True)] == ["high", "low", "hidden"]


def test_list_is_cached_unless_get_all(db, mc):
    link_set(db, Link(name="one", score=3))
    first = link_list(mc, db, False)
    link_set(db, Link(name="two", score=4))
    assert link_list(mc, db, False) == first
    assert len(link_list(mc, db, True)) == len(first) + 1
    mc.delete(LINK_LIST_CACHE_KEY)
    assert [l.name for l in link_list(mc, db, False)] == ["two", "one"]


def test_list_pages_through_many_links(db, mc):
    for i in range(1, 46):
        link_set(db, Link(name=f"l{i}", score=i))
    links = link_list(mc, db, True)
    assert len(links) == 45
    assert [l.score for l in links] == sorted((l.score for l in links), reverse=True)