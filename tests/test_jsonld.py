import json

import pytest

from ybbs.jsonld import (
    JsArticle,
    JsAuthor,
    JsBreadcrumbList,
    JsComment,
    JsCommentAuthor,
    JsItemListElement,
    JsonLd,
    JsOrganization,
    jsonld_dict,
    jsonld_dumps,
)


def test_organization_keys():
    d = jsonld_dict(JsOrganization(logo="/logo.png", url="https://example.com"))
    assert d == {"@type": "Organization", "logo": "/logo.png", "url": "https://example.com"}


def test_article_key_order_follows_format():
    d = jsonld_dict(JsArticle())
    assert list(d) == [
        "@type",
        "dateModified",
        "datePublished",
        "headline",
        "image",
        "author",
        "publisher",
        "description",
        "mainEntityOfPage",
        "speakable",
        "commentCount",
        "comment",
    ]


def test_nested_objects_are_converted():
    art = JsArticle(
        headline="Hello",
        author=JsAuthor(name="alice", url="/name/alice"),
        comment=[JsComment(text="hi", name="1", author=JsCommentAuthor(name="bob"))],
        comment_count=1,
    )
    d = jsonld_dict(art)
    assert d["author"]["name"] == "alice"
    assert d["publisher"]["logo"]["url"] == ""
    assert d["comment"][0]["author"]["name"] == "bob"
    assert d["comment"][0]["dateCreated"] == ""
    assert d["commentCount"] == 1


def test_graph_round_trip():
    doc = JsonLd(
        context="https://example.com/vocab",
        graph=[
            JsOrganization(url="https://example.com"),
            JsBreadcrumbList(item_list_element=[JsItemListElement(position=1, name="Home", item="/")]),
        ],
    )
    text = jsonld_dumps(doc)
    assert json.loads(text) == jsonld_dict(doc)
    assert text.startswith('{"@context":"https://example.com/vocab","@graph":[')


def test_html_characters_escaped_and_restored():
    art = JsArticle(headline="<b>&")
    text = jsonld_dumps(art)
    assert "<" not in text and ">" not in text and "&" not in text
    assert "\\u003cb\\u003e\\u0026" in text
    assert json.loads(text)["headline"] == "<b>&"


def test_non_ascii_kept():
    text = jsonld_dumps(JsAuthor(name="默认"))
    assert "默认" in text


def test_default_lists_not_shared():
    a, b = JsArticle(), JsArticle()
    a.image.append("x.png")
    assert b.image == []


def test_unsupported_value_raises():
    with pytest.raises(TypeError):
        jsonld_dict(JsonLd(graph=[object()]))