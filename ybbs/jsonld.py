"""Structured data (JSON-LD) records embedded in pages for search engines."""

from __future__ import annotations

import json
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from typing import Any

_HTML_ESCAPES = (("<", "\\u003c"), (">", "\\u003e"), ("&", "\\u0026"))


def _j(key: str, default: Any = MISSING, factory: Any = MISSING) -> Any:
    """A dataclass field serialised under the JSON key ``key``."""
    meta = {"json": key}
    if factory is not MISSING:
        return field(default_factory=factory, metadata=meta)
    return field(default=default, metadata=meta)


@dataclass
class JsOrganization:
    type: str = _j("@type", "Organization")
    logo: str = _j("logo", "")
    url: str = _j("url", "")


@dataclass
class JsItemListElement:
    type: str = _j("@type", "ListItem")
    position: int = _j("position", 0)
    name: str = _j("name", "")
    item: str = _j("item", "")


@dataclass
class JsBreadcrumbList:
    type: str = _j("@type", "BreadcrumbList")
    item_list_element: list[JsItemListElement] = _j("itemListElement", factory=list)


@dataclass
class JsAuthor:
    type: str = _j("@type", "Person")
    name: str = _j("name", "")
    url: str = _j("url", "")


@dataclass
class JsLogo:
    type: str = _j("@type", "ImageObject")
    url: str = _j("url", "")


@dataclass
class JsPublisher:
    type: str = _j("@type", "Organization")
    name: str = _j("name", "")
    logo: JsLogo = _j("logo", factory=JsLogo)


@dataclass
class JsSpeakable:
    type: str = _j("@type", "SpeakableSpecification")
    xpath: list[str] = _j("xpath", factory=list)


@dataclass
class JsCommentAuthor:
    type: str = _j("@type", "Person")
    name: str = _j("name", "")
    url: str = _j("url", "")


@dataclass
class JsComment:
    type: str = _j("@type", "Comment")
    url: str = _j("url", "")
    text: str = _j("text", "")
    date_created: str = _j("dateCreated", "")
    name: str = _j("name", "")
    author: JsCommentAuthor = _j("author", factory=JsCommentAuthor)
    publisher: JsCommentAuthor = _j("publisher", factory=JsCommentAuthor)


@dataclass
class JsArticle:
    type: str = _j("@type", "Article")
    date_modified: str = _j("dateModified", "")
    date_published: str = _j("datePublished", "")
    headline: str = _j("headline", "")
    image: list[str] = _j("image", factory=list)
    author: JsAuthor = _j("author", factory=JsAuthor)
    publisher: JsPublisher = _j("publisher", factory=JsPublisher)
    description: str = _j("description", "")
    main_entity_of_page: str = _j("mainEntityOfPage", "")
    speakable: JsSpeakable = _j("speakable", factory=JsSpeakable)
    comment_count: int = _j("commentCount", 0)
    comment: list[JsComment] = _j("comment", factory=list)


@dataclass
class JsonLd:
    context: str = _j("@context", "")
    graph: list[Any] = _j("@graph", factory=list)


def jsonld_dict(obj: Any) -> Any:
    """Plain JSON value for a record, using the JSON-LD key names."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return {f.metadata.get("json", f.name): jsonld_dict(getattr(obj, f.name)) for f in fields(obj)}
    if isinstance(obj, (list, tuple)):
        return [jsonld_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): jsonld_dict(v) for k, v in obj.items()}
    if obj is None or isinstance(obj, (str, bool, int, float)):
        return obj
    raise TypeError(f"cannot serialise {type(obj).__name__} as JSON-LD")


def jsonld_dumps(obj: Any) -> str:
    """Compact JSON text with ``<``, ``>`` and ``&`` escaped for safe embedding in HTML."""
    text = json.dumps(jsonld_dict(obj), ensure_ascii=False, separators=(",", ":"))
    for raw, escaped in _HTML_ESCAPES:
        text = text.replace(raw, escaped)
    return text