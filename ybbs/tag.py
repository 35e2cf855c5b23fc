"""Tag cloud data."""

from __future__ import annotations

from dataclasses import dataclass

from ybbs.cache import Cache, obj_cached_get, obj_cached_set
from ybbs.store import Store

TAG_TB_NAME = "tag"
TAG_ARTICLE_NUM_TB = "tag_article_num"
TAGS_FOR_SIDE_CACHE_KEY = "GetTagsForSide"


@dataclass
class TagFontSize:
    name: str = ""
    size: int = 0


def get_tags_for_side(mc: Cache, db: Store, limit: int) -> list[TagFontSize]:
    """The most used tags with their article counts, cached."""
    cached = obj_cached_get(mc, TAGS_FOR_SIDE_CACHE_KEY)
    if isinstance(cached, list) and all(isinstance(item, dict) for item in cached):
        return [TagFontSize(name=item.get("name", ""), size=item.get("size", 0)) for item in cached]

    tags = [
        TagFontSize(name=key.decode("utf-8", errors="replace"), size=score)
        for key, score in db.zrscan(TAG_ARTICLE_NUM_TB, None, None, limit)
    ]
    obj_cached_set(mc, TAGS_FOR_SIDE_CACHE_KEY, tags)
    return tags