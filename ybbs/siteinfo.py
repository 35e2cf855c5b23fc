"""Site statistics shown in the sidebar."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone

from ybbs.const import COUNT_TB, TIME_OFFSET
from ybbs.link import Link, link_set
from ybbs.node import NODE_TB_NAME, Node, node_set
from ybbs.store import Store, b2i, i2b
from ybbs.tag import TAG_TB_NAME
from ybbs.topic import TOPIC_TB_NAME
from ybbs.user import USER_TB_NAME

COMMENT_COUNT_KEY = "comment"
SITE_CREATE_TIME_KEY = "site_create_time"

DEFAULT_NODE_NAME = "默认分类"
DEFAULT_NODE_ABOUT = "默认第一个分类"
DEFAULT_LINK = Link(name="youBBS", url="https://example.com", score=100)


@dataclass
class SiteInfo:
    week_num: str = ""
    days: str = ""
    user_num: int = 0
    node_num: int = 0
    tag_num: int = 0
    post_num: int = 0
    reply_num: int = 0


def _first_user_reg_time(db: Store) -> int | None:
    rows = db.hscan(USER_TB_NAME, None, 1)
    if not rows:
        return None
    try:
        raw = json.loads(rows[0][1])
    except ValueError:
        return 0
    return int(raw.get("reg_time", 0)) if isinstance(raw, dict) else 0


def _age_text(created: int, now: float) -> str:
    days = int((now - created) / 86400)
    years, day = divmod(days, 365) if days >= 0 else (0, 0)
    text = f"{years}年" if years > 0 else ""
    if day > 0:
        text += f"{day}天"
    return text or "1天"


def get_site_info(db: Store) -> SiteInfo:
    """Counters, site age and week; seeds a default node and link on a new site."""
    keys = [USER_TB_NAME, NODE_TB_NAME, TAG_TB_NAME, TOPIC_TB_NAME, COMMENT_COUNT_KEY, SITE_CREATE_TIME_KEY]
    counts = {k.decode("utf-8", errors="replace"): v for k, v in db.hmget(COUNT_TB, keys)}

    def count(name: str) -> int:
        value = counts.get(name)
        return b2i(value) if value is not None else 0

    info = SiteInfo(
        user_num=count(USER_TB_NAME),
        node_num=count(NODE_TB_NAME),
        tag_num=count(TAG_TB_NAME),
        post_num=count(TOPIC_TB_NAME),
        reply_num=count(COMMENT_COUNT_KEY),
    )

    now = time.time()
    if SITE_CREATE_TIME_KEY in counts:
        created = b2i(counts[SITE_CREATE_TIME_KEY])
    else:
        reg_time = _first_user_reg_time(db)
        created = reg_time if reg_time is not None else int(now)
        db.hset(COUNT_TB, SITE_CREATE_TIME_KEY, i2b(created))
    info.days = _age_text(created, now)

    if info.node_num == 0:
        node_set(db, Node(name=DEFAULT_NODE_NAME, about=DEFAULT_NODE_ABOUT))
        info.node_num = 1
        link_set(db, Link(name=DEFAULT_LINK.name, url=DEFAULT_LINK.url, score=DEFAULT_LINK.score))

    local = datetime.now(timezone.utc) + TIME_OFFSET
    info.week_num = f"{local:%Y-%m-%d} {local.isocalendar()[1]} week"
    return info