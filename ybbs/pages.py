"""Data handed to page templates."""

from __future__ import annotations

from dataclasses import dataclass, field

from ybbs.comment import CommentFmt
from ybbs.config import SiteConf
from ybbs.link import Link
from ybbs.node import Node
from ybbs.siteinfo import SiteInfo
from ybbs.tag import TagFontSize
from ybbs.topic import TopicFmt, TopicLi, TopicPageInfo
from ybbs.user import User


@dataclass
class BasePage:
    """What every page shows: head data, login state, notices and the sidebar."""

    site_cf: SiteConf | None = None
    current_user: User = field(default_factory=User)
    title: str = ""
    breadcrumbs: str = ""
    keywords: str = ""
    description: str = ""
    canonical: str = ""
    authorized: bool = False
    page_name: str = ""
    has_msg: bool = False
    has_topic_review: bool = False
    has_reply_review: bool = False
    show_auto_ad: bool = False
    show_post_top_ad: bool = False
    show_post_bot_ad: bool = False
    show_side_ad: bool = False
    close_sidebar: bool = False
    tag_cloud: list[TagFontSize] = field(default_factory=list)
    json_ld: str = ""
    node_lst: list[Node] = field(default_factory=list)
    range_topic_lst: list[TopicLi] = field(default_factory=list)
    recent_comment: list[CommentFmt] = field(default_factory=list)
    link_lst: list[Link] = field(default_factory=list)
    site_info: SiteInfo = field(default_factory=SiteInfo)
    default_node: Node = field(default_factory=Node)


@dataclass
class NormalRsp:
    """Generic response: a code and a message."""

    code: int = 0
    msg: str = ""


@dataclass
class TopicLstPage(BasePage):
    """Topic list of the home, node, tag and search pages."""

    q: str = ""
    tag: str = ""
    topic_page_info: TopicPageInfo = field(default_factory=TopicPageInfo)


@dataclass
class TopicDetailPage(BasePage):
    """A topic with its neighbours, tags and comments."""

    topic_fmt: TopicFmt = field(default_factory=TopicFmt)
    new_topic: TopicLi = field(default_factory=TopicLi)
    old_topic: TopicLi = field(default_factory=TopicLi)
    tag_lst: list[TagFontSize] = field(default_factory=list)
    comment_lst: list[CommentFmt] = field(default_factory=list)


@dataclass
class AdminBasePage(BasePage):
    """Base data of administration pages."""