"""Main and site configuration, stored as JSON in the key-value table."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields

from ybbs.const import KEY_VALUE_TB
from ybbs.state import STATE
from ybbs.store import Store

SITE_CONF_KEY = "site_config"


@dataclass
class MainConf:
    """Listen address and data directory."""

    addr: str = ""
    sdb_dir: str = ""


@dataclass
class SiteConf:
    """Site-wide settings edited by administrators."""

    name: str = ""
    sub_title: str = ""
    desc: str = ""
    admin_email: str = ""
    main_domain: str = ""
    header_part_con: str = ""
    google_auto_ad_js: str = ""
    footer_part_html: str = ""
    time_zone: int = 0
    page_show_num: int = 0
    top_rate_num: int = 0
    recent_comment_num: int = 0
    title_max_len: int = 0
    topic_con_max_len: int = 0
    comment_con_max_len: int = 0
    auto_data_backup: bool = False
    data_backup_dir: str = ""
    authorized: bool = False
    allow_name_reg: bool = False
    reg_review: bool = False
    close_reg: bool = False
    close_reply: bool = False
    post_review: bool = False
    reset_cookie_key: bool = False
    auto_decode_mp4: bool = False
    get_tag_api: str = ""
    upload_limit: bool = False
    upload_dir: str = ""
    upload_max_size: int = 0
    upload_max_size_byte: int = 0
    cached_size: int = 0
    rate_limit_day: int = 0
    rate_limit_hour: int = 0
    save_topic_icon: bool = False
    save_img2db: bool = False
    remote_post_pw: str = ""
    is_dev_mod: bool = False
    self_hash: str = ""
    socks5_proxy: str = ""
    qq_client_id: str = ""
    qq_client_secret: str = ""
    weibo_client_id: str = ""
    weibo_client_secret: str = ""
    github_client_id: str = ""
    github_client_secret: str = ""
    send_email: bool = False
    smtp_host: str = ""
    smtp_port: int = 0
    smtp_email: str = ""
    smtp_password: str = ""
    send_to_email: str = ""

    def to_json(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_json(cls, data: str | bytes) -> SiteConf:
        """Build from JSON; unknown keys are ignored, missing ones keep their zero value."""
        raw = json.loads(data)
        if not isinstance(raw, dict):
            raise ValueError("site configuration must be a JSON object")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in raw.items() if k in known})


def _default_site_conf() -> SiteConf:
    conf = SiteConf(
        name="GoYouBBS",
        main_domain="http://127.0.0.1:8080",
        time_zone=8,
        page_show_num=30,
        top_rate_num=10,
        recent_comment_num=10,
        title_max_len=110,
        topic_con_max_len=12000,
        comment_con_max_len=5000,
        allow_name_reg=True,
        data_backup_dir="data_backup",
        upload_limit=True,
        upload_dir="upload",
        upload_max_size=20,
        cached_size=5,
    )
    conf.upload_max_size_byte = conf.upload_max_size << 20
    return conf


def site_conf_load(db: Store) -> SiteConf:
    """Load the site configuration, creating and saving the defaults on first use."""
    data = db.hget(KEY_VALUE_TB, SITE_CONF_KEY)
    if data is not None:
        try:
            return SiteConf.from_json(data)
        except (ValueError, TypeError):
            return SiteConf()
    conf = _default_site_conf()
    db.hset(KEY_VALUE_TB, SITE_CONF_KEY, conf.to_json())
    return conf


def conf_load_to_state(db: Store) -> None:
    """Copy the stored rate limits into the shared application state."""
    data = db.hget(KEY_VALUE_TB, SITE_CONF_KEY)
    if data is None:
        return
    try:
        conf = SiteConf.from_json(data)
    except (ValueError, TypeError):
        conf = SiteConf()
    STATE.rate_limit_day = conf.rate_limit_day
    STATE.rate_limit_hour = conf.rate_limit_hour