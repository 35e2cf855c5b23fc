"""Editable settings and the filters built from them."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from ybbs.const import (
    SETTING_KEY_ALLOW_IP,
    SETTING_KEY_BAD_BOT,
    SETTING_KEY_BAD_IP,
    TBN_SETTING,
)
from ybbs.state import STATE, sync_dict
from ybbs.store import Store


@dataclass
class SettingKv:
    key: str = ""
    value: str = ""


def _text(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def _split(data: bytes) -> list[str]:
    return [part for part in (p.strip() for p in _text(data).split(",")) if part]


def setting_get_by_key(db: Store, key: str) -> SettingKv:
    """The setting, with an empty value when it was never set."""
    data = db.hget(TBN_SETTING, key)
    return SettingKv(key=key, value=_text(data) if data is not None else "")


def setting_get_by_keys(db: Store, keys: Iterable[str]) -> list[SettingKv]:
    """Stored settings in the order asked, then the missing ones with empty values."""
    wanted = list(dict.fromkeys(keys))
    found = [SettingKv(key=_text(k), value=_text(v)) for k, v in db.hmget(TBN_SETTING, wanted)]
    seen = {item.key for item in found}
    return found + [SettingKv(key=k) for k in wanted if k not in seen]


def update_bad_bot_name(db: Store) -> None:
    """Reload the blocked bot names from settings."""
    data = db.hget(TBN_SETTING, SETTING_KEY_BAD_BOT)
    if data is None:
        return
    sync_dict(STATE.bad_bot_names, dict.fromkeys(_split(data)))


def update_bad_ip_prefix(db: Store) -> None:
    """Reload the blocked IP prefixes from settings."""
    data = db.hget(TBN_SETTING, SETTING_KEY_BAD_IP)
    if data is None:
        return
    STATE.bad_ip_prefixes.replace(_split(data))


def update_allow_ip_prefix(db: Store) -> None:
    """Reload the allowed IP prefixes from settings."""
    data = db.hget(TBN_SETTING, SETTING_KEY_ALLOW_IP)
    if data is None:
        return
    STATE.allow_ip_prefixes.replace(_split(data))