"""Table names, setting keys and shared defaults."""

from __future__ import annotations

from datetime import timedelta

COUNT_TB = "count"
KEY_VALUE_TB = "keyValue"
TBN_SITEMAP_INDEX = "sm_i"
TBN_POST_UPDATE = "topic_update"
TBN_POST_REPLY = "topic_reply:"
TBN_DB_IMG = "dbi"
TBN_IP_INFO = "ip"
TBN_SETTING = "setting"
TBN_V2_DEC_MP4 = "v2dec_mp4"
TBN_MP3_INFO = "mp3_info"

SETTING_KEY_BAD_BOT = "BadBotName"
SETTING_KEY_BAD_IP = "BadIpPrefix"
SETTING_KEY_ALLOW_IP = "AllowIpPrefix"

# Offset added to UTC when timestamps are stored and displayed.
TIME_OFFSET = timedelta(hours=8)


def setting_keys() -> list[str]:
    """Return the keys of the editable settings, in display order."""
    return [SETTING_KEY_BAD_BOT, SETTING_KEY_BAD_IP, SETTING_KEY_ALLOW_IP]