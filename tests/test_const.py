from ybbs.const import (
    SETTING_KEY_ALLOW_IP,
    SETTING_KEY_BAD_BOT,
    SETTING_KEY_BAD_IP,
    setting_keys,
)


def test_setting_keys_order_and_values():
    assert setting_keys() == ["BadBotName", "BadIpPrefix", "AllowIpPrefix"]


def test_setting_keys_match_named_constants():
    assert setting_keys() == [SETTING_KEY_BAD_BOT, SETTING_KEY_BAD_IP, SETTING_KEY_ALLOW_IP]


def test_setting_keys_returns_fresh_list():
    first = setting_keys()
    first.append("extra")
    assert setting_keys() == ["BadBotName", "BadIpPrefix", "AllowIpPrefix"]