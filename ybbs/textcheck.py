"""Checks and clean-up for user names."""

from __future__ import annotations

import regex

_NICKNAME = regex.compile(r"[a-z0-9A-Z\p{Han}]+(?:_[a-z0-9A-Z\p{Han}]+)*")
_NOT_NAME_CHAR = regex.compile(r"[^a-z0-9A-Z\p{Han}]+")


def is_nickname(text: str) -> bool:
    """True for letters, digits and Han characters, joined by single underscores."""
    return bool(text) and _NICKNAME.fullmatch(text) is not None


def remove_character(text: str) -> str:
    """Remove everything that may not appear in a user name."""
    return _NOT_NAME_CHAR.sub("", text)