"""A list of strings that can be shared between threads."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Iterator


class SafeStrList:
    """Strings behind a lock; readers see an immutable snapshot."""

    def __init__(self, items: Iterable[str] = ()):
        self._lock = threading.Lock()
        self._items: tuple[str, ...] = tuple(items)

    def append(self, item: str) -> None:
        with self._lock:
            self._items = (*self._items, item)

    def sort(self) -> None:
        with self._lock:
            self._items = tuple(sorted(self._items))

    def replace(self, items: Iterable[str]) -> None:
        """Replace every item with ``items``."""
        new_items = tuple(items)
        with self._lock:
            self._items = new_items

    def get(self, index: int) -> str:
        """Item at ``index``, or an empty string when out of range."""
        items = self._items
        return items[index] if 0 <= index < len(items) else ""

    def item_in_prefix(self, text: str) -> bool:
        """True when some item is a prefix of ``text``."""
        return any(text.startswith(prefix) for prefix in self._items)

    def __contains__(self, text: object) -> bool:
        return text in self._items

    def mod_get(self, index: int) -> str:
        """Item at ``index`` wrapped around the length."""
        items = self._items
        if not items:
            raise IndexError("mod_get on an empty list")
        return items[index % len(items)]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def items(self) -> list[str]:
        return list(self._items)