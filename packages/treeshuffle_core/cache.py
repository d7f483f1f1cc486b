"""Bounded in-process cache of finished randomizer outputs."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Any, Hashable, Optional

DEFAULT_CAPACITY = 10


class ResultCache:
    """Insertion-ordered map that drops its oldest entry past ``capacity``.

    Re-putting an existing key overwrites the value without refreshing its
    age; concurrent runs for the same key simply race to the same result.
    """

    def __init__(self, *, capacity: int = DEFAULT_CAPACITY) -> None:
        self.capacity = max(1, int(capacity))
        self._entries: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: Hashable, value: Any) -> None:
        with self._lock:
            self._entries[key] = value
            while len(self._entries) > self.capacity:
                self._entries.popitem(last=False)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[Hashable]:
        with self._lock:
            return list(self._entries)

    def clear(self) -> None:
        """Drop every entry (for testing)."""
        with self._lock:
            self._entries.clear()
