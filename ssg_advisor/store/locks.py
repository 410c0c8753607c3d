"""
Per-key lock registry.

``hold(key)`` runs its body inside a critical section private to ``key``.
Each entry counts the threads holding or waiting on its lock; the entry is
dropped when that count returns to zero, so the registry only holds keys
that are in use right now.

An entry is never removed while any thread holds or waits on it, so two
threads working on the same key always share one lock. The registry lock is
held only for the bookkeeping, never while a caller works inside a key's
critical section.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class KeyedLockRegistry:
    """Hands out one lock per key for as long as the key is in use."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Run the ``with`` body inside ``key``'s critical section."""
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    def is_held(self, key: str) -> bool:
        """True if some thread is inside ``key``'s critical section."""
        with self._guard:
            entry = self._entries.get(key)
            return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._guard:
            return key in self._entries
