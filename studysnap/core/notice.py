"""
Single-owner cell holding the pending fallback notice.

The first writer wins; reading takes the notice and clears the cell, so a
notice is delivered at most once.
"""

from __future__ import annotations

import threading


class FallbackNoticeSlot:
    """Thread-safe first-writer-wins notice cell."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._notice: str | None = None

    def set_if_absent(self, notice: str | None) -> bool:
        """Store ``notice`` unless one is already pending. Returns True if stored."""
        if not notice:
            return False
        with self._lock:
            if self._notice is not None:
                return False
            self._notice = notice
            return True

    def take_and_clear(self) -> str | None:
        with self._lock:
            notice, self._notice = self._notice, None
            return notice

    def clear(self) -> None:
        with self._lock:
            self._notice = None

    def peek(self) -> str | None:
        with self._lock:
            return self._notice
