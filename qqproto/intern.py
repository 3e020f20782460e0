"""Thread-safe string interning."""

from __future__ import annotations

import threading


class StringInterner:
    """Returns a canonical instance for equal strings."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._strings: dict[str, str] = {}

    def intern(self, s: str) -> str:
        """Return the stored string equal to ``s``, storing ``s`` if new."""
        with self._lock:
            return self._strings.setdefault(s, s)

    def __len__(self) -> int:
        with self._lock:
            return len(self._strings)