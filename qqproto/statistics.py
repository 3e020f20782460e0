"""Connection and message counters."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field, fields

_JSON_ORDER = (
    "packet_received",
    "packet_sent",
    "packet_lost",
    "message_received",
    "message_sent",
    "disconnect_times",
    "lost_times",
    "last_message_time",
)


@dataclass
class Statistics:
    """Running counters of a client session."""

    packet_received: int = 0
    packet_sent: int = 0
    packet_lost: int = 0
    message_received: int = 0
    message_sent: int = 0
    last_message_time: int = 0
    disconnect_times: int = 0
    lost_times: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def add(self, field: str, amount: int = 1) -> int:
        """Atomically add ``amount`` to a counter and return its new value."""
        if field not in _JSON_ORDER:
            raise KeyError(f"unknown statistics field: {field}")
        with self._lock:
            value = getattr(self, field) + amount
            setattr(self, field, value)
            return value

    def as_dict(self) -> dict[str, int]:
        """Return a snapshot of all counters."""
        with self._lock:
            return {name: getattr(self, name) for name in _JSON_ORDER}

    def to_json(self) -> str:
        """Encode the counters as compact JSON."""
        return json.dumps(self.as_dict(), separators=(",", ":"))


assert {f.name for f in fields(Statistics) if not f.name.startswith("_")} == set(_JSON_ORDER)