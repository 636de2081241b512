"""Notices about timers the server stopped on its own."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class TimerNotification:
    title: str
    message: str
    log_id: int | None = None
    name: str | None = None
    time_spent: int | None = None
    end_time: datetime | None = None
    timestamp: float = field(default_factory=time.time)


class NotificationCenter:
    """Ordered list of timer notices, newest last, dismissed by timestamp."""

    def __init__(self, limit: int = 20):
        self.limit = limit
        self._items: list[TimerNotification] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def add(self, notification: TimerNotification) -> TimerNotification:
        self._items.append(notification)
        del self._items[: max(0, len(self._items) - self.limit)]
        return notification

    def remove(self, timestamp: float) -> bool:
        before = len(self._items)
        self._items = [n for n in self._items if n.timestamp != timestamp]
        return len(self._items) != before

    def clear(self) -> None:
        self._items.clear()
