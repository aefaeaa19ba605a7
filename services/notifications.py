import threading
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime

from flask import current_app

EXTENSION_KEY = 'finflow.notifications'


@dataclass(frozen=True)
class ChangeEvent:
    action: str
    table: str
    occurred_at: datetime = field(default_factory=datetime.now)

    @property
    def description(self):
        return f"New {self.action} in {self.table}"

    def to_dict(self):
        return {
            'action': self.action,
            'table': self.table,
            'description': self.description,
            'occurred_at': self.occurred_at.isoformat(timespec='seconds'),
        }


class NotificationQueue:
    """Newest-first bounded queue of change events."""

    def __init__(self, maxlen):
        self._events = deque(maxlen=maxlen)
        self._lock = threading.Lock()

    def push(self, event):
        with self._lock:
            self._events.appendleft(event)

    def peek(self, limit=None):
        with self._lock:
            events = list(self._events)
        return events if limit is None else events[:limit]

    def drain(self):
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events

    def __len__(self):
        return len(self._events)


class NotificationCenter:
    """Per-user notification queues for one application."""

    def __init__(self, maxlen=50):
        self.maxlen = maxlen
        self._queues = {}
        self._lock = threading.Lock()

    def queue_for(self, user_id):
        with self._lock:
            queue = self._queues.get(user_id)
            if queue is None:
                queue = self._queues[user_id] = NotificationQueue(self.maxlen)
            return queue

    def publish(self, user_id, event):
        self.queue_for(user_id).push(event)

    def init_app(self, app):
        app.extensions[EXTENSION_KEY] = self


def notification_center():
    return current_app.extensions[EXTENSION_KEY]


def publish_change(user_id, action, table):
    notification_center().publish(user_id, ChangeEvent(action, table))
