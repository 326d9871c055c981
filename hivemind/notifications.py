"""Advisory notifications with explicit expiry."""
import itertools
import logging
from dataclasses import dataclass

from hivemind.config import Config

logger = logging.getLogger(__name__)

NOTIFICATION_KINDS = ('info', 'success', 'warning', 'error')

@dataclass
class Notification:
    id: str
    kind: str
    title: str
    message: str
    created_at_ms: int
    display_duration_ms: int

    @property
    def expires_at_ms(self):
        return self.created_at_ms + self.display_duration_ms

    def is_expired(self, now_ms):
        return now_ms >= self.expires_at_ms

    def to_dict(self):
        return {
            'id': self.id,
            'kind': self.kind,
            'title': self.title,
            'message': self.message,
            'createdAtMs': self.created_at_ms,
            'displayDurationMs': self.display_duration_ms,
            'expiresAtMs': self.expires_at_ms
        }


class NotificationCenter:
    """Holds active notifications; expired ones are removed by sweep()."""

    def __init__(self, clock):
        self.clock = clock
        self.active = []
        self._ids = itertools.count(1)

    def notify(self, kind, title, message, duration_ms=None):
        """Queue a notification and return it."""
        if kind not in NOTIFICATION_KINDS:
            raise ValueError(f"Unknown notification kind: {kind}")
        if duration_ms is None:
            duration_ms = Config.NOTIFICATION_DEFAULT_DURATION_MS
        now_ms = self.clock()
        notification = Notification(
            id=f"notification-{now_ms}-{next(self._ids)}",
            kind=kind,
            title=title,
            message=message,
            created_at_ms=now_ms,
            display_duration_ms=int(duration_ms)
        )
        self.active.append(notification)
        logger.debug("Notification %s: %s - %s", kind, title, message)
        return notification

    def dismiss(self, notification_id):
        before = len(self.active)
        self.active = [n for n in self.active if n.id != notification_id]
        return len(self.active) < before

    def sweep(self, now_ms=None):
        """Remove expired notifications. Returns how many were removed."""
        if now_ms is None:
            now_ms = self.clock()
        before = len(self.active)
        self.active = [n for n in self.active if not n.is_expired(now_ms)]
        return before - len(self.active)

    def clear(self):
        self.active = []

    def to_list(self):
        return [n.to_dict() for n in self.active]
