"""Synchronous notification bus for filtering log changes."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable

LOGGER = logging.getLogger(__name__)

Handler = Callable[..., Any]


class NotificationKind(str, enum.Enum):
    """Change notifications published by the filtering log.

    Session kinds deliver ``(session,)``; event kinds deliver
    ``(session, event)``.
    """

    SESSION_ADDED = "session-added"
    SESSION_UPDATED = "session-updated"
    SESSION_REMOVED = "session-removed"
    SESSION_RESET = "session-reset"
    EVENT_ADDED = "event-added"
    EVENT_UPDATED = "event-updated"


class NotificationBus:
    """Fan out notifications to subscribers in registration order.

    A handler that raises is logged and skipped; the remaining handlers and
    the publisher are unaffected.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._handlers: dict[NotificationKind, list[Handler]] = {kind: [] for kind in NotificationKind}
        self.failed_deliveries = 0

    def subscribe(self, kind: NotificationKind, handler: Handler) -> Callable[[], None]:
        """Register ``handler`` for ``kind`` and return a callable that removes it."""

        kind = NotificationKind(kind)
        with self._lock:
            self._handlers[kind].append(handler)

        def _unsubscribe() -> None:
            self.unsubscribe(kind, handler)

        return _unsubscribe

    def unsubscribe(self, kind: NotificationKind, handler: Handler) -> None:
        kind = NotificationKind(kind)
        with self._lock:
            try:
                self._handlers[kind].remove(handler)
            except ValueError:
                pass

    def publish(self, kind: NotificationKind, *payload: Any) -> None:
        with self._lock:
            handlers = list(self._handlers[kind])
        for handler in handlers:
            try:
                handler(*payload)
            except Exception:
                self.failed_deliveries += 1
                LOGGER.exception("Subscriber %r failed on %s", handler, kind.value)
