"""In-process session provider.

Implements the core SessionProviderPort for hosts that push tab lifecycle
changes directly (scenario replays, embedding applications and tests).
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from core.models import LiveSession
from core.ports import SessionListener, Unsubscribe

LOGGER = logging.getLogger(__name__)


class InMemorySessionProvider:
    """Tracks open tabs and notifies listeners when they change."""

    def __init__(self, sessions: Optional[list[LiveSession]] = None) -> None:
        self._sessions: dict[int, LiveSession] = {}
        self._listeners: dict[str, list[SessionListener]] = {
            "created": [],
            "updated": [],
            "removed": [],
        }
        for session in sessions or []:
            self._sessions[session.id] = session

    def _listen(self, kind: str, listener: SessionListener) -> Unsubscribe:
        self._listeners[kind].append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners[kind]:
                self._listeners[kind].remove(listener)

        return _unsubscribe

    def _notify(self, kind: str, session: LiveSession) -> None:
        for listener in list(self._listeners[kind]):
            listener(session)

    def get_all_live_sessions(self, callback: Callable[[list[LiveSession]], None]) -> None:
        callback(list(self._sessions.values()))

    def on_created(self, listener: SessionListener) -> Unsubscribe:
        return self._listen("created", listener)

    def on_updated(self, listener: SessionListener) -> Unsubscribe:
        return self._listen("updated", listener)

    def on_removed(self, listener: SessionListener) -> Unsubscribe:
        return self._listen("removed", listener)

    def open_session(self, session_id: int, title: str = "", url: Optional[str] = None) -> LiveSession:
        session = LiveSession(id=session_id, title=title, url=url)
        self._sessions[session_id] = session
        self._notify("created", session)
        return session

    def update_session(self, session_id: int, title: str = "", url: Optional[str] = None) -> LiveSession:
        session = LiveSession(id=session_id, title=title, url=url)
        self._sessions[session_id] = session
        self._notify("updated", session)
        return session

    def close_session(self, session_id: int) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            LOGGER.debug("Ignoring close for unknown session %s", session_id)
            return
        self._notify("removed", session)
