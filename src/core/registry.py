"""Session registry (core domain).

Owns the session id -> Session map. The host is the source of truth for which
sessions exist; the registry mirrors it through individual create/update/
remove calls and a full reconciliation sweep.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from core.bus import NotificationBus, NotificationKind
from core.config import FilteringLogConfig
from core.models import LiveSession, Session

LOGGER = logging.getLogger(__name__)


class SessionRegistry:
    """Mapping of live sessions plus the permanent background session."""

    def __init__(self, config: FilteringLogConfig, bus: NotificationBus) -> None:
        self._config = config
        self._bus = bus
        self._sessions: dict[int, Session] = {}
        self._install_background()

    def _install_background(self) -> None:
        background = self._config.background
        if background.enabled:
            self._sessions[background.session_id] = Session(
                id=background.session_id,
                title=background.title,
                is_special_session=True,
            )

    def _is_background(self, session_id: int) -> bool:
        return session_id == self._config.background.session_id

    def _is_host_page(self, url: Optional[str]) -> bool:
        prefix = self._config.host_url_prefix
        return bool(prefix and url and url.startswith(prefix))

    def _upsert(self, live: LiveSession) -> Session:
        # Title and host flag are refreshed in place so the buffer survives.
        session = self._sessions.get(live.id)
        if session is None:
            session = Session(id=live.id)
            self._sessions[live.id] = session
        session.title = live.title
        session.is_host_tab_special = self._is_host_page(live.url)
        return session

    def get(self, session_id: int) -> Optional[Session]:
        return self._sessions.get(session_id)

    def sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def create(self, live: LiveSession) -> None:
        if self._is_background(live.id):
            return
        session = self._upsert(live)
        LOGGER.debug("Session %s added", live.id)
        self._bus.publish(NotificationKind.SESSION_ADDED, session)

    def update(self, live: LiveSession) -> None:
        if self._is_background(live.id):
            return
        session = self._upsert(live)
        self._bus.publish(NotificationKind.SESSION_UPDATED, session)

    def remove(self, session_id: int) -> None:
        if self._is_background(session_id):
            return
        session = self._sessions.pop(session_id, None)
        if session is None:
            return
        if session.buffer is not None:
            session.buffer.clear()
            session.buffer = None
        LOGGER.debug("Session %s removed", session_id)
        self._bus.publish(NotificationKind.SESSION_REMOVED, session)

    def reconcile(self, live_sessions: Iterable[LiveSession]) -> list[Session]:
        """Converge the registry on the host's current session list.

        Unknown sessions are created, known ones refreshed (always notified,
        even when nothing changed) and vanished ones removed. The background
        session is kept.
        """

        known_ids = list(self._sessions)
        live_ids: set[int] = set()
        for live in live_sessions:
            if live.id in self._sessions:
                self.update(live)
            else:
                self.create(live)
            live_ids.add(live.id)
        for session_id in known_ids:
            if session_id not in live_ids:
                self.remove(session_id)
        return self.sessions()

    def clear(self) -> None:
        """Drop every session and reinstall the background session."""

        self._sessions.clear()
        self._install_background()
