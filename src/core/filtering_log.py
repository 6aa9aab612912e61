"""Per-session filtering decision log.

This module is host-agnostic. It only relies on the session provider port,
enabling different hosts (or test doubles) without changes here.

Recording and enrichment are gated: while no observer is open the log does no
retention work at all. Every mutation and the notifications it produces run
under one re-entrant lock, so subscribers never see a half-applied change and
may call back into the read operations.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Hashable, Iterable, Optional, Union

from core.buffer import EventBuffer
from core.bus import Handler, NotificationBus, NotificationKind
from core.config import FilteringLogConfig
from core.events import (
    Element,
    build_cookie_event,
    build_element_event,
    build_request_event,
    snapshot_rule,
)
from core.gate import ObserverGate
from core.models import FilteringEvent, LiveSession, LogDiagnostics, Session
from core.ports import SessionProviderPort, Unsubscribe
from core.registry import SessionRegistry
from core.rules import FilterRule

LOGGER = logging.getLogger(__name__)

SessionRef = Union[int, Session, LiveSession, Any]


def _session_id(session: SessionRef) -> int:
    if isinstance(session, int):
        return session
    return session.id


class FilteringLog:
    """Records, bounds, enriches and broadcasts filtering events per session."""

    def __init__(
        self,
        provider: SessionProviderPort,
        config: Optional[FilteringLogConfig] = None,
    ) -> None:
        self._provider = provider
        self._config = config or FilteringLogConfig()
        self._lock = threading.RLock()
        self._bus = NotificationBus()
        self._gate = ObserverGate()
        self._registry = SessionRegistry(self._config, self._bus)
        self._host_subscriptions: list[Unsubscribe] = []
        self.diagnostics = LogDiagnostics()

    # Lifecycle

    def start(self) -> None:
        """Follow host session notifications and run the initial reconciliation."""

        if self._host_subscriptions:
            return
        self._host_subscriptions = [
            self._provider.on_created(self._on_session_created),
            self._provider.on_updated(self._on_session_updated),
            self._provider.on_removed(self._on_session_removed),
        ]
        LOGGER.info("Filtering log started (capacity=%s)", self._config.capacity)
        self.reconcile_sessions()

    def stop(self) -> None:
        """Detach from the host and drop every session and buffered event."""

        for unsubscribe in self._host_subscriptions:
            unsubscribe()
        self._host_subscriptions = []
        with self._lock:
            self._registry.clear()
            self._gate = ObserverGate()
        LOGGER.info("Filtering log stopped")

    def _on_session_created(self, live: LiveSession) -> None:
        with self._lock:
            self._registry.create(live)

    def _on_session_updated(self, live: LiveSession) -> None:
        with self._lock:
            self._registry.update(live)

    def _on_session_removed(self, live: LiveSession) -> None:
        with self._lock:
            self._registry.remove(live.id)

    # Sessions

    def reconcile_sessions(self, callback: Optional[Callable[[list[Session]], None]] = None) -> None:
        """Ask the host for its live sessions and converge the registry on them.

        ``callback`` receives the full session list once the host answers.
        """

        def _on_live_sessions(live_sessions: Iterable[LiveSession]) -> None:
            with self._lock:
                sessions = self._registry.reconcile(list(live_sessions))
            if callback is not None:
                callback(sessions)

        self._provider.get_all_live_sessions(_on_live_sessions)

    def get_session(self, session_id: int) -> Optional[Session]:
        with self._lock:
            return self._registry.get(session_id)

    def sessions(self) -> list[Session]:
        with self._lock:
            return self._registry.sessions()

    def reset_session_events(self, session_id: int) -> None:
        """Drop the buffered events of one session, keeping the session itself."""

        with self._lock:
            session = self._registry.get(session_id)
            if session is None:
                return
            session.buffer = None
            self._bus.publish(NotificationKind.SESSION_RESET, session)

    # Observers

    def open_observer(self) -> None:
        with self._lock:
            count = self._gate.open()
        LOGGER.debug("Observer opened (%s open)", count)

    def close_observer(self) -> None:
        """Close one observer; closing the last one clears every buffer."""

        with self._lock:
            if not self._gate.close():
                return
            for session in self._registry.sessions():
                session.buffer = None
                self._bus.publish(NotificationKind.SESSION_RESET, session)
        LOGGER.debug("Last observer closed, buffers cleared")

    def is_observer_active(self) -> bool:
        with self._lock:
            return self._gate.active

    @property
    def observer_count(self) -> int:
        return self._gate.count

    def subscribe(self, kind: NotificationKind, handler: Handler) -> Unsubscribe:
        return self._bus.subscribe(kind, handler)

    def unsubscribe(self, kind: NotificationKind, handler: Handler) -> None:
        self._bus.unsubscribe(kind, handler)

    @property
    def failed_deliveries(self) -> int:
        return self._bus.failed_deliveries

    # Recording

    def _recording_session(self, session: SessionRef) -> Optional[Session]:
        # Callers hold the lock.
        if not self._gate.active:
            self.diagnostics.gated_drops += 1
            return None
        target = self._registry.get(_session_id(session))
        if target is None:
            self.diagnostics.unknown_session_drops += 1
            LOGGER.debug("Dropping event for unknown session %s", _session_id(session))
        return target

    def _append(self, session: Session, event: FilteringEvent) -> None:
        if session.buffer is None:
            session.buffer = EventBuffer(self._config.capacity)
        session.buffer.append(event)
        self._bus.publish(NotificationKind.EVENT_ADDED, session, event)

    def record_request_event(
        self,
        session: SessionRef,
        request_url: str,
        frame_url: str,
        request_type: str,
        rule: Optional[FilterRule],
        event_id: Optional[Hashable],
    ) -> None:
        with self._lock:
            target = self._recording_session(session)
            if target is None:
                return
            event = build_request_event(request_url, frame_url, request_type, rule, event_id)
            self._append(target, event)

    def record_element_event(
        self,
        session: SessionRef,
        element: Element,
        frame_url: str,
        request_type: str,
        rule: Optional[FilterRule],
    ) -> None:
        """Log a cosmetic decision; elements without a matching rule are not logged."""

        if rule is None:
            return
        with self._lock:
            target = self._recording_session(session)
            if target is None:
                return
            self._append(target, build_element_event(element, frame_url, request_type, rule))

    def record_cookie_event(
        self,
        session: SessionRef,
        cookie_name: str,
        cookie_value: str,
        cookie_domain: str,
        request_type: str,
        rule: Optional[FilterRule],
        is_modifying: bool,
        third_party: bool,
    ) -> None:
        with self._lock:
            target = self._recording_session(session)
            if target is None:
                return
            event = build_cookie_event(
                cookie_name,
                cookie_value,
                cookie_domain,
                request_type,
                rule,
                is_modifying,
                third_party,
            )
            self._append(target, event)

    # Enrichment

    def _enrich(
        self,
        session: SessionRef,
        event_id: Hashable,
        mutate: Callable[[FilteringEvent], None],
    ) -> None:
        with self._lock:
            target = self._recording_session(session)
            if target is None:
                return
            event = target.buffer.find_latest(event_id) if target.buffer is not None else None
            if event is None:
                self.diagnostics.enrichment_misses += 1
                LOGGER.debug("No event %r in session %s to enrich", event_id, target.id)
                return
            mutate(event)
            self._bus.publish(NotificationKind.EVENT_UPDATED, target, event)

    def bind_rule(self, session: SessionRef, rule: FilterRule, event_id: Hashable) -> None:
        """Attach the rule that matched a previously logged request."""

        def _mutate(event: FilteringEvent) -> None:
            # A single rule supersedes any earlier replace outcome.
            event.applied_rule = snapshot_rule(rule)
            event.is_replace = False
            event.replace_rules = None

        self._enrich(session, event_id, _mutate)

    def bind_replace_rules(
        self,
        session: SessionRef,
        rules: Iterable[FilterRule],
        event_id: Hashable,
    ) -> None:
        """Mark a logged request as rewritten by one or more replace rules."""

        rules = list(rules)

        def _mutate(event: FilteringEvent) -> None:
            event.applied_rule = None
            event.is_replace = True
            event.replace_rules = [snapshot_rule(rule) for rule in rules]

        self._enrich(session, event_id, _mutate)

    def bind_applied_actions(self, session: SessionRef, actions: int, event_id: Hashable) -> None:
        """Attach the stealth actions applied to a logged request."""

        def _mutate(event: FilteringEvent) -> None:
            event.applied_actions = int(actions)

        self._enrich(session, event_id, _mutate)
