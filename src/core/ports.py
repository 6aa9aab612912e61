"""Ports (interfaces) used by the filtering log.

Ports define the minimal contracts for the host environment so that the core
can be reused with different browsers or test doubles.
"""

from __future__ import annotations

from typing import Callable, Protocol

from core.models import LiveSession

SessionListener = Callable[[LiveSession], None]
Unsubscribe = Callable[[], None]


class SessionProviderPort(Protocol):
    """Host-owned source of truth for live sessions (tabs)."""

    def get_all_live_sessions(self, callback: Callable[[list[LiveSession]], None]) -> None:
        ...

    def on_created(self, listener: SessionListener) -> Unsubscribe:
        ...

    def on_updated(self, listener: SessionListener) -> Unsubscribe:
        ...

    def on_removed(self, listener: SessionListener) -> Unsubscribe:
        ...
