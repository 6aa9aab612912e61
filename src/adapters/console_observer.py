"""Console observer for the filtering log.

Opens an observer slot on the log while attached and prints every
notification with rich.
"""

from __future__ import annotations

from functools import partial
from typing import Optional

from rich.console import Console

from adapters.event_formatting import format_notification
from core.bus import NotificationKind
from core.filtering_log import FilteringLog
from core.models import FilteringEvent, Session
from core.ports import Unsubscribe


class ConsoleObserver:
    """Observer adapter that streams log notifications to a console."""

    def __init__(self, log: FilteringLog, console: Optional[Console] = None) -> None:
        self._log = log
        self._console = console or Console()
        self._subscriptions: list[Unsubscribe] = []
        self.lines_printed = 0

    @property
    def attached(self) -> bool:
        return bool(self._subscriptions)

    def attach(self) -> None:
        if self.attached:
            return
        for kind in NotificationKind:
            self._subscriptions.append(self._log.subscribe(kind, partial(self._print, kind)))
        self._log.open_observer()

    def detach(self) -> None:
        if not self.attached:
            return
        # Close first so the reset notifications are still printed.
        self._log.close_observer()
        for unsubscribe in self._subscriptions:
            unsubscribe()
        self._subscriptions = []

    def _print(self, kind: NotificationKind, session: Session, event: Optional[FilteringEvent] = None) -> None:
        self._console.print(format_notification(kind, session, event))
        self.lines_printed += 1

    def __enter__(self) -> "ConsoleObserver":
        self.attach()
        return self

    def __exit__(self, *exc_info) -> None:
        self.detach()
