from __future__ import annotations

from core.bus import NotificationBus, NotificationKind
from core.config import BackgroundSessionConfig, FilteringLogConfig
from core.models import LiveSession
from core.registry import SessionRegistry


class RecordingBus(NotificationBus):
    def __init__(self) -> None:
        super().__init__()
        self.published: list[tuple[str, int]] = []

    def publish(self, kind, *payload) -> None:
        self.published.append((kind.value, payload[0].id))
        super().publish(kind, *payload)


def _registry(**config) -> tuple[SessionRegistry, RecordingBus]:
    bus = RecordingBus()
    return SessionRegistry(FilteringLogConfig(**config), bus), bus


def test_background_session_is_installed_and_protected() -> None:
    registry, bus = _registry()

    background = registry.get(-1)
    assert background is not None
    assert background.is_special_session

    registry.create(LiveSession(id=-1, title="tab"))
    registry.update(LiveSession(id=-1, title="tab"))
    registry.remove(-1)

    assert registry.get(-1).title == "Background"
    assert bus.published == []


def test_background_session_can_be_disabled() -> None:
    registry, _ = _registry(background=BackgroundSessionConfig(enabled=False))

    assert registry.sessions() == []


def test_update_refreshes_title_and_host_flag_in_place() -> None:
    registry, bus = _registry(host_url_prefix="chrome-extension://filterlog/")
    registry.create(LiveSession(id=5, title="Loading", url="https://example.com/"))
    session = registry.get(5)

    registry.update(LiveSession(id=5, title="Filter log", url="chrome-extension://filterlog/log.html"))

    assert registry.get(5) is session
    assert session.title == "Filter log"
    assert session.is_host_tab_special
    assert bus.published == [("session-added", 5), ("session-updated", 5)]


def test_remove_unknown_session_is_silent() -> None:
    registry, bus = _registry()

    registry.remove(99)

    assert bus.published == []


def test_reconcile_adds_updates_and_removes() -> None:
    registry, bus = _registry()
    registry.create(LiveSession(id=1, title="old"))
    registry.create(LiveSession(id=2, title="gone"))
    bus.published.clear()

    sessions = registry.reconcile([LiveSession(id=1, title="kept"), LiveSession(id=3, title="new")])

    assert sorted(session.id for session in sessions) == [-1, 1, 3]
    assert registry.get(1).title == "kept"
    assert registry.get(2) is None
    assert bus.published == [
        ("session-updated", 1),
        ("session-added", 3),
        ("session-removed", 2),
    ]


def test_reconcile_is_idempotent_for_added_and_removed() -> None:
    registry, bus = _registry()
    live = [LiveSession(id=1, title="a"), LiveSession(id=2, title="b")]
    registry.reconcile(live)
    bus.published.clear()

    registry.reconcile(live)

    assert bus.published == [("session-updated", 1), ("session-updated", 2)]
