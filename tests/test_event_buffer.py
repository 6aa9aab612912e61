from __future__ import annotations

import pytest

from core.buffer import EventBuffer
from core.models import EventCategory, FilteringEvent


def _event(event_id) -> FilteringEvent:
    return FilteringEvent(category=EventCategory.REQUEST, event_id=event_id)


def test_overflow_evicts_second_record_and_keeps_first() -> None:
    buffer = EventBuffer()
    first = _event(0)
    buffer.append(first)
    evicted = []
    for index in range(1, 1001):
        dropped = buffer.append(_event(index))
        if dropped is not None:
            evicted.append(dropped.event_id)

    records = buffer.records()
    assert len(records) == 1000
    assert records[0] is first
    assert evicted == [1]
    assert records[1].event_id == 2
    assert records[-1].event_id == 1000


def test_length_never_exceeds_capacity() -> None:
    buffer = EventBuffer(capacity=3)
    for index in range(10):
        buffer.append(_event(index))
        assert len(buffer) <= 3
    assert [record.event_id for record in buffer] == [0, 8, 9]


def test_find_latest_prefers_newest_duplicate() -> None:
    buffer = EventBuffer()
    older = _event("dup")
    newer = _event("dup")
    buffer.append(older)
    buffer.append(_event("other"))
    buffer.append(newer)

    assert buffer.find_latest("dup") is newer
    assert buffer.find_latest("missing") is None


def test_find_latest_ignores_records_without_ids() -> None:
    buffer = EventBuffer()
    buffer.append(_event(None))

    assert buffer.find_latest(None) is None


def test_capacity_must_be_positive() -> None:
    with pytest.raises(ValueError):
        EventBuffer(capacity=0)
