"""Reference-counted observer gate."""

from __future__ import annotations


class ObserverGate:
    """Counts open observers; recording is only allowed while one is open."""

    def __init__(self) -> None:
        self._count = 0

    @property
    def count(self) -> int:
        return self._count

    @property
    def active(self) -> bool:
        return self._count > 0

    def open(self) -> int:
        self._count += 1
        return self._count

    def close(self) -> bool:
        """Decrement (never below zero); True when the last observer closed."""

        if self._count == 0:
            return False
        self._count -= 1
        return self._count == 0
