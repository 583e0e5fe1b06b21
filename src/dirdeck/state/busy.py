"""Busy-state tracking for controls with in-flight requests."""

from __future__ import annotations

from collections import Counter
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

BusyObserver = Callable[[str, bool], None]


class BusyIndicator:
    """Track which controls are waiting on a request.

    A control is acquired by entering :meth:`scope` and released on every exit
    path, including exceptions and early returns inside the block.
    """

    def __init__(self) -> None:
        self._active: Counter[str] = Counter()
        self._observers: list[BusyObserver] = []

    def subscribe(self, observer: BusyObserver) -> None:
        self._observers.append(observer)

    @contextmanager
    def scope(self, control: str) -> Iterator[None]:
        self._active[control] += 1
        if self._active[control] == 1:
            self._publish(control, True)
        try:
            yield
        finally:
            self._active[control] -= 1
            if self._active[control] <= 0:
                del self._active[control]
                self._publish(control, False)

    def is_busy(self, control: Optional[str] = None) -> bool:
        if control is None:
            return bool(self._active)
        return self._active[control] > 0

    def active(self) -> frozenset[str]:
        return frozenset(self._active)

    def _publish(self, control: str, busy: bool) -> None:
        for observer in list(self._observers):
            observer(control, busy)


__all__ = ["BusyIndicator", "BusyObserver"]
