"""Multi-select state scoped to the current listing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolbarState:
    """Snapshot published to toolbar observers after every selection change.

    Attributes:
        count: Number of selected items.
        actions_enabled: Whether batch actions (delete, copy, move) are available.
        all_selected: Whether every visible item is selected.
        label: Short count label, empty when nothing is selected.
    """

    count: int
    actions_enabled: bool
    all_selected: bool
    label: str


SelectionObserver = Callable[[ToolbarState], None]


class SelectionModel:
    """Own the set of selected item paths.

    The model is the only component that mutates the selection. Once a
    listing scope is installed, paths outside it are ignored so the selection
    always refers to visible entries.
    """

    def __init__(self) -> None:
        # insertion-ordered; values unused
        self._selected: dict[str, None] = {}
        self._visible: Optional[frozenset[str]] = None
        self._observers: list[SelectionObserver] = []

    def subscribe(self, observer: SelectionObserver) -> Callable[[], None]:
        """Register ``observer`` and return a callable that unregisters it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def scope_to(self, paths: Iterable[str]) -> None:
        """Install the paths of a freshly loaded listing and clear the selection."""
        self._visible = frozenset(paths)
        self._selected.clear()
        self._publish()

    def toggle(self, path: str) -> None:
        if not self._in_scope(path):
            LOGGER.debug("Ignoring toggle for %s; not in the current listing.", path)
        elif path in self._selected:
            del self._selected[path]
        else:
            self._selected[path] = None
        self._publish()

    def select_all(self, paths: Iterable[str]) -> None:
        """Select every path in ``paths``, or clear them if all are already selected."""
        candidates = [path for path in dict.fromkeys(paths) if self._in_scope(path)]
        if candidates and not all(path in self._selected for path in candidates):
            for path in candidates:
                self._selected.setdefault(path, None)
        else:
            for path in candidates:
                self._selected.pop(path, None)
        self._publish()

    def clear(self) -> None:
        self._selected.clear()
        self._publish()

    def is_selected(self, path: str) -> bool:
        return path in self._selected

    def size(self) -> int:
        return len(self._selected)

    def all(self) -> frozenset[str]:
        return frozenset(self._selected)

    def ordered(self) -> tuple[str, ...]:
        """Return selected paths in the order they were selected."""
        return tuple(self._selected)

    def toolbar_state(self) -> ToolbarState:
        count = len(self._selected)
        visible = len(self._visible) if self._visible is not None else count
        return ToolbarState(
            count=count,
            actions_enabled=count > 0,
            all_selected=count > 0 and count == visible,
            label=f"{count} selected" if count else "",
        )

    def _in_scope(self, path: str) -> bool:
        return self._visible is None or path in self._visible

    def _publish(self) -> None:
        state = self.toolbar_state()
        for observer in list(self._observers):
            observer(state)


__all__ = ["SelectionModel", "SelectionObserver", "ToolbarState"]
