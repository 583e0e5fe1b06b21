"""BusyIndicator scope tests."""

from __future__ import annotations

import pytest

from dirdeck.state import BusyIndicator


def test_scope_releases_on_exception() -> None:
    busy = BusyIndicator()
    events: list[tuple[str, bool]] = []
    busy.subscribe(lambda control, state: events.append((control, state)))

    with pytest.raises(RuntimeError):
        with busy.scope("upload"):
            assert busy.is_busy("upload")
            raise RuntimeError("boom")

    assert not busy.is_busy()
    assert events == [("upload", True), ("upload", False)]


def test_nested_scopes_publish_once() -> None:
    busy = BusyIndicator()
    events: list[tuple[str, bool]] = []
    busy.subscribe(lambda control, state: events.append((control, state)))

    with busy.scope("listing"):
        with busy.scope("listing"):
            assert busy.active() == frozenset({"listing"})
        assert busy.is_busy("listing")

    assert events == [("listing", True), ("listing", False)]
    assert not busy.is_busy("listing")
