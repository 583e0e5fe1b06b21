"""SelectionModel behavior and toolbar notifications."""

from __future__ import annotations

from dirdeck.state import SelectionModel, ToolbarState


def _scoped(*paths: str) -> SelectionModel:
    model = SelectionModel()
    model.scope_to(paths)
    return model


def test_toggle_twice_is_a_no_op() -> None:
    model = _scoped("a.txt", "b.txt")
    model.toggle("b.txt")

    model.toggle("a.txt")
    model.toggle("a.txt")

    assert not model.is_selected("a.txt")
    assert model.size() == 1
    assert model.all() == frozenset({"b.txt"})


def test_select_all_toggles_all_then_none_then_all() -> None:
    visible = {"a.txt", "b.txt", "docs"}
    model = _scoped(*visible)

    model.select_all(visible)
    assert model.all() == frozenset(visible)

    model.select_all(visible)
    assert model.size() == 0

    model.select_all(visible)
    assert model.size() == 3


def test_select_all_with_partial_selection_selects_everything() -> None:
    visible = ["a.txt", "b.txt"]
    model = _scoped(*visible)
    model.toggle("a.txt")

    model.select_all(visible)

    assert model.all() == frozenset(visible)


def test_paths_outside_listing_are_ignored() -> None:
    model = _scoped("a.txt")

    model.toggle("elsewhere/x.txt")
    model.select_all(["elsewhere/x.txt"])

    assert model.size() == 0


def test_scope_to_clears_selection() -> None:
    model = _scoped("a.txt", "b.txt")
    model.toggle("a.txt")

    model.scope_to(["c.txt"])

    assert model.size() == 0
    assert not model.is_selected("a.txt")


def test_ordered_preserves_selection_order() -> None:
    model = _scoped("a", "b", "c")
    model.toggle("c")
    model.toggle("a")

    assert model.ordered() == ("c", "a")


def test_every_mutation_publishes_toolbar_state() -> None:
    model = _scoped("a.txt", "b.txt")
    seen: list[ToolbarState] = []
    unsubscribe = model.subscribe(seen.append)

    model.toggle("a.txt")
    model.select_all(["a.txt", "b.txt"])
    model.clear()

    assert [state.count for state in seen] == [1, 2, 0]
    assert seen[0] == ToolbarState(
        count=1, actions_enabled=True, all_selected=False, label="1 selected"
    )
    assert seen[1].all_selected
    assert seen[2] == ToolbarState(count=0, actions_enabled=False, all_selected=False, label="")

    unsubscribe()
    model.toggle("b.txt")
    assert len(seen) == 3
