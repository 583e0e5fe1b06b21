"""PathModel navigation and breadcrumb tests."""

from __future__ import annotations

import pytest

from dirdeck.state import PathModel, basename, join_path, normalize_path, parent_of


def test_root_breadcrumb_is_single_current_home() -> None:
    model = PathModel()

    crumbs = model.segments()

    assert model.current() == ""
    assert [(crumb.label, crumb.path, crumb.navigable) for crumb in crumbs] == [
        ("home", "", False)
    ]


def test_nested_breadcrumb_yields_cumulative_paths() -> None:
    model = PathModel()
    model.navigate_to("a/b/c")

    crumbs = model.segments()

    assert [(crumb.label, crumb.path) for crumb in crumbs] == [
        ("home", ""),
        ("a", "a"),
        ("b", "a/b"),
        ("c", "a/b/c"),
    ]
    assert [crumb.navigable for crumb in crumbs] == [True, True, True, False]


def test_navigate_to_is_unconditional_and_normalizes_separators() -> None:
    model = PathModel("docs")

    model.navigate_to("/does/not//exist/")

    assert model.current() == "does/not/exist"


@pytest.mark.parametrize(
    ("parent", "name", "expected"),
    [("", "docs", "docs"), ("docs", "archive", "docs/archive"), ("docs/", "/x/", "docs/x")],
)
def test_join_path(parent: str, name: str, expected: str) -> None:
    assert join_path(parent, name) == expected


def test_path_helpers() -> None:
    assert normalize_path("//a///b/") == "a/b"
    assert parent_of("a/b/c") == "a/b"
    assert parent_of("a") == ""
    assert basename("a/b/c.txt") == "c.txt"
