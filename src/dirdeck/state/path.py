"""Current-directory tracking and breadcrumb decomposition."""

from __future__ import annotations

from dirdeck.models import ROOT_LABEL, ROOT_PATH, BreadcrumbSegment


def normalize_path(path: str) -> str:
    """Return ``path`` without leading, trailing, or repeated separators."""
    return "/".join(segment for segment in path.split("/") if segment)


def join_path(parent: str, name: str) -> str:
    """Join a child ``name`` onto ``parent`` using the root-relative convention."""
    parent = normalize_path(parent)
    name = normalize_path(name)
    if not parent:
        return name
    if not name:
        return parent
    return f"{parent}/{name}"


def parent_of(path: str) -> str:
    """Return the parent directory of ``path`` (the root is its own parent)."""
    segments = normalize_path(path).split("/")
    return "/".join(segments[:-1])


def basename(path: str) -> str:
    """Return the final segment of ``path``."""
    return normalize_path(path).rsplit("/", 1)[-1]


class PathModel:
    """Own the current directory path.

    Navigation never checks existence; the listing load that follows decides
    whether the location is valid.
    """

    def __init__(self, initial: str = ROOT_PATH) -> None:
        self._current = normalize_path(initial)

    def current(self) -> str:
        return self._current

    def navigate_to(self, path: str) -> None:
        self._current = normalize_path(path)

    def segments(self) -> list[BreadcrumbSegment]:
        """Decompose the current path into breadcrumb entries.

        Returns:
            list[BreadcrumbSegment]: The root first, then one entry per path
            segment. Only the final entry (the current location) is not navigable.
        """
        parts = self._current.split("/") if self._current else []
        crumbs = [BreadcrumbSegment(label=ROOT_LABEL, path=ROOT_PATH, navigable=bool(parts))]
        cumulative = ROOT_PATH
        for index, part in enumerate(parts):
            cumulative = join_path(cumulative, part)
            crumbs.append(
                BreadcrumbSegment(
                    label=part,
                    path=cumulative,
                    navigable=index < len(parts) - 1,
                )
            )
        return crumbs


__all__ = ["PathModel", "normalize_path", "join_path", "parent_of", "basename"]
