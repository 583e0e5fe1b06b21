"""Client-side navigation and selection state."""

from .busy import BusyIndicator
from .path import PathModel, basename, join_path, normalize_path, parent_of
from .selection import SelectionModel, ToolbarState

__all__ = [
    "BusyIndicator",
    "PathModel",
    "SelectionModel",
    "ToolbarState",
    "basename",
    "join_path",
    "normalize_path",
    "parent_of",
]
