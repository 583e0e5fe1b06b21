"""Content-type aware file previews."""

from .resolver import UNAVAILABLE_MESSAGE, PreviewContent, PreviewResolver
from .strategies import PreviewKind, PreviewStrategy, resolve_strategy

__all__ = [
    "PreviewContent",
    "PreviewKind",
    "PreviewResolver",
    "PreviewStrategy",
    "UNAVAILABLE_MESSAGE",
    "resolve_strategy",
]
