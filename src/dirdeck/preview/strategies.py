"""Extension-based preview strategy resolution."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from dirdeck.formatting import extension_of

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "bmp"})
VIDEO_EXTENSIONS = frozenset({"mp4", "webm", "ogg", "mov", "avi", "mkv"})
AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "ogg", "flac", "m4a", "aac"})
TEXT_EXTENSIONS = frozenset(
    {
        "txt", "md", "json", "xml", "html", "css", "js", "py", "java", "cpp",
        "c", "h", "rs", "go", "rb", "php", "sh", "bat", "ps1", "ini",
        "pem", "crt", "key", "conf", "config", "log",
    }
)  # fmt: skip
PDF_EXTENSIONS = frozenset({"pdf"})


class PreviewKind(str, Enum):
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    TEXT = "text"
    PDF = "pdf"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class PreviewStrategy:
    """How a file should be previewed.

    Attributes:
        kind: Preview variant.
        subtype: Media subtype (the extension) for video and audio.
    """

    kind: PreviewKind
    subtype: Optional[str] = None

    @property
    def media_type(self) -> Optional[str]:
        if self.subtype is None:
            return None
        return f"{self.kind.value}/{self.subtype}"


UNSUPPORTED = PreviewStrategy(PreviewKind.UNSUPPORTED)

# Checked in order; "ogg" appears in both media tables and resolves to video.
_TABLE: tuple[tuple[frozenset[str], PreviewKind], ...] = (
    (IMAGE_EXTENSIONS, PreviewKind.IMAGE),
    (VIDEO_EXTENSIONS, PreviewKind.VIDEO),
    (AUDIO_EXTENSIONS, PreviewKind.AUDIO),
    (TEXT_EXTENSIONS, PreviewKind.TEXT),
    (PDF_EXTENSIONS, PreviewKind.PDF),
)


def resolve_strategy(name: str) -> PreviewStrategy:
    """Map a file name to its preview strategy."""
    extension = extension_of(name)
    for extensions, kind in _TABLE:
        if extension in extensions:
            if kind in (PreviewKind.VIDEO, PreviewKind.AUDIO):
                return PreviewStrategy(kind, subtype=extension)
            return PreviewStrategy(kind)
    return UNSUPPORTED


__all__ = [
    "AUDIO_EXTENSIONS",
    "IMAGE_EXTENSIONS",
    "PDF_EXTENSIONS",
    "PreviewKind",
    "PreviewStrategy",
    "TEXT_EXTENSIONS",
    "UNSUPPORTED",
    "VIDEO_EXTENSIONS",
    "resolve_strategy",
]
