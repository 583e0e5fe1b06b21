"""Display helpers for listing rows."""

from __future__ import annotations

_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")

_DIRECTORY_ICON = "📁"
_DEFAULT_ICON = "📄"
_FILE_ICONS = {
    "pdf": "📄",
    "doc": "📝",
    "docx": "📝",
    "xls": "📊",
    "xlsx": "📊",
    "ppt": "🎯",
    "pptx": "🎯",
    "txt": "📋",
    "md": "📝",
    "jpg": "🖼️",
    "jpeg": "🖼️",
    "png": "🖼️",
    "gif": "🖼️",
    "webp": "🖼️",
    "mp4": "🎬",
    "webm": "🎬",
    "avi": "🎬",
    "mov": "🎬",
    "mkv": "🎬",
    "mp3": "🎵",
    "wav": "🎵",
    "flac": "🎵",
    "m4a": "🎵",
    "zip": "📦",
    "rar": "📦",
    "7z": "📦",
    "tar": "📦",
    "gz": "📦",
    "exe": "⚙️",
    "msi": "⚙️",
    "app": "⚙️",
    "dmg": "⚙️",
    "json": "⚙️",
    "xml": "⚙️",
    "yaml": "⚙️",
    "yml": "⚙️",
    "js": "🔧",
    "ts": "🔧",
    "py": "🐍",
    "java": "☕",
    "cpp": "⚙️",
    "c": "⚙️",
    "html": "🌐",
    "css": "🎨",
    "php": "🐘",
    "rb": "💎",
    "go": "🐹",
    "rs": "🦀",
    "sh": "💻",
    "bat": "💻",
    "ps1": "💻",
}


def extension_of(name: str) -> str:
    """Return the lower-cased text after the last dot (the whole name if there is none)."""
    return name.rsplit(".", 1)[-1].lower()


def format_size(size: int) -> str:
    """Render a byte count with binary units, e.g. ``1024`` -> ``"1 KB"``.

    Values are rounded to two decimals and trailing zeros are dropped.
    """
    if size <= 0:
        return "0 B"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    rendered = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return f"{rendered} {_SIZE_UNITS[unit]}"


def format_entry_size(size: int, is_dir: bool) -> str:
    return "-" if is_dir else format_size(size)


def file_icon(name: str, is_dir: bool = False) -> str:
    if is_dir:
        return _DIRECTORY_ICON
    return _FILE_ICONS.get(extension_of(name), _DEFAULT_ICON)


__all__ = ["extension_of", "file_icon", "format_entry_size", "format_size"]
