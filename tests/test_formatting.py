"""Listing display helpers."""

from __future__ import annotations

import pytest

from dirdeck.formatting import extension_of, file_icon, format_entry_size, format_size


@pytest.mark.parametrize(
    ("size", "expected"),
    [
        (0, "0 B"),
        (512, "512 B"),
        (1024, "1 KB"),
        (1536, "1.5 KB"),
        (1024 * 1024, "1 MB"),
        (1288490189, "1.2 GB"),
        (5 * 1024**4, "5 TB"),
    ],
)
def test_format_size(size: int, expected: str) -> None:
    assert format_size(size) == expected


def test_directories_have_no_size() -> None:
    assert format_entry_size(4096, is_dir=True) == "-"
    assert format_entry_size(4096, is_dir=False) == "4 KB"


def test_extension_of_uses_last_dot() -> None:
    assert extension_of("archive.tar.GZ") == "gz"
    assert extension_of("Makefile") == "makefile"


def test_file_icon() -> None:
    assert file_icon("docs", is_dir=True) == "📁"
    assert file_icon("script.py") == "🐍"
    assert file_icon("unknown.xyz") == "📄"
