"""CLI commands driven against the in-memory storage backend."""

import json
from pathlib import Path
from typing import Callable, Optional

import pytest
from click.testing import CliRunner, Result
from fakes import BASE_URL, FakeBackend

from dirdeck.cli import cli

Invoke = Callable[..., Result]


@pytest.fixture
def invoke(backend: FakeBackend, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Invoke:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr("dirdeck.app.build_http_client", lambda settings: backend.client())
    runner = CliRunner()

    def _invoke(*args: str, input: Optional[str] = None) -> Result:
        return runner.invoke(cli, ["--base-url", BASE_URL, *args], input=input)

    return _invoke


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "Dirdeck browses and manages files" in result.output
    for command in ("ls", "mkdir", "upload", "rm", "cp", "mv", "preview", "config"):
        assert command in result.output


def test_ls_json_lists_directory(invoke: Invoke) -> None:
    result = invoke("--json", "ls", "docs")

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["path"] == "docs"
    assert [item["name"] for item in payload["items"]] == ["archive", "notes.md", "report.txt"]
    assert [crumb["label"] for crumb in payload["breadcrumb"]] == ["home", "docs"]
    assert payload["notifications"] == []


def test_ls_table_renders_sizes(invoke: Invoke) -> None:
    result = invoke("ls")

    assert result.exit_code == 0
    assert "a.txt" in result.output
    assert "1 KB" in result.output


def test_ls_filter(invoke: Invoke) -> None:
    result = invoke("--json", "ls", "docs", "--filter", "NOTES")

    assert [item["name"] for item in json.loads(result.stdout)["items"]] == ["notes.md"]


def test_ls_missing_directory_fails(invoke: Invoke) -> None:
    result = invoke("--json", "ls", "missing")

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["error"] == {"code": "backend_error", "message": "Path not found"}
    assert payload["notifications"][0]["message"] == "Failed to load files: Path not found"


def test_mkdir_creates_folder(invoke: Invoke, backend: FakeBackend) -> None:
    result = invoke("mkdir", "drafts", "--in", "docs")

    assert result.exit_code == 0
    assert backend.lookup("docs/drafts") == {}
    assert "Created folder drafts" in result.output


def test_upload_sends_local_files(invoke: Invoke, backend: FakeBackend, tmp_path: Path) -> None:
    source = tmp_path / "hello.txt"
    source.write_text("hi", encoding="utf-8")

    result = invoke("--json", "upload", str(source), "--to", "photos")

    assert result.exit_code == 0
    assert backend.lookup("photos/hello.txt") == b"hi"
    assert json.loads(result.stdout)["files"] == ["hello.txt"]


def test_rm_with_yes_deletes(invoke: Invoke, backend: FakeBackend) -> None:
    result = invoke("--json", "rm", "docs/notes.md", "docs/report.txt", "--yes")

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["succeeded"] == ["docs/notes.md", "docs/report.txt"]
    assert payload["notifications"][-1]["message"] == "Deleted 2 item(s)"
    assert backend.lookup("docs/notes.md") is None


def test_rm_declined_prompt_keeps_files(invoke: Invoke, backend: FakeBackend) -> None:
    result = invoke("rm", "a.txt", input="n\n")

    assert result.exit_code == 0
    assert "cancelled" in result.output
    assert backend.calls("batch-delete") == []
    assert backend.lookup("a.txt") is not None


def test_rm_rejects_mixed_parents(invoke: Invoke, backend: FakeBackend) -> None:
    result = invoke("--json", "rm", "a.txt", "docs/notes.md", "--yes")

    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"]["code"] == "validation_error"
    assert backend.requests == []


def test_cp_copies_into_destination(invoke: Invoke, backend: FakeBackend) -> None:
    result = invoke("--json", "cp", "a.txt", "--to", "docs/archive")

    assert result.exit_code == 0
    assert json.loads(result.stdout)["succeeded"] == ["a.txt"]
    assert backend.lookup("docs/archive/a.txt") is not None
    assert backend.lookup("a.txt") is not None


def test_mv_to_unknown_destination_fails(invoke: Invoke, backend: FakeBackend) -> None:
    result = invoke("mv", "a.txt", "--to", "nowhere")

    assert result.exit_code == 1
    assert "nowhere is not an available destination folder" in result.output
    assert backend.calls("batch-move") == []


def test_preview_json_escapes_text(invoke: Invoke) -> None:
    result = invoke("--json", "preview", "docs/report.txt")

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["kind"] == "text"
    assert payload["escaped_text"] == "&lt;b&gt;quarterly&lt;/b&gt; &amp; more"


def test_get_writes_output_file(invoke: Invoke, tmp_path: Path) -> None:
    target = tmp_path / "copy.txt"

    result = invoke("get", "b.txt", "-o", str(target))

    assert result.exit_code == 0
    assert target.read_bytes() == b"bb"


def test_info_json(invoke: Invoke) -> None:
    result = invoke("--json", "info", "photos/cat.png")

    assert result.exit_code == 0
    assert json.loads(result.stdout)["mime_type"] == "image/png"


def test_quiet_mode_still_reports_validation_failures(invoke: Invoke, backend: FakeBackend) -> None:
    result = invoke("--quiet", "mkdir", "   ")

    assert result.exit_code == 1
    assert "Please enter a folder name" in result.output
    assert backend.calls("mkdir") == []


def test_quiet_mode_hides_success_notifications(invoke: Invoke, backend: FakeBackend) -> None:
    result = invoke("--quiet", "mkdir", "drafts")

    assert result.exit_code == 0
    assert "Created folder" not in result.output
    assert backend.lookup("drafts") == {}
