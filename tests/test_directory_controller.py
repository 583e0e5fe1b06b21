"""DirectoryController loading, navigation, and directory-level mutations."""

from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
from fakes import BASE_URL, FakeBackend

from dirdeck.app import Session, open_session
from dirdeck.config.models import DirdeckConfig, NavigationSettings, ServerSettings
from dirdeck.controllers import ListingView
from dirdeck.errors import BackendError, StaleResponseError, ValidationError
from dirdeck.models import UploadBlob
from dirdeck.notifications import RecordingSink, Severity


async def test_load_root_applies_listing_and_scopes_selection(session: Session) -> None:
    views: list[ListingView] = []
    session.directory.subscribe(views.append)

    result = await session.directory.load()

    assert result.ok
    assert session.directory.listing.total == 4
    assert [crumb.label for crumb in views[0].breadcrumb] == ["home"]
    session.state.selection.toggle("docs")
    assert session.state.selection.size() == 1


async def test_enter_sets_path_and_clears_selection(session: Session) -> None:
    await session.directory.load()
    session.state.selection.toggle("a.txt")

    result = await session.directory.enter("docs")

    assert result.ok
    assert session.state.path.current() == "docs"
    assert session.state.selection.size() == 0
    assert session.directory.listing.path == "docs"
    assert [(crumb.label, crumb.navigable) for crumb in session.directory.breadcrumb] == [
        ("home", True),
        ("docs", False),
    ]


async def test_failed_load_keeps_previous_view(
    session: Session, backend: FakeBackend, sink: RecordingSink
) -> None:
    await session.directory.load()
    session.state.selection.toggle("a.txt")
    backend.fail("files", message="disk error")

    result = await session.directory.reload()

    assert isinstance(result.error, BackendError)
    assert session.directory.listing.total == 4
    assert session.state.selection.is_selected("a.txt")
    assert sink.last is not None
    assert sink.last.message == "Failed to load files: disk error"
    assert sink.last.severity is Severity.ERROR


async def test_failed_enter_restores_previous_path(session: Session) -> None:
    await session.directory.enter("docs")

    result = await session.directory.enter("docs/missing")

    assert not result.ok
    assert session.state.path.current() == "docs"
    assert session.directory.listing.path == "docs"


async def test_transport_failure_notifies_generic_message(
    session: Session, backend: FakeBackend, sink: RecordingSink
) -> None:
    backend.disconnect("files")

    await session.directory.load()

    assert sink.messages == ["Failed to load files: Unable to reach the file server"]
    assert not session.state.busy.is_busy("listing")


async def test_blank_folder_names_make_no_requests(
    session: Session, backend: FakeBackend, sink: RecordingSink
) -> None:
    for name in ("", "   "):
        result = await session.directory.create_folder(name)
        assert isinstance(result.error, ValidationError)

    assert backend.requests == []
    assert sink.messages == ["Please enter a folder name"] * 2
    assert not session.state.busy.is_busy("mkdir")


async def test_create_folder_reloads_once(
    session: Session, backend: FakeBackend, sink: RecordingSink
) -> None:
    await session.directory.enter("docs")
    backend.requests.clear()

    result = await session.directory.create_folder("  drafts ")

    assert result.ok
    assert len(backend.calls("mkdir")) == 1
    assert len(backend.calls("files")) == 1
    assert session.directory.listing.find("docs/drafts") is not None
    assert "Created folder drafts" in sink.messages


async def test_create_folder_failure_does_not_reload(
    session: Session, backend: FakeBackend, sink: RecordingSink
) -> None:
    await session.directory.load()
    backend.requests.clear()

    result = await session.directory.create_folder("docs")

    assert isinstance(result.error, BackendError)
    assert backend.calls("files") == []
    assert sink.last is not None
    assert sink.last.message == "Failed to create folder: Directory already exists"


async def test_upload_without_files_is_a_no_op(session: Session, backend: FakeBackend) -> None:
    resets: list[bool] = []

    result = await session.directory.upload([], reset=lambda: resets.append(True))

    assert result.ok
    assert backend.requests == []
    assert resets == []


async def test_upload_sends_files_and_resets_input(
    session: Session, backend: FakeBackend, sink: RecordingSink
) -> None:
    await session.directory.enter("photos")
    resets: list[bool] = []

    result = await session.directory.upload(
        [UploadBlob("dog.png", b"woof"), UploadBlob("bird.png", b"tweet")],
        reset=lambda: resets.append(True),
    )

    assert result.ok
    assert resets == [True]
    assert backend.lookup("photos/dog.png") == b"woof"
    assert "Uploaded 2 file(s)" in sink.messages
    assert session.directory.listing.find("photos/bird.png") is not None


async def test_upload_failure_still_resets_input(
    session: Session, backend: FakeBackend, sink: RecordingSink
) -> None:
    backend.fail("upload", status=413, code=413, message="too large")
    resets: list[bool] = []

    result = await session.directory.upload(
        [UploadBlob("big.bin", b"0" * 10)], reset=lambda: resets.append(True)
    )

    assert not result.ok
    assert resets == [True]
    assert sink.last is not None
    assert sink.last.message == "Upload failed: too large"
    assert not session.state.busy.is_busy("upload")


async def test_download_writes_target(session: Session, tmp_path: Path) -> None:
    target = tmp_path / "out" / "report.txt"

    result = await session.directory.download("docs/report.txt", target)

    assert result.ok
    assert target.read_bytes() == b"<b>quarterly</b> & more"


async def test_info_failure_notifies(session: Session, sink: RecordingSink) -> None:
    result = await session.directory.info("nowhere.txt")

    assert not result.ok
    assert sink.messages == ["Failed to read file info: Path not found"]


async def test_filter_matches_names_case_insensitively(session: Session) -> None:
    await session.directory.load()

    assert [entry.name for entry in session.directory.filter("TXT")] == ["a.txt", "b.txt"]
    assert len(session.directory.filter("  ")) == 4


async def test_strict_ordering_discards_superseded_listing(
    backend: FakeBackend, sink: RecordingSink
) -> None:
    config = DirdeckConfig(
        server=ServerSettings(base_url=BASE_URL),
        navigation=NavigationSettings(strict_ordering=True),
    )
    started = asyncio.Event()
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/files/docs":
            started.set()
            await release.wait()
        return backend.handler(request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        async with open_session(config, notifications=sink, client=client) as session:
            slow = asyncio.create_task(session.directory.load("docs"))
            await started.wait()
            fast = await session.directory.load("photos")
            release.set()
            stale = await slow

            assert fast.ok
            assert isinstance(stale.error, StaleResponseError)
            assert session.directory.listing.path == "photos"
            assert session.state.path.current() == "photos"
            assert sink.messages == []


async def test_late_failed_enter_keeps_newer_navigation(
    backend: FakeBackend, config: DirdeckConfig, sink: RecordingSink
) -> None:
    started = asyncio.Event()
    release = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/files/docs":
            started.set()
            await release.wait()
            return httpx.Response(500, json={"code": 500, "message": "disk error"})
        return backend.handler(request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        async with open_session(config, notifications=sink, client=client) as session:
            slow = asyncio.create_task(session.directory.enter("docs"))
            await started.wait()
            fast = await session.directory.enter("photos")
            release.set()
            failed = await slow

            assert fast.ok
            assert not failed.ok
            assert session.state.path.current() == "photos"
            assert session.directory.listing.path == "photos"
            assert [crumb.label for crumb in session.directory.breadcrumb] == ["home", "photos"]
            assert sink.messages == ["Failed to load files: disk error"]


async def test_load_moves_path_to_loaded_directory(session: Session) -> None:
    views: list[ListingView] = []
    session.directory.subscribe(views.append)

    result = await session.directory.load("docs")

    assert result.ok
    assert session.state.path.current() == "docs"
    assert views[0].path == "docs"
    assert [crumb.path for crumb in views[0].breadcrumb] == ["", "docs"]
