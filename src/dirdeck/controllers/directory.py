"""Directory loading, navigation, and single-directory mutations."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from dirdeck.errors import DirdeckError, StaleResponseError, ValidationError
from dirdeck.models import BreadcrumbSegment, FileEntry, FileInfo, Listing, UploadBlob
from dirdeck.notifications import Severity
from dirdeck.remote.results import Failure, ServiceResult, Success
from dirdeck.state.path import basename, normalize_path

if TYPE_CHECKING:
    from dirdeck.app import AppState

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ListingView:
    """Everything the render layer needs after a successful load."""

    path: str
    listing: Listing
    breadcrumb: tuple[BreadcrumbSegment, ...]


ListingObserver = Callable[[ListingView], None]


class DirectoryController:
    """Keep the displayed listing, the current path, and the selection consistent.

    A load either applies completely (listing, selection reset, breadcrumb,
    render signal) or not at all, so the view is never partially updated.
    """

    def __init__(
        self,
        state: "AppState",
        *,
        on_listing_changed: Optional[ListingObserver] = None,
    ) -> None:
        self._state = state
        self._listing = Listing(path=state.path.current())
        self._observers: list[ListingObserver] = []
        self._latest_token = 0
        if on_listing_changed is not None:
            self._observers.append(on_listing_changed)

    @property
    def listing(self) -> Listing:
        return self._listing

    @property
    def breadcrumb(self) -> list[BreadcrumbSegment]:
        return self._state.path.segments()

    def subscribe(self, observer: ListingObserver) -> None:
        self._observers.append(observer)

    async def load(self, path: Optional[str] = None) -> ServiceResult[Listing]:
        """Fetch ``path`` (default: the current path) and apply it atomically.

        A successful load also moves the current path to the loaded directory, so
        the breadcrumb always describes the listing on display.

        Returns:
            ServiceResult[Listing]: The applied listing, or the failure that left
            the previous view untouched.
        """
        target = self._state.path.current() if path is None else normalize_path(path)
        self._latest_token += 1
        token = self._latest_token

        with self._state.busy.scope("listing"):
            result = await self._state.service.list_directory(target)

        if self._state.config.navigation.strict_ordering and token != self._latest_token:
            LOGGER.debug(
                "Discarding stale listing for %r (token %d < %d).",
                target,
                token,
                self._latest_token,
            )
            return Failure(StaleResponseError(f"Listing for {target or '/'} was superseded"))

        if not result.ok:
            LOGGER.warning("Failed to load %r: %s", target, result.message)
            self._state.notifications.notify(
                f"Failed to load files: {result.message}", Severity.ERROR
            )
            return result

        self._apply(result.value)
        return result

    async def reload(self) -> ServiceResult[Listing]:
        return await self.load(self._state.path.current())

    async def enter(self, path: str) -> ServiceResult[Listing]:
        """Navigate to ``path`` and load it.

        A failed load points the path back at the listing still on display,
        unless another navigation or load was issued while this one was pending.
        """
        target = normalize_path(path)
        self._state.path.navigate_to(target)
        issued = self._latest_token + 1
        result = await self.load(target)
        superseded = issued != self._latest_token or self._state.path.current() != target
        if not result.ok and not superseded:
            self._state.path.navigate_to(self._listing.path)
        return result

    async def create_folder(self, name: str) -> ServiceResult[None]:
        """Create ``name`` under the current path, then reload so it appears."""
        parent = self._state.path.current()
        with self._state.busy.scope("mkdir"):
            trimmed = name.strip()
            if not trimmed:
                self._state.notifications.notify("Please enter a folder name", Severity.WARNING)
                return Failure(ValidationError("Folder name must not be empty"))
            result = await self._state.service.create_folder(parent, trimmed)

        if not result.ok:
            LOGGER.warning("Failed to create %r in %r: %s", trimmed, parent, result.message)
            self._state.notifications.notify(
                f"Failed to create folder: {result.message}", Severity.ERROR
            )
            return result

        self._state.notifications.notify(f"Created folder {trimmed}", Severity.SUCCESS)
        await self.reload()
        return result

    async def upload(
        self,
        files: Iterable[UploadBlob],
        *,
        reset: Optional[Callable[[], None]] = None,
    ) -> ServiceResult[None]:
        """Upload ``files`` into the current path as one multipart request.

        Args:
            files: Blobs to send, in order.
            reset: Clears the originating file input; always invoked once the
                request has finished, whatever its outcome.
        """
        blobs = list(files)
        if not blobs:
            return Success(None)

        try:
            with self._state.busy.scope("upload"):
                result = await self._state.service.upload(self._state.path.current(), blobs)
            if not result.ok:
                LOGGER.warning("Upload of %d file(s) failed: %s", len(blobs), result.message)
                self._state.notifications.notify(f"Upload failed: {result.message}", Severity.ERROR)
                return result
            self._state.notifications.notify(f"Uploaded {len(blobs)} file(s)", Severity.SUCCESS)
            await self.reload()
            return result
        finally:
            if reset is not None:
                reset()

    async def download(self, path: str, target: Path) -> ServiceResult[Path]:
        """Fetch ``path`` and write it to the local file ``target``."""
        with self._state.busy.scope("download"):
            result = await self._state.service.download(path)
            if result.ok:
                try:
                    target.parent.mkdir(parents=True, exist_ok=True)
                    target.write_bytes(result.value)
                except OSError as exc:
                    result = Failure(DirdeckError(f"Cannot write {target}: {exc.strerror or exc}"))

        if not result.ok:
            LOGGER.warning("Download of %r failed: %s", path, result.message)
            self._state.notifications.notify(f"Download failed: {result.message}", Severity.ERROR)
            return result

        self._state.notifications.notify(f"Downloaded {basename(path)}", Severity.SUCCESS)
        return Success(target)

    async def info(self, path: str) -> ServiceResult[FileInfo]:
        with self._state.busy.scope("info"):
            result = await self._state.service.info(path)
        if not result.ok:
            self._state.notifications.notify(
                f"Failed to read file info: {result.message}", Severity.ERROR
            )
        return result

    def filter(self, query: str) -> list[FileEntry]:
        """Return current entries whose name contains ``query``, ignoring case."""
        needle = query.strip().lower()
        if not needle:
            return list(self._listing.entries)
        return [entry for entry in self._listing.entries if needle in entry.name.lower()]

    def _apply(self, listing: Listing) -> None:
        self._listing = listing
        self._state.path.navigate_to(listing.path)
        self._state.selection.scope_to(listing.paths)
        view = ListingView(
            path=listing.path,
            listing=listing,
            breadcrumb=tuple(self._state.path.segments()),
        )
        for observer in list(self._observers):
            observer(view)


__all__ = ["DirectoryController", "ListingObserver", "ListingView"]
