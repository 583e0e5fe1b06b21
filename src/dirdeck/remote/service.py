"""Async HTTP adapter for the file-storage backend.

Every backend operation is exposed as one coroutine returning a
:class:`~dirdeck.remote.results.Success` or :class:`~dirdeck.remote.results.Failure`.
The service never retries and never raises for transport or backend problems;
callers decide what to do with a failure.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from dirdeck.config.models import ServerSettings
from dirdeck.errors import BackendError, DirdeckError, TransportError
from dirdeck.models import (
    BatchFailure,
    BatchResult,
    FileEntry,
    FileInfo,
    Listing,
    OperationKind,
    UploadBlob,
)
from dirdeck.state.path import normalize_path

from .results import Failure, ServiceResult, Success

LOGGER = logging.getLogger(__name__)

TRANSPORT_FAILURE_MESSAGE = "Unable to reach the file server"
MALFORMED_RESPONSE_MESSAGE = "Unexpected response from the file server"

_BATCH_RESULT_KEYS: dict[OperationKind, str] = {
    "delete": "deleted",
    "copy": "copied",
    "move": "moved",
}


def build_http_client(settings: ServerSettings) -> httpx.AsyncClient:
    """Create the shared async client used by :class:`RemoteFileService`."""
    return httpx.AsyncClient(timeout=settings.timeout_seconds, follow_redirects=True)


class RemoteFileService:
    """Stateless facade over the backend's JSON API."""

    def __init__(
        self,
        settings: ServerSettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings
        self._client = client if client is not None else build_http_client(settings)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # URL helpers ------------------------------------------------------

    def endpoint(self, name: str, path: str = "") -> str:
        """Return the absolute URL for ``name``, optionally suffixed with ``path``.

        Root-scoped operations use the bare endpoint (``/api/files``) while
        nested locations append the encoded path (``/api/files/a/b``).
        """
        url = f"{self._settings.base_url}{self._settings.api_prefix}/{name}"
        path = normalize_path(path)
        if path:
            url = f"{url}/{quote(path, safe='/')}"
        return url

    def preview_url(self, path: str) -> str:
        return self.endpoint("preview", path)

    def download_url(self, path: str) -> str:
        return self.endpoint("download", path)

    # Operations -------------------------------------------------------

    async def list_directory(self, path: str) -> ServiceResult[Listing]:
        """Fetch the immediate children of ``path`` (``""`` for the root)."""
        path = normalize_path(path)
        result = await self._call_json("GET", self.endpoint("files", path))
        if not result.ok:
            return result
        data = result.value or {}
        try:
            entries = tuple(FileEntry.model_validate(item) for item in data.get("items") or [])
            listing = Listing(path=path, entries=entries, total=data.get("total", len(entries)))
        except (PydanticValidationError, AttributeError, TypeError) as exc:
            LOGGER.debug("Listing payload for %r failed validation: %s", path, exc)
            return Failure(TransportError(MALFORMED_RESPONSE_MESSAGE))
        return Success(listing)

    async def create_folder(self, parent: str, name: str) -> ServiceResult[None]:
        result = await self._call_json(
            "POST",
            self.endpoint("mkdir"),
            json={"path": normalize_path(parent), "name": name},
        )
        if not result.ok:
            return result
        return Success(None)

    async def upload(self, path: str, files: Sequence[UploadBlob]) -> ServiceResult[None]:
        """Send ``files`` to directory ``path`` as one multipart request."""
        parts = [
            ("files", (blob.name, blob.content, blob.content_type or "application/octet-stream"))
            for blob in files
        ]
        result = await self._call_json("POST", self.endpoint("upload", path), files=parts)
        if not result.ok:
            return result
        return Success(None)

    async def preview(self, path: str) -> ServiceResult[bytes]:
        return await self._call_raw(self.preview_url(path))

    async def download(self, path: str) -> ServiceResult[bytes]:
        return await self._call_raw(self.download_url(path))

    async def info(self, path: str) -> ServiceResult[FileInfo]:
        result = await self._call_json("GET", self.endpoint("info", path))
        if not result.ok:
            return result
        try:
            return Success(FileInfo.model_validate(result.value))
        except PydanticValidationError as exc:
            LOGGER.debug("Info payload for %r failed validation: %s", path, exc)
            return Failure(TransportError(MALFORMED_RESPONSE_MESSAGE))

    async def batch_delete(self, paths: Sequence[str]) -> ServiceResult[BatchResult]:
        return await self._batch("delete", "batch-delete", {"paths": list(paths)})

    async def batch_copy(
        self, paths: Sequence[str], destination: str
    ) -> ServiceResult[BatchResult]:
        return await self._batch(
            "copy", "batch-copy", {"paths": list(paths), "destination": destination}
        )

    async def batch_move(
        self, paths: Sequence[str], destination: str
    ) -> ServiceResult[BatchResult]:
        return await self._batch(
            "move", "batch-move", {"paths": list(paths), "destination": destination}
        )

    # Internal helpers -------------------------------------------------

    async def _batch(
        self, kind: OperationKind, name: str, body: Mapping[str, Any]
    ) -> ServiceResult[BatchResult]:
        result = await self._call_json("POST", self.endpoint(name), json=dict(body))
        if not result.ok:
            return result
        data = result.value or {}
        if not isinstance(data, Mapping):
            return Failure(TransportError(MALFORMED_RESPONSE_MESSAGE))
        succeeded = [str(item) for item in data.get(_BATCH_RESULT_KEYS[kind]) or []]
        failed = [_parse_batch_failure(item) for item in data.get("failed") or []]
        return Success(
            BatchResult(
                kind=kind,
                requested=list(body["paths"]),
                succeeded=succeeded,
                failed=failed,
            )
        )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        LOGGER.debug("%s %s", method, url)
        try:
            return await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            LOGGER.debug("%s %s failed: %r", method, url, exc)
            raise TransportError(TRANSPORT_FAILURE_MESSAGE) from exc

    async def _call_json(self, method: str, url: str, **kwargs: Any) -> ServiceResult[Any]:
        try:
            response = await self._send(method, url, **kwargs)
            return Success(_unwrap_envelope(response))
        except DirdeckError as exc:
            return Failure(exc)

    async def _call_raw(self, url: str) -> ServiceResult[bytes]:
        try:
            response = await self._send("GET", url)
        except DirdeckError as exc:
            return Failure(exc)
        if response.is_success:
            return Success(response.content)
        return Failure(_error_from_response(response))


def _unwrap_envelope(response: httpx.Response) -> Any:
    """Return the ``data`` member of a ``{code, message, data}`` envelope.

    Raises:
        BackendError: If the envelope reports a non-zero code.
        TransportError: If the response is not a JSON envelope.
    """
    if not response.is_success:
        raise _error_from_response(response)
    try:
        payload = response.json()
    except ValueError as exc:
        raise TransportError(MALFORMED_RESPONSE_MESSAGE) from exc
    if not isinstance(payload, dict) or "code" not in payload:
        raise TransportError(MALFORMED_RESPONSE_MESSAGE)
    code = payload.get("code")
    if code != 0:
        message = payload.get("message") or "Request failed"
        raise BackendError(str(message), code=int(code) if isinstance(code, int) else -1)
    return payload.get("data")


def _error_from_response(response: httpx.Response) -> DirdeckError:
    """Classify a non-success HTTP response, preferring the backend's own message."""
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("message"):
        code = payload.get("code")
        return BackendError(
            str(payload["message"]),
            code=code if isinstance(code, int) else response.status_code,
        )
    return TransportError(f"{TRANSPORT_FAILURE_MESSAGE} (HTTP {response.status_code})")


def _parse_batch_failure(item: Any) -> BatchFailure:
    if isinstance(item, Mapping):
        return BatchFailure(path=str(item.get("path", "")), reason=str(item.get("reason", "")))
    if isinstance(item, (list, tuple)) and item:
        reason = str(item[1]) if len(item) > 1 else ""
        return BatchFailure(path=str(item[0]), reason=reason)
    return BatchFailure(path=str(item), reason="")


__all__ = [
    "MALFORMED_RESPONSE_MESSAGE",
    "RemoteFileService",
    "TRANSPORT_FAILURE_MESSAGE",
    "build_http_client",
]
