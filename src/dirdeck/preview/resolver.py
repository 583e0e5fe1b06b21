"""Fetch preview content according to a file's strategy."""

from __future__ import annotations

import html
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from dirdeck.errors import TransportError
from dirdeck.notifications import Severity
from dirdeck.remote.results import Failure, ServiceResult, Success
from dirdeck.state.path import basename

from .strategies import PreviewKind, PreviewStrategy, resolve_strategy

if TYPE_CHECKING:
    from dirdeck.app import AppState

LOGGER = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = "Preview is not available for this file type"


@dataclass(frozen=True, slots=True)
class PreviewContent:
    """Render instructions for one preview.

    Attributes:
        name: File name shown as the preview title.
        strategy: Strategy the content was loaded with.
        url: Resource reference for embedded media (image, pdf, video, audio).
        text: Decoded body for text previews.
        escaped_text: ``text`` with every markup-significant character entity-escaped.
        message: Fixed marker for unsupported files.
    """

    name: str
    strategy: PreviewStrategy
    url: Optional[str] = None
    text: Optional[str] = None
    escaped_text: Optional[str] = None
    message: Optional[str] = None

    @property
    def kind(self) -> PreviewKind:
        return self.strategy.kind

    @property
    def media_type(self) -> Optional[str]:
        return self.strategy.media_type


class PreviewResolver:
    """Map files to preview strategies and load the matching content."""

    def __init__(self, state: "AppState") -> None:
        self._state = state

    def resolve(self, name: str) -> PreviewStrategy:
        return resolve_strategy(name)

    async def load(
        self, path: str, strategy: PreviewStrategy, *, name: Optional[str] = None
    ) -> ServiceResult[PreviewContent]:
        """Produce preview content for ``path`` without emitting notifications.

        Only text previews touch the network; media and documents are returned
        as URLs for the render layer to embed.
        """
        service = self._state.service
        name = name or basename(path)
        kind = strategy.kind

        if kind is PreviewKind.TEXT:
            result = await service.preview(path)
            if not result.ok:
                return result
            settings = self._state.config.preview
            try:
                text = result.value.decode(settings.text_encoding, errors=settings.decode_errors)
            except (UnicodeDecodeError, LookupError) as exc:
                LOGGER.debug("Could not decode preview for %s: %s", path, exc)
                return Failure(TransportError(f"Cannot decode {name} as text"))
            return Success(
                PreviewContent(
                    name=name,
                    strategy=strategy,
                    text=text,
                    escaped_text=html.escape(text, quote=True),
                )
            )
        if kind in (PreviewKind.IMAGE, PreviewKind.PDF):
            url = service.preview_url(path)
            return Success(PreviewContent(name=name, strategy=strategy, url=url))
        if kind in (PreviewKind.VIDEO, PreviewKind.AUDIO):
            url = service.download_url(path)
            return Success(PreviewContent(name=name, strategy=strategy, url=url))
        return Success(PreviewContent(name=name, strategy=strategy, message=UNAVAILABLE_MESSAGE))

    async def open(self, path: str, name: Optional[str] = None) -> ServiceResult[PreviewContent]:
        """Resolve and load a preview, reporting load failures to the notification sink."""
        name = name or basename(path)
        with self._state.busy.scope("preview"):
            result = await self.load(path, self.resolve(name), name=name)
        if not result.ok:
            LOGGER.warning("Preview of %s failed: %s", path, result.message)
            self._state.notifications.notify(f"Preview failed: {result.message}", Severity.ERROR)
        return result


__all__ = ["PreviewContent", "PreviewResolver", "UNAVAILABLE_MESSAGE"]
