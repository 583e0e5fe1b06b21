"""Multi-item operations and the destination-picker workflow."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable, Optional, Union

from dirdeck.errors import ValidationError
from dirdeck.models import (
    BatchResult,
    DestinationChoice,
    PendingOperation,
    TransferKind,
)
from dirdeck.notifications import Severity
from dirdeck.remote.results import Failure, ServiceResult, Success

from .directory import DirectoryController

if TYPE_CHECKING:
    from dirdeck.app import AppState

LOGGER = logging.getLogger(__name__)

ConfirmGate = Callable[[int], Union[bool, Awaitable[bool]]]

_PAST_TENSE = {"delete": "Deleted", "copy": "Copied", "move": "Moved"}
_NOUN = {"delete": "Delete", "copy": "Copy", "move": "Move"}


@dataclass(slots=True)
class DestinationPicker:
    """Open destination-picker session.

    Attributes:
        action: Transfer the picker was opened for.
        choices: Flattened folder list, root first.
        selected: Folder the user picked; ``None`` until a choice is made.
    """

    action: TransferKind
    choices: tuple[DestinationChoice, ...]
    selected: Optional[DestinationChoice] = field(default=None)

    @property
    def can_confirm(self) -> bool:
        return self.selected is not None

    def choose(self, path: str) -> Optional[DestinationChoice]:
        """Select the choice whose path is ``path``; unknown paths clear the selection."""
        self.selected = next((choice for choice in self.choices if choice.path == path), None)
        return self.selected


class BatchOperationController:
    """Run delete, copy, and move against the current selection.

    Every operation is a no-op while the selection is empty. Successful
    operations always reload the current directory, since the backend is the
    only source of truth for what changed.
    """

    def __init__(
        self,
        state: "AppState",
        directory: DirectoryController,
        *,
        confirm: Optional[ConfirmGate] = None,
    ) -> None:
        self._state = state
        self._directory = directory
        self._confirm = confirm
        self._picker: Optional[DestinationPicker] = None

    @property
    def picker(self) -> Optional[DestinationPicker]:
        return self._picker

    async def delete_selected(
        self, confirm: Optional[ConfirmGate] = None
    ) -> Optional[ServiceResult[BatchResult]]:
        """Delete every selected path after the confirmation gate approves.

        Returns:
            Optional[ServiceResult[BatchResult]]: ``None`` when nothing was
            selected or the user cancelled; otherwise the batch outcome.
        """
        selection = self._state.selection
        if selection.size() == 0:
            return None

        gate = confirm or self._confirm
        if gate is not None and not await _resolve_gate(gate, selection.size()):
            LOGGER.info("Deletion of %d item(s) cancelled.", selection.size())
            return None

        operation = PendingOperation(kind="delete", source_paths=list(selection.ordered()))
        with self._state.busy.scope("delete"):
            result = await self._state.service.batch_delete(operation.source_paths)
        return await self._finish(operation, result)

    async def list_destinations(self) -> ServiceResult[list[DestinationChoice]]:
        """Enumerate candidate folders starting from the storage root.

        The walk is independent of the current navigation. Its depth is bounded
        by ``navigation.destination_depth`` (``None`` walks the whole tree).
        """
        choices = [DestinationChoice.root()]
        failure = await self._walk_folders("", 1, choices)
        if failure is not None:
            return failure
        return Success(choices)

    async def _walk_folders(
        self, path: str, depth: int, choices: list[DestinationChoice]
    ) -> Optional[Failure]:
        result = await self._state.service.list_directory(path)
        if not result.ok:
            return result
        depth_limit = self._state.config.navigation.destination_depth
        for entry in result.value.entries:
            if not entry.is_dir:
                continue
            choices.append(DestinationChoice(label=entry.path, path=entry.path))
            if depth_limit is None or depth < depth_limit:
                failure = await self._walk_folders(entry.path, depth + 1, choices)
                if failure is not None:
                    return failure
        return None

    async def open_destination_picker(
        self, action: TransferKind
    ) -> Optional[ServiceResult[DestinationPicker]]:
        """Build a fresh picker for ``action`` with no folder pre-selected."""
        if self._state.selection.size() == 0:
            return None
        _check_action(action)

        with self._state.busy.scope("picker"):
            result = await self.list_destinations()
        if not result.ok:
            LOGGER.warning("Failed to enumerate destination folders: %s", result.message)
            self._state.notifications.notify(
                f"Failed to load folders: {result.message}", Severity.ERROR
            )
            return result

        self._picker = DestinationPicker(action=action, choices=tuple(result.value))
        return Success(self._picker)

    def cancel_destination(self) -> None:
        self._picker = None

    async def confirm_destination(
        self,
        action: TransferKind,
        destination: Optional[DestinationChoice],
    ) -> Optional[ServiceResult[BatchResult]]:
        """Copy or move the selection into ``destination``.

        A missing destination is rejected before any request is made, even when
        the selection is empty.
        """
        with self._state.busy.scope(action):
            if destination is None:
                self._state.notifications.notify(
                    "Please choose a destination folder", Severity.WARNING
                )
                return Failure(ValidationError("No destination folder selected"))
            _check_action(action)
            if self._state.selection.size() == 0:
                return None

            operation = PendingOperation(
                kind=action,
                source_paths=list(self._state.selection.ordered()),
                destination=destination.path,
            )
            if action == "copy":
                result = await self._state.service.batch_copy(
                    operation.source_paths, destination.path
                )
            else:
                result = await self._state.service.batch_move(
                    operation.source_paths, destination.path
                )

        if result.ok:
            self._picker = None
        return await self._finish(operation, result)

    async def confirm_picker(self) -> Optional[ServiceResult[BatchResult]]:
        """Confirm the open picker with whatever folder is currently chosen."""
        if self._picker is None:
            return None
        return await self.confirm_destination(self._picker.action, self._picker.selected)

    async def _finish(
        self, operation: PendingOperation, result: ServiceResult[BatchResult]
    ) -> ServiceResult[BatchResult]:
        notifications = self._state.notifications
        if not result.ok:
            LOGGER.warning("%s failed: %s", _NOUN[operation.kind], result.message)
            notifications.notify(
                f"{_NOUN[operation.kind]} failed: {result.message}", Severity.ERROR
            )
            return result

        outcome = result.value
        for failure in outcome.failed:
            LOGGER.info("%s skipped %s: %s", _NOUN[operation.kind], failure.path, failure.reason)
        notifications.notify(
            f"{_PAST_TENSE[operation.kind]} {outcome.count} item(s)", Severity.SUCCESS
        )
        await self._directory.reload()
        return result


async def _resolve_gate(gate: ConfirmGate, count: int) -> bool:
    answer = gate(count)
    if inspect.isawaitable(answer):
        answer = await answer
    return bool(answer)


def _check_action(action: str) -> None:
    if action not in ("copy", "move"):
        raise ValueError(f"Unsupported transfer action: {action!r}")


__all__ = ["BatchOperationController", "ConfirmGate", "DestinationPicker"]
