"""Data models exchanged between the backend, the service, and the controllers."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

ROOT_PATH = ""
ROOT_LABEL = "home"

OperationKind = Literal["delete", "copy", "move"]
TransferKind = Literal["copy", "move"]


class DirdeckBaseModel(BaseModel):
    """Shared configuration for models parsed from backend payloads."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class FileEntry(DirdeckBaseModel):
    """One child of a directory listing.

    Attributes:
        name: Display name of the entry.
        path: Root-relative path of the entry.
        is_dir: Whether the entry is a directory.
        size: Size in bytes; meaningless for directories.
        modified: Modification timestamp as formatted by the backend.
        created: Creation timestamp when the backend reports one.
    """

    name: str
    path: str
    is_dir: bool = False
    size: int = 0
    modified: str = ""
    created: Optional[str] = None


class FileInfo(FileEntry):
    """Detailed metadata for a single entry, including its MIME type."""

    mime_type: Optional[str] = None


class Listing(DirdeckBaseModel):
    """Immediate children of one directory.

    Attributes:
        path: Directory the listing describes.
        entries: Entries in backend order (directories first, then by name).
        total: Entry count reported by the backend.
    """

    path: str = ROOT_PATH
    entries: Tuple[FileEntry, ...] = ()
    total: int = 0

    @property
    def paths(self) -> frozenset[str]:
        """Return the set of paths visible in this listing."""
        return frozenset(entry.path for entry in self.entries)

    def find(self, path: str) -> Optional[FileEntry]:
        """Return the entry with ``path`` if it is part of the listing."""
        for entry in self.entries:
            if entry.path == path:
                return entry
        return None


class BreadcrumbSegment(DirdeckBaseModel):
    """A breadcrumb label paired with the path it navigates to."""

    label: str
    path: str
    navigable: bool = True


class DestinationChoice(DirdeckBaseModel):
    """A folder offered as the target of a copy or move."""

    label: str
    path: str

    @classmethod
    def root(cls) -> "DestinationChoice":
        return cls(label=ROOT_LABEL, path=ROOT_PATH)


class PendingOperation(DirdeckBaseModel):
    """Transient descriptor for one batch orchestration call."""

    kind: OperationKind
    source_paths: List[str] = Field(default_factory=list)
    destination: Optional[str] = None


class BatchFailure(DirdeckBaseModel):
    """A per-item failure reported by a batch endpoint."""

    path: str
    reason: str


class BatchResult(DirdeckBaseModel):
    """Outcome of a batch request.

    Attributes:
        kind: Operation that was executed.
        requested: Paths that were sent to the backend.
        succeeded: Paths the backend reports as processed.
        failed: Per-item failures, when the backend reports them.
    """

    kind: OperationKind
    requested: List[str] = Field(default_factory=list)
    succeeded: List[str] = Field(default_factory=list)
    failed: List[BatchFailure] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.succeeded)

    @property
    def partial(self) -> bool:
        return self.count < len(self.requested)


@dataclass(slots=True)
class UploadBlob:
    """In-memory file handed to the upload workflow.

    Attributes:
        name: File name sent in the multipart part.
        content: Raw file bytes.
        content_type: Optional MIME type for the part.
    """

    name: str
    content: bytes
    content_type: Optional[str] = None

    @classmethod
    def from_path(cls, path: Path) -> "UploadBlob":
        """Read ``path`` from the local filesystem into a blob."""
        return cls(name=path.name, content=path.read_bytes())


__all__ = [
    "ROOT_PATH",
    "ROOT_LABEL",
    "OperationKind",
    "TransferKind",
    "FileEntry",
    "FileInfo",
    "Listing",
    "BreadcrumbSegment",
    "DestinationChoice",
    "PendingOperation",
    "BatchFailure",
    "BatchResult",
    "UploadBlob",
]
