"""Data structures shared by the sticker export pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class ExportErrorKind(str, Enum):
    """Terminal failure categories of a pipeline run."""

    INVALID_IDENTIFIER = "invalid_identifier"
    DOWNLOAD_FAILED = "download_failed"
    EXTRACT_FAILED = "extract_failed"
    FILTER_FAILED = "filter_failed"
    INTERNAL_ERROR = "internal_error"
    PACKAGE_FAILED = "package_failed"

    @property
    def category(self) -> str:
        """Short human readable category safe to show to end users."""

        return _CATEGORIES[self]


_CATEGORIES: dict[ExportErrorKind, str] = {
    ExportErrorKind.INVALID_IDENTIFIER: "invalid sticker id",
    ExportErrorKind.DOWNLOAD_FAILED: "stickers cant be downloaded",
    ExportErrorKind.EXTRACT_FAILED: "stickers cant be unzipped",
    ExportErrorKind.FILTER_FAILED: "internal error",
    ExportErrorKind.INTERNAL_ERROR: "internal error",
    ExportErrorKind.PACKAGE_FAILED: "stickers cant be zipped",
}


class ExportStatus(str, Enum):
    CREATED = "created"
    EXISTING = "existing"


@dataclass(slots=True, frozen=True)
class BatchPlan:
    """One batch directory and the ordered entries moved into it."""

    index: int
    total: int
    directory_name: str
    members: tuple[str, ...]

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(slots=True, frozen=True)
class ExportResult:
    """Outcome of a successful pipeline run (or idempotent short-circuit)."""

    identifier: str
    archive_path: Path
    status: ExportStatus
    display_name: str | None = None
    batches: tuple[BatchPlan, ...] = field(default_factory=tuple)


__all__ = [
    "BatchPlan",
    "ExportErrorKind",
    "ExportResult",
    "ExportStatus",
]
