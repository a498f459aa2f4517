"""Protocol and error hierarchy for the sticker export pipeline."""

from __future__ import annotations

from typing import Protocol

from .models import ExportErrorKind, ExportResult


class ExportPipeline(Protocol):
    """A pipeline that turns a sticker package identifier into an export archive."""

    async def process(self, identifier: str) -> ExportResult:
        """Export *identifier* and return the result, raising on failure."""


class ExportPipelineError(RuntimeError):
    """Base error raised for unrecoverable pipeline failures."""

    kind: ExportErrorKind = ExportErrorKind.INTERNAL_ERROR

    def __init__(self, message: str, *, identifier: str | None = None) -> None:
        super().__init__(message)
        self.identifier = identifier

    @property
    def category(self) -> str:
        return self.kind.category


class InvalidIdentifierError(ExportPipelineError):
    kind = ExportErrorKind.INVALID_IDENTIFIER


class DownloadFailedError(ExportPipelineError):
    kind = ExportErrorKind.DOWNLOAD_FAILED

    def __init__(
        self,
        message: str,
        *,
        identifier: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, identifier=identifier)
        self.status_code = status_code


class ExtractFailedError(ExportPipelineError):
    kind = ExportErrorKind.EXTRACT_FAILED


class FilterFailedError(ExportPipelineError):
    kind = ExportErrorKind.FILTER_FAILED


class BatchingError(ExportPipelineError):
    """Directory creation or move failure while materialising batches."""

    kind = ExportErrorKind.INTERNAL_ERROR


class PackageFailedError(ExportPipelineError):
    kind = ExportErrorKind.PACKAGE_FAILED


__all__ = [
    "BatchingError",
    "DownloadFailedError",
    "ExportPipeline",
    "ExportPipelineError",
    "ExtractFailedError",
    "FilterFailedError",
    "InvalidIdentifierError",
    "PackageFailedError",
]
