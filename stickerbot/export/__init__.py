"""Sticker export pipeline: fetch, unpack, filter, batch and repackage."""

from .batching import Batcher, plan_batches
from .extract import BundleExtractor
from .fetch import StickerArchiveFetcher
from .filtering import ContentFilter
from .identifiers import validate_identifier
from .locks import IdentifierLocks
from .metadata import read_display_name
from .models import BatchPlan, ExportErrorKind, ExportResult, ExportStatus
from .orchestrator import StickerExportOrchestrator
from .packaging import ExportPackager
from .pipeline import (
    BatchingError,
    DownloadFailedError,
    ExportPipeline,
    ExportPipelineError,
    ExtractFailedError,
    FilterFailedError,
    InvalidIdentifierError,
    PackageFailedError,
)
from .runtime import ExportRuntime, build_export_runtime
from .workspace import ScratchWorkspace

__all__ = [
    "BatchPlan",
    "Batcher",
    "BatchingError",
    "BundleExtractor",
    "ContentFilter",
    "DownloadFailedError",
    "ExportErrorKind",
    "ExportPackager",
    "ExportPipeline",
    "ExportPipelineError",
    "ExportResult",
    "ExportRuntime",
    "ExportStatus",
    "ExtractFailedError",
    "FilterFailedError",
    "IdentifierLocks",
    "InvalidIdentifierError",
    "PackageFailedError",
    "ScratchWorkspace",
    "StickerArchiveFetcher",
    "StickerExportOrchestrator",
    "build_export_runtime",
    "plan_batches",
    "read_display_name",
    "validate_identifier",
]
