"""Runtime helpers for wiring the export orchestrator."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx

from stickerbot.config import ExportConfig
from stickerbot.runtime.paths import prepare_storage

from .batching import Batcher
from .extract import BundleExtractor
from .fetch import StickerArchiveFetcher
from .filtering import ContentFilter
from .locks import IdentifierLocks
from .orchestrator import StickerExportOrchestrator
from .packaging import ExportPackager


@dataclass(slots=True)
class ExportRuntime:
    """Container for the export orchestrator and its storage roots."""

    orchestrator: StickerExportOrchestrator
    scratch_dir: Path
    export_dir: Path
    locks: IdentifierLocks


def build_export_runtime(
    config: ExportConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ExportRuntime:
    """Initialise the export pipeline using the supplied configuration."""

    scratch_dir, export_dir = prepare_storage(config.scratch_path, config.export_path)
    locks = IdentifierLocks()
    orchestrator = StickerExportOrchestrator(
        scratch_dir=scratch_dir,
        fetcher=StickerArchiveFetcher(
            url_template=config.source_url_template,
            timeout_seconds=config.fetch_timeout_seconds,
            transport=transport,
        ),
        extractor=BundleExtractor(),
        content_filter=ContentFilter(),
        batcher=Batcher(batch_size=config.batch_size),
        packager=ExportPackager(export_dir),
        locks=locks,
        validate_existing=config.validate_existing,
    )
    return ExportRuntime(
        orchestrator=orchestrator,
        scratch_dir=scratch_dir,
        export_dir=export_dir,
        locks=locks,
    )


__all__ = ["ExportRuntime", "build_export_runtime"]
