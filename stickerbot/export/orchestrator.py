"""Sticker export orchestrator sequencing the repackaging stages."""

from __future__ import annotations

from pathlib import Path

from stickerbot.logging import get_logger
from stickerbot.logging_events import elapsed_ms, log_event, now_ms

from .batching import Batcher
from .extract import BundleExtractor
from .fetch import StickerArchiveFetcher
from .filtering import ContentFilter
from .identifiers import validate_identifier
from .locks import IdentifierLocks
from .metadata import read_display_name
from .models import ExportResult, ExportStatus
from .packaging import ExportPackager, is_complete_archive
from .pipeline import ExportPipeline, ExportPipelineError
from .workspace import ScratchWorkspace


class StickerExportOrchestrator(ExportPipeline):
    """Fetch, unpack, filter, batch and repackage one sticker package.

    Runs for the same identifier are serialised in-process; the export
    archive's presence is the only completion marker.
    """

    def __init__(
        self,
        *,
        scratch_dir: Path,
        fetcher: StickerArchiveFetcher,
        extractor: BundleExtractor,
        content_filter: ContentFilter,
        batcher: Batcher,
        packager: ExportPackager,
        locks: IdentifierLocks | None = None,
        validate_existing: bool = True,
    ) -> None:
        self._scratch_dir = scratch_dir
        self._fetcher = fetcher
        self._extractor = extractor
        self._filter = content_filter
        self._batcher = batcher
        self._packager = packager
        self._locks = locks or IdentifierLocks()
        self._validate_existing = validate_existing
        self._logger = get_logger("export.orchestrator")

    async def process(self, identifier: str) -> ExportResult:  # type: ignore[override]
        try:
            identifier = validate_identifier(identifier)
        except ExportPipelineError as exc:
            log_event(
                self._logger,
                "export.rejected",
                reason=exc.kind.value,
                error=str(exc),
            )
            raise

        async with self._locks.hold(identifier):
            existing = self._existing_archive(identifier)
            if existing is not None:
                log_event(
                    self._logger,
                    "export.skipped",
                    identifier=identifier,
                    archive=str(existing),
                )
                return ExportResult(
                    identifier=identifier,
                    archive_path=existing,
                    status=ExportStatus.EXISTING,
                )

            started = now_ms()
            log_event(self._logger, "export.started", identifier=identifier)
            try:
                result = await self._run(identifier)
            except ExportPipelineError as exc:
                log_event(
                    self._logger,
                    "export.failed",
                    identifier=identifier,
                    kind=exc.kind.value,
                    error=str(exc),
                    duration_ms=elapsed_ms(started),
                )
                raise
            except Exception as exc:
                self._logger.exception(
                    "Unexpected failure while exporting stickers",
                    extra={"event": "export.crashed", "identifier": identifier},
                )
                raise ExportPipelineError(
                    f"unexpected error: {exc}", identifier=identifier
                ) from exc
            log_event(
                self._logger,
                "export.completed",
                identifier=identifier,
                display_name=result.display_name,
                batches=len(result.batches),
                archive=str(result.archive_path),
                duration_ms=elapsed_ms(started),
            )
            return result

    async def _run(self, identifier: str) -> ExportResult:
        with ScratchWorkspace(self._scratch_dir, identifier) as workspace:
            await self._fetcher.fetch(identifier, workspace.raw_bundle)
            await self._extractor.extract(
                workspace.raw_bundle, workspace.working_dir, identifier=identifier
            )
            display_name = read_display_name(workspace.working_dir, identifier)
            await self._filter.apply(workspace.working_dir, identifier=identifier)
            batches = await self._batcher.materialize(
                workspace.working_dir, display_name, identifier=identifier
            )
            archive = await self._packager.package(
                workspace.working_dir, identifier=identifier
            )
        return ExportResult(
            identifier=identifier,
            archive_path=archive,
            status=ExportStatus.CREATED,
            display_name=display_name,
            batches=tuple(batches),
        )

    def _existing_archive(self, identifier: str) -> Path | None:
        path = self._packager.archive_path(identifier)
        if not path.exists():
            return None
        if not self._validate_existing or is_complete_archive(path):
            return path
        self._logger.warning(
            "Discarding incomplete export archive",
            extra={
                "event": "export.stale_archive",
                "identifier": identifier,
                "archive": str(path),
            },
        )
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            self._logger.error(
                "Unable to discard incomplete export archive",
                extra={
                    "event": "export.stale_archive_failed",
                    "identifier": identifier,
                    "archive": str(path),
                },
                exc_info=True,
            )
            raise ExportPipelineError(
                f"unable to replace {path.name}: {exc}", identifier=identifier
            ) from exc
        return None


__all__ = ["StickerExportOrchestrator"]
