"""Compress batched sticker directories into the durable export archive."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
import tempfile
import zipfile

from stickerbot.logging import get_logger
from stickerbot.logging_events import log_event

from .pipeline import PackageFailedError

logger = get_logger("export.packaging")

ARCHIVE_SUFFIX = ".zip"


def archive_path_for(export_dir: Path, identifier: str) -> Path:
    return export_dir / f"{identifier}{ARCHIVE_SUFFIX}"


def is_complete_archive(path: Path) -> bool:
    """Return ``True`` when *path* is a non-empty zip with a readable directory."""

    try:
        if not path.is_file() or path.stat().st_size == 0:
            return False
        with zipfile.ZipFile(path, "r") as archive:
            archive.infolist()
    except (OSError, zipfile.BadZipFile, zipfile.LargeZipFile, EOFError, ValueError):
        return False
    return True


class ExportPackager:
    """Write ``<identifier>.zip`` atomically into the export directory."""

    def __init__(self, export_dir: Path, *, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self._export_dir = export_dir
        self._compression = compression

    def archive_path(self, identifier: str) -> Path:
        return archive_path_for(self._export_dir, identifier)

    async def package(self, working_dir: Path, *, identifier: str) -> Path:
        destination = await asyncio.to_thread(self._package_sync, working_dir, identifier)
        log_event(
            logger,
            "export.packaging.completed",
            identifier=identifier,
            archive=str(destination),
            bytes_written=destination.stat().st_size,
        )
        return destination

    def _package_sync(self, working_dir: Path, identifier: str) -> Path:
        destination = self.archive_path(identifier)
        try:
            self._export_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{identifier}-", suffix=".zip.part", dir=self._export_dir
            )
        except OSError as exc:
            raise PackageFailedError(
                f"unable to stage archive in {self._export_dir}: {exc}",
                identifier=identifier,
            ) from exc

        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                with zipfile.ZipFile(handle, "w", compression=self._compression) as archive:
                    for path in sorted(working_dir.rglob("*")):
                        archive.write(path, path.relative_to(working_dir).as_posix())
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(temp_path, 0o644)
            os.replace(temp_path, destination)
        except (OSError, ValueError, zipfile.LargeZipFile) as exc:
            _discard(temp_path)
            logger.error(
                "Failed to package sticker export",
                extra={
                    "event": "export.packaging.failed",
                    "identifier": identifier,
                    "archive": str(destination),
                },
                exc_info=True,
            )
            raise PackageFailedError(
                f"unable to write {destination.name}: {exc}", identifier=identifier
            ) from exc
        return destination


def _discard(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError:
        logger.warning(
            "Unable to remove partial archive",
            extra={"event": "export.packaging.partial_cleanup_failed", "path": str(path)},
            exc_info=True,
        )


__all__ = ["ARCHIVE_SUFFIX", "ExportPackager", "archive_path_for", "is_complete_archive"]
