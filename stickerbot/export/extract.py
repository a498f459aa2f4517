"""Unpack downloaded sticker bundles into the working directory."""

from __future__ import annotations

import asyncio
from pathlib import Path
import zipfile
import zlib

from stickerbot.logging import get_logger
from stickerbot.logging_events import log_event

from .pipeline import ExtractFailedError

logger = get_logger("export.extract")


class BundleExtractor:
    """Extract zip bundles in-process, rejecting members outside the target."""

    async def extract(self, bundle: Path, working_dir: Path, *, identifier: str) -> int:
        """Unpack *bundle* into *working_dir* and return the member count."""

        count = await asyncio.to_thread(self._extract_sync, bundle, working_dir, identifier)
        log_event(
            logger,
            "export.extract.completed",
            identifier=identifier,
            members=count,
            working_dir=str(working_dir),
        )
        return count

    def _extract_sync(self, bundle: Path, working_dir: Path, identifier: str) -> int:
        try:
            working_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ExtractFailedError(
                f"unable to create working directory {working_dir}: {exc}",
                identifier=identifier,
            ) from exc

        root = working_dir.resolve()
        try:
            with zipfile.ZipFile(bundle, "r") as archive:
                members = archive.infolist()
                for member in members:
                    target = (root / member.filename).resolve()
                    if target != root and root not in target.parents:
                        raise ExtractFailedError(
                            f"archive member {member.filename!r} escapes the working directory",
                            identifier=identifier,
                        )
                archive.extractall(root)
        except ExtractFailedError:
            raise
        except (
            zipfile.BadZipFile,
            zipfile.LargeZipFile,
            zlib.error,
            EOFError,
            NotImplementedError,
            RuntimeError,
            OSError,
            ValueError,
        ) as exc:
            logger.warning(
                "Failed to unpack sticker bundle",
                extra={
                    "event": "export.extract.failed",
                    "identifier": identifier,
                    "bundle": str(bundle),
                },
                exc_info=True,
            )
            raise ExtractFailedError(
                f"unable to unpack {bundle.name}: {exc}", identifier=identifier
            ) from exc
        return len(members)


__all__ = ["BundleExtractor"]
