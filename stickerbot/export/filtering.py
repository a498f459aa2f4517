"""Remove non-distributable files from an extracted sticker bundle."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
import shutil

from stickerbot.logging import get_logger
from stickerbot.logging_events import log_event

from .metadata import METADATA_FILENAME
from .pipeline import FilterFailedError

logger = get_logger("export.filter")

KEY_PATTERN = "*key*"
AUXILIARY_FILENAMES: tuple[str, ...] = (
    METADATA_FILENAME,
    "tab_off@2x.png",
    "tab_on@2x.png",
)


class ContentFilter:
    """Delete key material, tab icons and the metadata file by name."""

    def __init__(
        self,
        *,
        pattern: str = KEY_PATTERN,
        auxiliary_names: Iterable[str] = AUXILIARY_FILENAMES,
    ) -> None:
        self._pattern = pattern
        self._auxiliary_names = tuple(auxiliary_names)

    def matches(self, working_dir: Path) -> list[Path]:
        """Return the entries of *working_dir* that would be removed."""

        matched = {path for path in working_dir.glob(self._pattern)}
        for name in self._auxiliary_names:
            candidate = working_dir / name
            if candidate.exists() or candidate.is_symlink():
                matched.add(candidate)
        return sorted(matched)

    async def apply(self, working_dir: Path, *, identifier: str) -> list[Path]:
        removed = await asyncio.to_thread(self._apply_sync, working_dir, identifier)
        log_event(
            logger,
            "export.filter.completed",
            identifier=identifier,
            removed=len(removed),
        )
        return removed

    def _apply_sync(self, working_dir: Path, identifier: str) -> list[Path]:
        removed: list[Path] = []
        for path in self.matches(working_dir):
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                else:
                    path.unlink()
            except FileNotFoundError:
                continue
            except OSError as exc:
                raise FilterFailedError(
                    f"unable to remove {path.name}: {exc}", identifier=identifier
                ) from exc
            removed.append(path)
        return removed


__all__ = ["AUXILIARY_FILENAMES", "ContentFilter", "KEY_PATTERN"]
