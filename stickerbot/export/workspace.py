"""Scratch storage allocation with guaranteed cleanup."""

from __future__ import annotations

from pathlib import Path
import shutil
from types import TracebackType

from stickerbot.logging import get_logger
from stickerbot.logging_events import log_event

logger = get_logger("export.workspace")


class ScratchWorkspace:
    """Identifier scoped working directory and raw bundle path.

    Used as a context manager; both paths are removed on exit whatever the
    outcome of the run, including cancellation.
    """

    def __init__(self, scratch_dir: Path, identifier: str) -> None:
        self.identifier = identifier
        self.working_dir = scratch_dir / identifier
        self.raw_bundle = scratch_dir / f"{identifier}-raw.zip"
        self._scratch_dir = scratch_dir

    def __enter__(self) -> ScratchWorkspace:
        self._scratch_dir.mkdir(parents=True, exist_ok=True)
        # Leftovers from a crashed process would otherwise leak into the batches.
        self.cleanup()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        log_event(
            logger,
            "export.workspace.cleanup",
            identifier=self.identifier,
            outcome="error" if exc_type is not None else "ok",
        )
        self.cleanup()

    def cleanup(self) -> None:
        """Remove the working directory and raw bundle, logging any failure."""

        try:
            shutil.rmtree(self.working_dir)
        except FileNotFoundError:
            pass
        except OSError:
            self._log_cleanup_failure(self.working_dir)
        try:
            self.raw_bundle.unlink()
        except FileNotFoundError:
            pass
        except OSError:
            self._log_cleanup_failure(self.raw_bundle)

    def _log_cleanup_failure(self, path: Path) -> None:
        logger.error(
            "Unable to remove scratch entry",
            extra={
                "event": "export.workspace.cleanup_failed",
                "identifier": self.identifier,
                "path": str(path),
            },
            exc_info=True,
        )


__all__ = ["ScratchWorkspace"]
