"""Filesystem preparation for the scratch and export roots."""

from __future__ import annotations

import os
from pathlib import Path


class StorageError(RuntimeError):
    """Raised when the bot cannot prepare its storage layout."""


def ensure_dir(path: Path) -> Path:
    """Ensure that *path* exists as a directory and return it."""

    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise StorageError(f"Unable to create directory {path}: {exc}") from exc
    if not path.is_dir():
        raise StorageError(f"{path} exists but is not a directory")
    return path


def validate_permissions(path: Path) -> None:
    """Verify that *path* is a writable directory."""

    ensure_dir(path)
    probe = path / ".stickerbot-permission-check"
    try:
        with probe.open("wb") as handle:
            handle.write(b"ok")
            handle.flush()
            os.fsync(handle.fileno())
    except OSError as exc:
        raise StorageError(f"Directory {path} is not writable: {exc}") from exc
    finally:
        try:
            probe.unlink()
        except FileNotFoundError:
            pass


def prepare_storage(scratch_dir: Path, export_dir: Path) -> tuple[Path, Path]:
    """Create and probe both storage roots, returning their resolved paths."""

    roots = []
    for directory in (scratch_dir, export_dir):
        resolved = directory.expanduser().resolve(strict=False)
        validate_permissions(resolved)
        roots.append(resolved)
    return roots[0], roots[1]


__all__ = ["StorageError", "ensure_dir", "prepare_storage", "validate_permissions"]
