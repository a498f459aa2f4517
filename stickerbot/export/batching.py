"""Partition distributable stickers into fixed-size batch directories."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
import re

from stickerbot.logging import get_logger
from stickerbot.logging_events import log_event

from .models import BatchPlan
from .pipeline import BatchingError

logger = get_logger("export.batching")

_UNSAFE_NAME_CHARS = re.compile(r"[/\\\x00]")


def batch_count(count: int, batch_size: int) -> int:
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    return (count + batch_size - 1) // batch_size


def batch_directory_name(display_name: str, index: int, total: int) -> str:
    """Name of batch *index* (zero based) out of *total*."""

    if total == 1:
        return display_name
    return f"{display_name} ({index + 1}:{total})"


def safe_display_name(display_name: str, fallback: str) -> str:
    """Make *display_name* usable as a single path component."""

    cleaned = _UNSAFE_NAME_CHARS.sub("_", display_name)
    if cleaned in {"", ".", ".."}:
        return fallback
    return cleaned


def plan_batches(
    names: Sequence[str], display_name: str, *, batch_size: int
) -> list[BatchPlan]:
    """Split *names* in ascending order into consecutive batches."""

    ordered = sorted(names)
    total = batch_count(len(ordered), batch_size)
    plans: list[BatchPlan] = []
    for index in range(total):
        start = index * batch_size
        end = min(start + batch_size, len(ordered))
        plans.append(
            BatchPlan(
                index=index,
                total=total,
                directory_name=batch_directory_name(display_name, index, total),
                members=tuple(ordered[start:end]),
            )
        )
    return plans


class Batcher:
    """Materialise :class:`BatchPlan` directories inside a working directory."""

    def __init__(self, *, batch_size: int) -> None:
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        self._batch_size = batch_size

    async def materialize(
        self, working_dir: Path, display_name: str, *, identifier: str
    ) -> list[BatchPlan]:
        plans = await asyncio.to_thread(
            self._materialize_sync, working_dir, display_name, identifier
        )
        log_event(
            logger,
            "export.batching.completed",
            identifier=identifier,
            batches=len(plans),
            files=sum(plan.size for plan in plans),
        )
        return plans

    def _materialize_sync(
        self, working_dir: Path, display_name: str, identifier: str
    ) -> list[BatchPlan]:
        try:
            names = [entry.name for entry in working_dir.iterdir()]
        except OSError as exc:
            raise BatchingError(
                f"unable to list {working_dir}: {exc}", identifier=identifier
            ) from exc

        directory_base = safe_display_name(display_name, identifier)
        plans = plan_batches(names, directory_base, batch_size=self._batch_size)
        for plan in plans:
            target = working_dir / plan.directory_name
            try:
                target.mkdir()
            except OSError as exc:
                logger.error(
                    "Unable to create batch directory",
                    extra={
                        "event": "export.batching.mkdir_failed",
                        "identifier": identifier,
                        "directory": plan.directory_name,
                    },
                )
                raise BatchingError(
                    f"mkdir {plan.directory_name!r} failed: {exc}", identifier=identifier
                ) from exc
            for name in plan.members:
                try:
                    (working_dir / name).replace(target / name)
                except OSError as exc:
                    raise BatchingError(
                        f"moving {name!r} into {plan.directory_name!r} failed: {exc}",
                        identifier=identifier,
                    ) from exc
        return plans


__all__ = [
    "Batcher",
    "batch_count",
    "batch_directory_name",
    "plan_batches",
    "safe_display_name",
]
