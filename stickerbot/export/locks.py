"""Per-identifier mutual exclusion for pipeline runs."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from stickerbot.logging import get_logger

logger = get_logger("export.locks")


@dataclass(slots=True)
class _LockEntry:
    lock: asyncio.Lock
    holders: int = 0


class IdentifierLocks:
    """In-process map of identifier to :class:`asyncio.Lock`.

    Entries are reference counted and dropped once no task holds or waits
    for them, so the map only grows with the number of in-flight identifiers.
    """

    def __init__(self) -> None:
        self._entries: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def locked(self, identifier: str) -> bool:
        entry = self._entries.get(identifier)
        return entry is not None and entry.lock.locked()

    @asynccontextmanager
    async def hold(self, identifier: str) -> AsyncIterator[None]:
        entry = self._entries.get(identifier)
        if entry is None:
            entry = _LockEntry(lock=asyncio.Lock())
            self._entries[identifier] = entry
        entry.holders += 1
        try:
            if entry.lock.locked():
                logger.info(
                    "Waiting for concurrent export of the same package",
                    extra={"event": "export.lock.wait", "identifier": identifier},
                )
            async with entry.lock:
                yield
        finally:
            entry.holders -= 1
            if entry.holders == 0 and self._entries.get(identifier) is entry:
                del self._entries[identifier]


__all__ = ["IdentifierLocks"]
