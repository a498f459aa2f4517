"""Download raw sticker bundles from the LINE sticker CDN."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx

from stickerbot.logging import get_logger
from stickerbot.logging_events import elapsed_ms, log_event, now_ms

from .pipeline import DownloadFailedError

logger = get_logger("export.fetch")

_CHUNK_SIZE = 64 * 1024


@dataclass(slots=True)
class StickerArchiveFetcher:
    """HTTPX based downloader issuing a single GET per bundle."""

    url_template: str
    timeout_seconds: float | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def source_url(self, identifier: str) -> str:
        return self.url_template.format(identifier=identifier)

    async def fetch(self, identifier: str, destination: Path) -> Path:
        """Stream the bundle for *identifier* into *destination*.

        The destination is truncated before writing. Any failure removes the
        partial file and raises :class:`DownloadFailedError`.
        """

        url = self.source_url(identifier)
        started = now_ms()
        log_event(logger, "export.fetch.started", identifier=identifier, url=url)
        destination.parent.mkdir(parents=True, exist_ok=True)

        bytes_written = 0
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout_seconds),
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                async with client.stream("GET", url) as response:
                    if not response.is_success:
                        raise DownloadFailedError(
                            f"bad status code: {response.status_code}",
                            identifier=identifier,
                            status_code=response.status_code,
                        )
                    with destination.open("wb") as handle:
                        async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                            handle.write(chunk)
                            bytes_written += len(chunk)
        except DownloadFailedError:
            _discard_partial(destination)
            raise
        except (httpx.HTTPError, OSError) as exc:
            _discard_partial(destination)
            raise DownloadFailedError(
                f"download of {url} failed: {exc}", identifier=identifier
            ) from exc

        log_event(
            logger,
            "export.fetch.completed",
            identifier=identifier,
            bytes_written=bytes_written,
            duration_ms=elapsed_ms(started),
        )
        return destination


def _discard_partial(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        return
    except OSError:
        logger.warning(
            "Unable to remove partial download",
            extra={"event": "export.fetch.partial_cleanup_failed", "path": str(path)},
            exc_info=True,
        )


__all__ = ["StickerArchiveFetcher"]
