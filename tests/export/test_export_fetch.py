from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from stickerbot.export.fetch import StickerArchiveFetcher
from stickerbot.export.models import ExportErrorKind
from stickerbot.export.pipeline import DownloadFailedError
from tests.helpers import TEST_SOURCE_TEMPLATE, RecordingCdn


def test_source_url_interpolates_identifier() -> None:
    fetcher = StickerArchiveFetcher(
        url_template="http://dl.stickershop.line.naver.jp/products/0/0/1/{identifier}/iphone/stickers@2x.zip"
    )

    assert (
        fetcher.source_url("8522")
        == "http://dl.stickershop.line.naver.jp/products/0/0/1/8522/iphone/stickers@2x.zip"
    )


@pytest.mark.asyncio
async def test_fetch_streams_body_to_destination(tmp_path: Path) -> None:
    cdn = RecordingCdn({"42": b"zip-bytes" * 1000})
    fetcher = StickerArchiveFetcher(url_template=TEST_SOURCE_TEMPLATE, transport=cdn.transport())
    destination = tmp_path / "42-raw.zip"

    result = await fetcher.fetch("42", destination)

    assert result == destination
    assert destination.read_bytes() == b"zip-bytes" * 1000
    assert cdn.requests == ["http://stickers.test/products/42/stickers@2x.zip"]


@pytest.mark.asyncio
async def test_fetch_truncates_existing_file(tmp_path: Path) -> None:
    cdn = RecordingCdn({"42": b"new"})
    fetcher = StickerArchiveFetcher(url_template=TEST_SOURCE_TEMPLATE, transport=cdn.transport())
    destination = tmp_path / "42-raw.zip"
    destination.write_bytes(b"stale content that is longer")

    await fetcher.fetch("42", destination)

    assert destination.read_bytes() == b"new"


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [403, 404, 500])
async def test_fetch_non_success_status_raises(tmp_path: Path, status_code: int) -> None:
    cdn = RecordingCdn(status_code=status_code)
    fetcher = StickerArchiveFetcher(url_template=TEST_SOURCE_TEMPLATE, transport=cdn.transport())
    destination = tmp_path / "42-raw.zip"

    with pytest.raises(DownloadFailedError) as excinfo:
        await fetcher.fetch("42", destination)

    assert excinfo.value.kind is ExportErrorKind.DOWNLOAD_FAILED
    assert excinfo.value.status_code == status_code
    assert not destination.exists()
    assert len(cdn.requests) == 1


@pytest.mark.asyncio
async def test_fetch_transport_error_raises_and_removes_partial(tmp_path: Path) -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    fetcher = StickerArchiveFetcher(
        url_template=TEST_SOURCE_TEMPLATE, transport=httpx.MockTransport(_handler)
    )
    destination = tmp_path / "42-raw.zip"
    destination.write_bytes(b"leftover")

    with pytest.raises(DownloadFailedError):
        await fetcher.fetch("42", destination)

    assert not destination.exists()
