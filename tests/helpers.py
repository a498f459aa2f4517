"""Builders for fake sticker bundles and CDN transports."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
import io
import json
import zipfile

import httpx

TEST_CHANNEL_SECRET = "test-channel-secret"
TEST_CHANNEL_TOKEN = "test-channel-token"
TEST_SOURCE_TEMPLATE = "http://stickers.test/products/{identifier}/stickers@2x.zip"


def sticker_names(count: int) -> list[str]:
    """Return *count* sticker filenames that sort in numeric order."""

    return [f"{index:03d}@2x.png" for index in range(1, count + 1)]


def build_bundle(
    stickers: Iterable[str],
    *,
    title: Mapping[str, str] | None = None,
    metadata: str | None = None,
    extras: Iterable[str] = ("tab_on@2x.png", "tab_off@2x.png"),
    key_files: Iterable[str] = (),
) -> bytes:
    """Build an in-memory zip laid out like a LINE ``stickers@2x.zip``."""

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name in stickers:
            archive.writestr(name, f"png:{name}".encode())
        for name in key_files:
            archive.writestr(name, b"key")
        for name in extras:
            archive.writestr(name, b"tab")
        if metadata is not None:
            archive.writestr("productInfo.meta", metadata)
        elif title is not None:
            archive.writestr("productInfo.meta", json.dumps({"packageId": 1, "title": dict(title)}))
    return buffer.getvalue()


class RecordingCdn:
    """``httpx.MockTransport`` handler serving bundles keyed by identifier."""

    def __init__(self, bundles: Mapping[str, bytes] | None = None, *, status_code: int = 200) -> None:
        self.bundles = dict(bundles or {})
        self.status_code = status_code
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(str(request.url))
        if self.status_code != 200:
            return httpx.Response(self.status_code, content=b"nope")
        for identifier, payload in self.bundles.items():
            if f"/{identifier}/" in request.url.path:
                return httpx.Response(200, content=payload)
        return httpx.Response(404, content=b"missing")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def archive_listing(payload_or_path) -> list[str]:  # type: ignore[no-untyped-def]
    with zipfile.ZipFile(payload_or_path) as archive:
        return archive.namelist()
