from __future__ import annotations

from pathlib import Path

import pytest

from stickerbot.export.filtering import ContentFilter
from stickerbot.export.models import ExportErrorKind
from stickerbot.export.pipeline import FilterFailedError


def _populate(working_dir: Path, names: list[str]) -> None:
    working_dir.mkdir(parents=True, exist_ok=True)
    for name in names:
        (working_dir / name).write_bytes(b"x")


@pytest.mark.asyncio
async def test_removes_key_material_icons_and_metadata(tmp_path: Path) -> None:
    _populate(
        tmp_path,
        [
            "001@2x.png",
            "001_key@2x.png",
            "002@2x.png",
            "002_key@2x.png",
            "productInfo.meta",
            "tab_on@2x.png",
            "tab_off@2x.png",
        ],
    )

    removed = await ContentFilter().apply(tmp_path, identifier="1")

    assert sorted(path.name for path in tmp_path.iterdir()) == ["001@2x.png", "002@2x.png"]
    assert len(removed) == 5


@pytest.mark.asyncio
async def test_absent_auxiliary_files_are_skipped(tmp_path: Path) -> None:
    _populate(tmp_path, ["001@2x.png"])

    removed = await ContentFilter().apply(tmp_path, identifier="1")

    assert removed == []
    assert (tmp_path / "001@2x.png").exists()


def test_matches_is_name_based(tmp_path: Path) -> None:
    _populate(tmp_path, ["monkey.png", "plain.png", "tab_on@2x.png"])
    (tmp_path / "plain.png").write_bytes(b"key key key")

    matched = ContentFilter().matches(tmp_path)

    assert [path.name for path in matched] == ["monkey.png", "tab_on@2x.png"]


@pytest.mark.asyncio
async def test_deletion_failure_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _populate(tmp_path, ["001_key@2x.png"])

    def failing_unlink(self: Path, missing_ok: bool = False) -> None:
        raise PermissionError(13, "permission denied")

    monkeypatch.setattr(Path, "unlink", failing_unlink)

    with pytest.raises(FilterFailedError) as excinfo:
        await ContentFilter().apply(tmp_path, identifier="1")

    assert excinfo.value.kind is ExportErrorKind.FILTER_FAILED
