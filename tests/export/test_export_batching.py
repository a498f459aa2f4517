"""Tests for partitioning stickers into batch directories."""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from stickerbot.export.batching import (
    Batcher,
    batch_count,
    batch_directory_name,
    plan_batches,
    safe_display_name,
)
from stickerbot.export.models import ExportErrorKind
from stickerbot.export.pipeline import BatchingError
from tests.helpers import sticker_names


@pytest.mark.parametrize("count", [0, 1, 19, 20, 21, 40, 41, 99])
def test_plan_batches_covers_every_file_once_in_order(count: int) -> None:
    names = sticker_names(count)

    plans = plan_batches(list(reversed(names)), "Foo", batch_size=20)

    assert len(plans) == math.ceil(count / 20)
    flattened = [name for plan in plans for name in plan.members]
    assert flattened == sorted(names)
    for index, plan in enumerate(plans):
        assert plan.index == index
        assert plan.total == len(plans)
        assert list(plan.members) == sorted(names)[index * 20 : min((index + 1) * 20, count)]


def test_single_batch_uses_display_name_verbatim() -> None:
    plans = plan_batches(sticker_names(8), "Brown & Cony", batch_size=20)

    assert [plan.directory_name for plan in plans] == ["Brown & Cony"]


def test_multiple_batches_are_numbered() -> None:
    plans = plan_batches(sticker_names(45), "Foo", batch_size=20)

    assert [plan.directory_name for plan in plans] == ["Foo (1:3)", "Foo (2:3)", "Foo (3:3)"]
    assert [plan.size for plan in plans] == [20, 20, 5]


def test_ordering_is_lexicographic_not_numeric() -> None:
    plans = plan_batches(["10.png", "9.png", "1.png"], "x", batch_size=2)

    assert plans[0].members == ("1.png", "10.png")
    assert plans[1].members == ("9.png",)


def test_batch_helpers() -> None:
    assert batch_count(0, 20) == 0
    assert batch_count(25, 20) == 2
    assert batch_directory_name("Foo", 0, 1) == "Foo"
    assert batch_directory_name("Foo", 1, 2) == "Foo (2:2)"
    with pytest.raises(ValueError):
        batch_count(3, 0)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Foo", "Foo"),
        ("AC/DC", "AC_DC"),
        ("back\\slash", "back_slash"),
        ("  ", "  "),
        (" Foo ", " Foo "),
        ("", "123"),
        (".", "123"),
        ("..", "123"),
    ],
)
def test_safe_display_name(raw: str, expected: str) -> None:
    assert safe_display_name(raw, "123") == expected


@pytest.mark.asyncio
async def test_materialize_moves_files_into_directories(tmp_path: Path) -> None:
    working_dir = tmp_path / "work"
    working_dir.mkdir()
    names = sticker_names(25)
    for name in names:
        (working_dir / name).write_bytes(b"x")

    plans = await Batcher(batch_size=20).materialize(working_dir, "Foo", identifier="1")

    assert sorted(path.name for path in working_dir.iterdir()) == ["Foo (1:2)", "Foo (2:2)"]
    assert sorted(p.name for p in (working_dir / "Foo (1:2)").iterdir()) == names[:20]
    assert sorted(p.name for p in (working_dir / "Foo (2:2)").iterdir()) == names[20:]
    assert [plan.directory_name for plan in plans] == ["Foo (1:2)", "Foo (2:2)"]


@pytest.mark.asyncio
async def test_materialize_with_no_files_creates_nothing(tmp_path: Path) -> None:
    working_dir = tmp_path / "work"
    working_dir.mkdir()

    plans = await Batcher(batch_size=20).materialize(working_dir, "Foo", identifier="1")

    assert plans == []
    assert list(working_dir.iterdir()) == []


@pytest.mark.asyncio
async def test_materialize_reports_mkdir_failure_as_internal_error(tmp_path: Path) -> None:
    working_dir = tmp_path / "work"
    working_dir.mkdir()
    # A sticker file named like the batch directory makes mkdir fail.
    (working_dir / "Foo").write_bytes(b"x")

    with pytest.raises(BatchingError) as excinfo:
        await Batcher(batch_size=20).materialize(working_dir, "Foo", identifier="1")

    assert excinfo.value.kind is ExportErrorKind.INTERNAL_ERROR


@pytest.mark.asyncio
async def test_materialize_reports_move_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    working_dir = tmp_path / "work"
    working_dir.mkdir()
    for name in sticker_names(3):
        (working_dir / name).write_bytes(b"x")

    def failing_replace(self: Path, target: Path) -> Path:
        raise OSError(13, "permission denied")

    monkeypatch.setattr(Path, "replace", failing_replace)

    with pytest.raises(BatchingError):
        await Batcher(batch_size=20).materialize(working_dir, "Foo", identifier="1")


def test_batcher_rejects_non_positive_size() -> None:
    with pytest.raises(ValueError):
        Batcher(batch_size=0)


@pytest.mark.asyncio
async def test_materialize_keeps_surrounding_whitespace_in_title(tmp_path: Path) -> None:
    working_dir = tmp_path / "work"
    working_dir.mkdir()
    (working_dir / "001@2x.png").write_bytes(b"x")

    plans = await Batcher(batch_size=20).materialize(working_dir, " Foo ", identifier="1")

    assert [plan.directory_name for plan in plans] == [" Foo "]
    assert (working_dir / " Foo " / "001@2x.png").exists()
