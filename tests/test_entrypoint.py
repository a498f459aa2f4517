from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from stickerbot import __main__ as entrypoint
from stickerbot.config import override_runtime_env


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(entrypoint, "configure_logging", lambda *args, **kwargs: None)


def test_main_exits_with_2_on_missing_configuration() -> None:
    assert entrypoint.main() == 2


def test_main_runs_uvicorn_with_configured_port(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    override_runtime_env(
        {
            "CHANNEL_SECRET": "secret",
            "CHANNEL_TOKEN": "token",
            "HOST": "https://bot.example.com",
            "APP_PORT": "9001",
            "EXPORT_SCRATCH_DIR": str(tmp_path / "scratch"),
            "EXPORT_DIR": str(tmp_path / "export"),
        }
    )
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(
        entrypoint.uvicorn, "run", lambda app, **kwargs: calls.append(kwargs)
    )

    assert entrypoint.main() == 0

    assert calls == [{"host": "0.0.0.0", "port": 9001, "log_config": None}]
    assert (tmp_path / "export").is_dir()


def test_main_exits_with_1_when_storage_unusable(tmp_path: Path) -> None:
    blocker = tmp_path / "export"
    blocker.write_text("file in the way")
    override_runtime_env(
        {
            "CHANNEL_SECRET": "secret",
            "CHANNEL_TOKEN": "token",
            "HOST": "https://bot.example.com",
            "EXPORT_SCRATCH_DIR": str(tmp_path / "scratch"),
            "EXPORT_DIR": str(blocker),
        }
    )

    assert entrypoint.main() == 1
