import asyncio
import inspect
from pathlib import Path
import sys
from collections.abc import Iterator

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stickerbot.config import (  # noqa: E402
    AppConfig,
    ExportConfig,
    LineConfig,
    LoggingConfig,
    override_runtime_env,
)
from tests.helpers import (  # noqa: E402
    TEST_CHANNEL_SECRET,
    TEST_CHANNEL_TOKEN,
    TEST_SOURCE_TEMPLATE,
)


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    marker = pyfuncitem.get_closest_marker("asyncio")
    if marker is None:
        return None
    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None
    fixtureinfo = getattr(pyfuncitem, "_fixtureinfo", None)
    if fixtureinfo is None:
        return None
    kwargs = {name: pyfuncitem.funcargs[name] for name in fixtureinfo.argnames}
    asyncio.run(test_func(**kwargs))
    return True


@pytest.fixture(autouse=True)
def _test_environment() -> Iterator[None]:
    override_runtime_env({})
    try:
        yield
    finally:
        override_runtime_env(None)


@pytest.fixture()
def scratch_dir(tmp_path: Path) -> Path:
    path = tmp_path / "scratch"
    path.mkdir()
    return path


@pytest.fixture()
def export_dir(tmp_path: Path) -> Path:
    path = tmp_path / "export"
    path.mkdir()
    return path


@pytest.fixture()
def export_config(scratch_dir: Path, export_dir: Path) -> ExportConfig:
    return ExportConfig(
        scratch_dir=str(scratch_dir),
        export_dir=str(export_dir),
        source_url_template=TEST_SOURCE_TEMPLATE,
    )


@pytest.fixture()
def app_config(export_config: ExportConfig) -> AppConfig:
    return AppConfig(
        public_host="https://bot.example.com",
        port=8100,
        line=LineConfig(
            channel_secret=TEST_CHANNEL_SECRET,
            channel_token=TEST_CHANNEL_TOKEN,
            api_base_url="https://line.test",
        ),
        export=export_config,
        logging=LoggingConfig(),
    )
