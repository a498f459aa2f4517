"""Application configuration utilities for the sticker bot."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import os
from pathlib import Path
import tempfile
from typing import Any

from stickerbot.logging import get_logger

logger = get_logger("config")

DEFAULT_APP_PORT = 8100
_LEGACY_APP_PORT_ENV_VARS: tuple[str, ...] = ("PORT", "UVICORN_PORT")

DEFAULT_LINE_API_BASE_URL = "https://api.line.me"
DEFAULT_LINE_TIMEOUT_MS = 10_000
DEFAULT_SOURCE_URL_TEMPLATE = (
    "http://dl.stickershop.line.naver.jp/products/0/0/1/{identifier}/iphone/stickers@2x.zip"
)
DEFAULT_BATCH_SIZE = 20
DEFAULT_SCRATCH_DIR = str(Path(tempfile.gettempdir()) / "line-stickers-scratch")
DEFAULT_EXPORT_DIR = str(Path(tempfile.gettempdir()) / "line-stickers-export")


_RUNTIME_ENV_CACHE: dict[str, str] | None = None


class ConfigurationError(RuntimeError):
    """Raised when a required configuration value is missing or invalid."""

    def __init__(self, message: str, *, variable: str | None = None) -> None:
        super().__init__(message)
        self.variable = variable


def _load_env_file(path: Path) -> dict[str, str]:
    try:
        contents = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    env_values: dict[str, str] = {}
    for line in contents.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        key, sep, value = stripped.partition("=")
        if not sep:
            continue
        env_values[key.strip()] = value.strip().strip('"').strip("'")
    return env_values


def load_runtime_env(
    *,
    env_file: str | os.PathLike[str] | None = None,
    base_env: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """Load runtime environment values applying .env before explicit environment."""

    env: dict[str, str] = {}
    source = dict(base_env if base_env is not None else os.environ)

    path = Path(env_file) if env_file is not None else Path(".env")
    if path.exists() and path.is_file():
        env.update(_load_env_file(path))

    env.update({key: str(value) for key, value in source.items() if value is not None})
    return env


def get_runtime_env() -> Mapping[str, str]:
    """Return the cached runtime environment mapping."""

    global _RUNTIME_ENV_CACHE
    if _RUNTIME_ENV_CACHE is None:
        _RUNTIME_ENV_CACHE = load_runtime_env()
    return _RUNTIME_ENV_CACHE


def override_runtime_env(runtime_env: Mapping[str, str] | None) -> None:
    """Override the cached runtime environment (primarily for testing)."""

    global _RUNTIME_ENV_CACHE
    if runtime_env is None:
        _RUNTIME_ENV_CACHE = None
    else:
        _RUNTIME_ENV_CACHE = dict(runtime_env)


def get_env(name: str, default: str | None = None) -> str | None:
    """Return an environment variable honoring ENV > .env > defaults."""

    env = get_runtime_env()
    return env.get(name, default)


def _env_value(env: Mapping[str, Any], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _require(env: Mapping[str, Any], key: str) -> str:
    value = _env_value(env, key)
    if value is None:
        raise ConfigurationError(f"{key} env is required", variable=key)
    return value


def _as_bool(value: str | None, *, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _coerce_int(value: Any, *, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _bounded_int(
    value: Any,
    *,
    default: int,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    resolved = _coerce_int(value, default=default)
    if minimum is not None:
        resolved = max(minimum, resolved)
    if maximum is not None:
        resolved = min(maximum, resolved)
    return resolved


def _optional_positive_float(value: str | None, *, name: str) -> float | None:
    if value is None:
        return None
    try:
        parsed = float(value)
    except ValueError:
        logger.warning("Ignoring invalid %s value %r", name, value)
        return None
    if parsed <= 0:
        return None
    return parsed


def resolve_app_port(env: Mapping[str, Any] | None = None) -> int:
    """Return the configured application port constrained to valid TCP ranges."""

    runtime_env: Mapping[str, Any] = env if env is not None else get_runtime_env()
    raw_value = _env_value(runtime_env, "APP_PORT")
    source_name = "APP_PORT"
    if raw_value is None:
        for alias in _LEGACY_APP_PORT_ENV_VARS:
            alias_value = _env_value(runtime_env, alias)
            if alias_value is not None:
                logger.warning(
                    "Legacy port alias %s=%r detected without APP_PORT; using alias value.",
                    alias,
                    alias_value,
                )
                raw_value = alias_value
                source_name = alias
                break

    if raw_value is None:
        return DEFAULT_APP_PORT

    try:
        numeric = int(raw_value)
    except ValueError:
        logger.warning(
            "Invalid port value %r from %s; falling back to default %s.",
            raw_value,
            source_name,
            DEFAULT_APP_PORT,
        )
        return DEFAULT_APP_PORT

    port = _bounded_int(numeric, default=DEFAULT_APP_PORT, minimum=1, maximum=65535)
    if port != numeric:
        logger.warning(
            "Port value %r from %s outside allowed range; clamped to %s.",
            raw_value,
            source_name,
            port,
        )
    return port


@dataclass(slots=True, frozen=True)
class LineConfig:
    channel_secret: str
    channel_token: str
    api_base_url: str = DEFAULT_LINE_API_BASE_URL
    timeout_ms: int = DEFAULT_LINE_TIMEOUT_MS

    @classmethod
    def from_env(cls, env: Mapping[str, Any]) -> LineConfig:
        return cls(
            channel_secret=_require(env, "CHANNEL_SECRET"),
            channel_token=_require(env, "CHANNEL_TOKEN"),
            api_base_url=_env_value(env, "LINE_API_BASE_URL") or DEFAULT_LINE_API_BASE_URL,
            timeout_ms=_bounded_int(
                env.get("LINE_TIMEOUT_MS"),
                default=DEFAULT_LINE_TIMEOUT_MS,
                minimum=100,
            ),
        )


@dataclass(slots=True, frozen=True)
class ExportConfig:
    scratch_dir: str = DEFAULT_SCRATCH_DIR
    export_dir: str = DEFAULT_EXPORT_DIR
    source_url_template: str = DEFAULT_SOURCE_URL_TEMPLATE
    batch_size: int = DEFAULT_BATCH_SIZE
    fetch_timeout_seconds: float | None = None
    validate_existing: bool = True

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ConfigurationError("EXPORT_BATCH_SIZE must be positive", variable="EXPORT_BATCH_SIZE")
        if "{identifier}" not in self.source_url_template:
            raise ConfigurationError(
                "EXPORT_SOURCE_URL_TEMPLATE must contain an {identifier} placeholder",
                variable="EXPORT_SOURCE_URL_TEMPLATE",
            )

    @property
    def scratch_path(self) -> Path:
        return Path(self.scratch_dir).expanduser()

    @property
    def export_path(self) -> Path:
        return Path(self.export_dir).expanduser()

    @classmethod
    def from_env(cls, env: Mapping[str, Any]) -> ExportConfig:
        return cls(
            scratch_dir=_env_value(env, "EXPORT_SCRATCH_DIR") or DEFAULT_SCRATCH_DIR,
            export_dir=_env_value(env, "EXPORT_DIR") or DEFAULT_EXPORT_DIR,
            source_url_template=(
                _env_value(env, "EXPORT_SOURCE_URL_TEMPLATE") or DEFAULT_SOURCE_URL_TEMPLATE
            ),
            batch_size=_bounded_int(
                env.get("EXPORT_BATCH_SIZE"),
                default=DEFAULT_BATCH_SIZE,
                minimum=1,
            ),
            fetch_timeout_seconds=_optional_positive_float(
                _env_value(env, "EXPORT_FETCH_TIMEOUT_SEC"),
                name="EXPORT_FETCH_TIMEOUT_SEC",
            ),
            validate_existing=_as_bool(
                _env_value(env, "EXPORT_VALIDATE_EXISTING"), default=True
            ),
        )


@dataclass(slots=True, frozen=True)
class LoggingConfig:
    level: str = "INFO"
    log_file: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, Any]) -> LoggingConfig:
        return cls(
            level=(_env_value(env, "LOG_LEVEL") or "INFO").upper(),
            log_file=_env_value(env, "LOG_FILE"),
        )


@dataclass(slots=True, frozen=True)
class AppConfig:
    public_host: str
    port: int
    line: LineConfig
    export: ExportConfig
    logging: LoggingConfig

    def download_url(self, identifier: str) -> str:
        """Return the public link under which an export archive is served."""

        return f"{self.public_host.rstrip('/')}/export/{identifier}.zip"


def load_config(runtime_env: Mapping[str, Any] | None = None) -> AppConfig:
    """Build the application configuration from the runtime environment."""

    env = runtime_env if runtime_env is not None else get_runtime_env()
    config = AppConfig(
        public_host=_require(env, "HOST"),
        port=resolve_app_port(env),
        line=LineConfig.from_env(env),
        export=ExportConfig.from_env(env),
        logging=LoggingConfig.from_env(env),
    )
    logger.info(
        "Resolved export directories",
        extra={
            "event": "config.export.paths",
            "scratch_dir": config.export.scratch_dir,
            "export_dir": config.export.export_dir,
            "batch_size": config.export.batch_size,
        },
    )
    return config


__all__ = [
    "AppConfig",
    "ConfigurationError",
    "DEFAULT_APP_PORT",
    "DEFAULT_BATCH_SIZE",
    "DEFAULT_EXPORT_DIR",
    "DEFAULT_SCRATCH_DIR",
    "DEFAULT_SOURCE_URL_TEMPLATE",
    "ExportConfig",
    "LineConfig",
    "LoggingConfig",
    "get_env",
    "get_runtime_env",
    "load_config",
    "load_runtime_env",
    "override_runtime_env",
    "resolve_app_port",
]
