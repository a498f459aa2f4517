"""Read the display name of a sticker package from its metadata file."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from stickerbot.logging import get_logger

logger = get_logger("export.metadata")

METADATA_FILENAME = "productInfo.meta"
PREFERRED_LOCALE = "en"


def read_display_name(
    working_dir: Path,
    identifier: str,
    *,
    locale: str = PREFERRED_LOCALE,
) -> str:
    """Return the localised package title, falling back to *identifier*.

    Never raises: a missing or malformed metadata file, or a title map
    without *locale*, only logs a warning.
    """

    path = working_dir / METADATA_FILENAME
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _log_fallback(identifier, "unreadable", exc)
        return identifier

    try:
        payload: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        _log_fallback(identifier, "malformed", exc)
        return identifier

    title = _localised_title(payload, locale)
    if title is None:
        _log_fallback(identifier, "missing_title", None)
        return identifier
    return title


def _localised_title(payload: Any, locale: str) -> str | None:
    if not isinstance(payload, dict):
        return None
    titles = payload.get("title")
    if not isinstance(titles, dict):
        return None
    value = titles.get(locale)
    if not isinstance(value, str) or not value.strip():
        return None
    return value


def _log_fallback(identifier: str, reason: str, exc: Exception | None) -> None:
    logger.warning(
        "Falling back to identifier as display name",
        extra={
            "event": "export.metadata.fallback",
            "identifier": identifier,
            "reason": reason,
            "error": str(exc) if exc is not None else None,
        },
    )


__all__ = ["METADATA_FILENAME", "read_display_name"]
