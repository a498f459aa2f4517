"""Validation of sticker package identifiers."""

from __future__ import annotations

import re

from .pipeline import InvalidIdentifierError

IDENTIFIER_PATTERN = re.compile(r"^[0-9]{1,20}$")


def validate_identifier(raw: object) -> str:
    """Return *raw* as a path and URL safe identifier or raise.

    Only ASCII digits are accepted; surrounding whitespace is stripped.
    """

    if not isinstance(raw, str):
        raise InvalidIdentifierError("identifier must be a string")
    candidate = raw.strip()
    if not IDENTIFIER_PATTERN.fullmatch(candidate):
        raise InvalidIdentifierError(
            f"identifier {candidate[:32]!r} is not a numeric package id"
        )
    return candidate


def is_valid_identifier(raw: object) -> bool:
    try:
        validate_identifier(raw)
    except InvalidIdentifierError:
        return False
    return True


__all__ = ["IDENTIFIER_PATTERN", "is_valid_identifier", "validate_identifier"]
