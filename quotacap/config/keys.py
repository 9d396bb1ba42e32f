"""Store key and description formatting for per-category entries."""

from __future__ import annotations

from quotacap.config.constants import (
    CAP_DESCRIPTION_FORMAT,
    CAP_KEY_FORMAT,
    DEFAULT_CATEGORY_WORD,
    ENABLED_DESCRIPTION_FORMAT,
    ENABLED_KEY_FORMAT,
)


def cap_key(name: str) -> str:
    return CAP_KEY_FORMAT.format(name=name)


def enabled_key(name: str) -> str:
    return ENABLED_KEY_FORMAT.format(name=name)


def cap_description(name: str, word: str | None = None) -> str:
    """Human description for a cap entry, e.g. ``Quota cap for Alpha sector``."""
    return CAP_DESCRIPTION_FORMAT.format(name=name, word=(word or DEFAULT_CATEGORY_WORD).lower())


def enabled_description(name: str, word: str | None = None) -> str:
    return ENABLED_DESCRIPTION_FORMAT.format(name=name, word=(word or DEFAULT_CATEGORY_WORD).lower())
