"""Derive the context label a client reports for the page it is on."""

from __future__ import annotations

from urllib.parse import urlsplit

from src.config.client import (
    APP_URL_PATTERN,
    SCREEN_LABEL_ROOT,
    SCREEN_LABEL_UNPARSEABLE,
    SCREEN_LABEL_OUTSIDE_APP,
    SCREEN_LABEL_UNSAFE_CHARS,
)


def screen_label_from_url(page_url: str | None) -> str:
    if not page_url or not APP_URL_PATTERN.match(page_url):
        return SCREEN_LABEL_OUTSIDE_APP
    try:
        path = urlsplit(page_url).path
    except ValueError:
        return SCREEN_LABEL_UNPARSEABLE
    return SCREEN_LABEL_UNSAFE_CHARS.sub("_", path[1:]) or SCREEN_LABEL_ROOT


__all__ = ["screen_label_from_url"]
