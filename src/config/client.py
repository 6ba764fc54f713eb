"""Relay client constants (screen label derivation)."""

from __future__ import annotations

import re

APP_URL_PATTERN = re.compile(r"^https?://([a-zA-Z0-9-]+\.)*fitbox\.iq/", re.IGNORECASE)
SCREEN_LABEL_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")

SCREEN_LABEL_ROOT = "Dashboard"
SCREEN_LABEL_UNPARSEABLE = "Fitbox_Tab"
SCREEN_LABEL_OUTSIDE_APP = "Non-Fitbox_Tab"

__all__ = [
    "APP_URL_PATTERN",
    "SCREEN_LABEL_UNSAFE_CHARS",
    "SCREEN_LABEL_ROOT",
    "SCREEN_LABEL_UNPARSEABLE",
    "SCREEN_LABEL_OUTSIDE_APP",
]
