"""Static screen -> knowledge text table."""

from __future__ import annotations

from types import MappingProxyType
from collections.abc import Mapping

DEFAULT_KEY = "default"

KNOWLEDGE: Mapping[str, str] = MappingProxyType({
    "add_member": (
        "To add a new member in fitbox, navigate to the Members section and click the 'Add New Member' button. "
        "Fill in their details and save."
    ),
    "edit_member": "To edit a member, find them in the Members list, click the edit icon, make your changes, and save.",
    "view_schedule": "Access the Schedule tab to see upcoming classes and appointments.",
    "book_class": "To book a class, go to the Schedule, find the class you want, and click the 'Book Now' button.",
    DEFAULT_KEY: (
        "I have general knowledge about the fitbox application. "
        "You can ask about managing members, schedules, classes, or settings."
    ),
    "initial": "Welcome to the fitbox AI helper. How can I assist you with fitbox today?",
})

ASSISTANT_PERSONA = (
    "You are a helpful, concise voice assistant for the fitbox application. Respond naturally for voice output."
)

__all__ = ["ASSISTANT_PERSONA", "DEFAULT_KEY", "KNOWLEDGE"]
