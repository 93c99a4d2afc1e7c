#!/usr/bin/env python3
"""Type definitions for note records as exported by the journaling app."""

from typing import TypedDict, List, Optional
from typing_extensions import NotRequired


class NoteDict(TypedDict):
    """Note record structure (camelCase keys, as the app stores them)."""
    id: str
    content: str
    createdAt: str
    title: NotRequired[Optional[str]]
    parentId: NotRequired[Optional[str]]
    tags: NotRequired[List[str]]
    imageUris: NotRequired[List[str]]
    reminders: NotRequired[List[str]]
    scheduledDate: NotRequired[Optional[str]]
