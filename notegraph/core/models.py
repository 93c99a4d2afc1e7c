#!/usr/bin/env python3
"""
Core data model for journal notes.

Only ``id`` and ``parent_id`` matter to the hierarchy; everything else is
carried through untouched.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from notegraph.core.type_definitions import NoteDict


@dataclass
class Note:
    """A journal entry, optionally a sub-note of another entry."""
    id: str
    content: str = ""
    created_at: str = ""
    title: Optional[str] = None
    parent_id: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    image_uris: List[str] = field(default_factory=list)
    reminders: List[str] = field(default_factory=list)
    scheduled_date: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Note ID cannot be empty")
        # Empty string parent ids come from older exports
        if not self.parent_id:
            self.parent_id = None

    @property
    def is_sub_note(self) -> bool:
        return self.parent_id is not None

    @property
    def display_title(self) -> str:
        return self.title or self.id

    def copy(self) -> 'Note':
        """Independent copy, list fields included."""
        return replace(self, tags=list(self.tags), image_uris=list(self.image_uris),
                       reminders=list(self.reminders))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Note':
        """Create a Note from an exported record (camelCase or snake_case keys)."""
        def pick(camel: str, snake: str, default: Any = None) -> Any:
            if camel in data:
                return data[camel]
            return data.get(snake, default)

        # Numeric ids must match the string ids they refer to
        parent_id = pick('parentId', 'parent_id')
        if parent_id is not None and parent_id != '':
            parent_id = str(parent_id)

        return cls(
            id=str(data['id']),
            content=str(data.get('content') or ''),
            created_at=pick('createdAt', 'created_at', '') or '',
            title=data.get('title'),
            parent_id=parent_id,
            tags=list(data.get('tags') or []),
            image_uris=list(pick('imageUris', 'image_uris') or []),
            reminders=list(data.get('reminders') or []),
            scheduled_date=pick('scheduledDate', 'scheduled_date'),
        )

    def to_dict(self) -> NoteDict:
        """Convert to the app's camelCase record layout."""
        result: NoteDict = {
            'id': self.id,
            'content': self.content,
            'createdAt': self.created_at,
        }

        if self.title is not None:
            result['title'] = self.title
        if self.parent_id is not None:
            result['parentId'] = self.parent_id
        if self.tags:
            result['tags'] = list(self.tags)
        if self.image_uris:
            result['imageUris'] = list(self.image_uris)
        if self.reminders:
            result['reminders'] = list(self.reminders)
        if self.scheduled_date is not None:
            result['scheduledDate'] = self.scheduled_date

        return result
