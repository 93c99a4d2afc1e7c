#!/usr/bin/env python3
"""
In-memory note collection with validated sub-note mutation flows.

Every mutation follows the same order: validate against the current
snapshot, apply to the list, then invalidate the hierarchy cache. A hard
violation raises before anything is applied.

Stored notes never leave the collection: every query returns copies and
every write stores a copy, so the only way to change a note's parent is a
mutation call that goes through the validator.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from notegraph.core.logging_config import get_logger
from notegraph.core.models import Note
from notegraph.core.service import HierarchyService
from notegraph.tree.tree_constants import ERROR_MESSAGES
from notegraph.tree.tree_exceptions import (
    HierarchyError, HierarchyViolationError, NoteExistsError, NoteNotFoundError
)
from notegraph.tree.tree_operations import get_all_descendants, get_direct_children
from notegraph.tree.tree_types import ValidationResult


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class NoteCollection:
    """Owns the flat note list and keeps the service's cache in step with it."""

    def __init__(self, notes: Optional[Iterable[Note]] = None,
                 service: Optional[HierarchyService] = None):
        self._notes: List[Note] = []
        self.service = service or HierarchyService()
        self.logger = get_logger(__name__)
        for note in notes or ():
            if self._find(note.id) is not None:
                raise NoteExistsError(note.id, "load")
            self._notes.append(note.copy())

    def __len__(self) -> int:
        return len(self._notes)

    def __contains__(self, note_id: object) -> bool:
        return isinstance(note_id, str) and self._find(note_id) is not None

    def snapshot(self) -> List[Note]:
        """Copies of the current notes, safe to hand to the service or edit."""
        return [note.copy() for note in self._notes]

    def get(self, note_id: str) -> Note:
        """A copy of the stored note; edits take effect through ``update_note``."""
        return self._require(note_id).copy()

    def _find(self, note_id: str) -> Optional[Note]:
        for note in self._notes:
            if note.id == note_id:
                return note
        return None

    def _require(self, note_id: str, operation: str = "access") -> Note:
        note = self._find(note_id)
        if note is None:
            raise NoteNotFoundError(note_id, operation)
        return note

    # Queries

    def get_parent_notes(self) -> List[Note]:
        """Root notes, as shown on the home screen."""
        return [note.copy() for note in self._notes if note.parent_id is None]

    def get_sub_notes(self, parent_id: str) -> List[Note]:
        """Direct children, newest first."""
        children = get_direct_children(parent_id, self._notes)
        return [note.copy() for note in sorted(children, key=lambda note: note.created_at, reverse=True)]

    def get_sub_note_count(self, parent_id: str) -> int:
        return len(self.service.direct_children(parent_id, self._notes))

    def get_note_family(self, parent_id: str) -> Tuple[Note, List[Note]]:
        """A root note together with its direct sub-notes."""
        parent = self._require(parent_id, "get_note_family")
        if parent.parent_id is not None:
            raise NoteNotFoundError(parent_id, "get_note_family")
        return parent.copy(), self.get_sub_notes(parent_id)

    # Mutations

    def add_note(self, note: Note) -> Note:
        """Add a note; one with a parent goes through the same checks as a sub-note."""
        if self._find(note.id) is not None:
            raise NoteExistsError(note.id)
        if note.parent_id is not None:
            # An orphan already pointing at this id would close a loop
            self._require_valid(
                self.service.can_attach(note.parent_id, self._notes, moving_note_id=note.id),
                "add_note", note.id)

        self._notes.append(note.copy())
        self.service.invalidate(note.id, self._notes)
        self.logger.info(f"Added note {note.id}")
        return note.copy()

    def create_sub_note(self, parent_id: str, note_data: Optional[Dict[str, Any]] = None) -> Note:
        """Create a new note under ``parent_id`` from partial note data."""
        data = dict(note_data or {})
        note_id = str(data.get("id") or uuid.uuid4())
        if self._find(note_id) is not None:
            raise NoteExistsError(note_id)

        self._require_valid(
            self.service.can_attach(parent_id, self._notes, moving_note_id=note_id),
            "create_sub_note", parent_id)

        note = Note(
            id=note_id,
            title=data.get("title") or "",
            content=data.get("content") or "",
            created_at=data.get("created_at") or _now_iso(),
            parent_id=parent_id,
            tags=list(data.get("tags") or []),
            image_uris=list(data.get("image_uris") or []),
            reminders=list(data.get("reminders") or []),
            scheduled_date=data.get("scheduled_date"),
        )

        self._notes.append(note)
        self.service.invalidate(note.id, self._notes)
        self.logger.info(f"Created sub-note {note.id} under {parent_id}")
        return note.copy()

    def convert_to_sub_note(self, note_id: str, parent_id: str) -> Note:
        """Attach a root note under ``parent_id``."""
        note = self._require(note_id, "convert_to_sub_note")
        if note.parent_id is not None:
            raise HierarchyError(ERROR_MESSAGES["ALREADY_SUB_NOTE"].format(note_id=note_id),
                                 "convert_to_sub_note", note_id)
        return self.move_note(note_id, parent_id)

    def move_note(self, note_id: str, new_parent_id: Optional[str]) -> Note:
        """Reparent a note (and its subtree); ``None`` makes it a root."""
        note = self._require(note_id, "move_note")
        previous_parent_id = note.parent_id
        if new_parent_id == previous_parent_id:
            return note.copy()

        if new_parent_id is not None:
            self._require_valid(
                self.service.can_attach(new_parent_id, self._notes, moving_note_id=note_id),
                "move_note", note_id)

        note.parent_id = new_parent_id
        self.service.invalidate_reparented(note_id, self._notes, previous_parent_id)
        self.logger.info(f"Moved note {note_id} from {previous_parent_id} to {new_parent_id}")
        return note.copy()

    def update_note(self, note: Note) -> Note:
        """Replace a stored note by id, moving it first if its parent changed."""
        current = self._require(note.id, "update_note")
        if note.parent_id != current.parent_id:
            self.move_note(note.id, note.parent_id)

        stored = note.copy()
        index = next(i for i, existing in enumerate(self._notes) if existing is current)
        self._notes[index] = stored
        self.service.invalidate(note.id, self._notes)
        return stored.copy()

    def delete_note(self, note_id: str) -> List[str]:
        """Delete a note and all of its descendants. Returns the removed ids."""
        note = self._require(note_id, "delete_note")
        descendants = get_all_descendants(note_id, self._notes)
        removed_ids = [note_id] + [d.id for d in descendants]

        # Ancestors are found through the pre-deletion snapshot
        self.service.invalidate(note_id, self._notes)
        removed = set(removed_ids)
        self._notes = [n for n in self._notes if n.id not in removed]
        self.service.cache.discard(removed_ids)

        self.logger.info(f"Deleted note {note_id} and {len(descendants)} descendants "
                         f"(former parent: {note.parent_id})")
        return removed_ids

    def _require_valid(self, result: ValidationResult, operation: str, note_id: str) -> None:
        if not result.is_valid:
            self.logger.warning(f"{operation} rejected for {note_id}: {result.reason}")
            raise HierarchyViolationError(result, operation, note_id)
        for warning in result.warnings:
            self.logger.info(f"{operation} warning for {note_id}: {warning}")
