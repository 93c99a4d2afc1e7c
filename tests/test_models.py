#!/usr/bin/env python3
"""Tests for the note data model."""

import pytest

from notegraph.core.models import Note


class TestNote:
    """Test Note functionality."""

    def test_note_creation(self):
        note = Note(id="n1", content="Buy milk", title="Shopping")

        assert note.id == "n1"
        assert note.parent_id is None
        assert not note.is_sub_note
        assert note.display_title == "Shopping"
        assert note.tags == []

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError, match="Note ID cannot be empty"):
            Note(id="")

    def test_empty_parent_id_means_root(self):
        """Older exports store roots with an empty parent id."""
        note = Note(id="n1", parent_id="")
        assert note.parent_id is None

    def test_sub_note(self):
        note = Note(id="n2", parent_id="n1")
        assert note.is_sub_note
        assert note.display_title == "n2"

    def test_from_dict_camel_case(self):
        note = Note.from_dict({
            "id": "n3",
            "content": "Tomatoes",
            "createdAt": "2024-05-01T10:00:00Z",
            "parentId": "n1",
            "imageUris": ["file://a.jpg"],
            "scheduledDate": "2024-05-10",
            "tags": ["garden"],
        })

        assert note.created_at == "2024-05-01T10:00:00Z"
        assert note.parent_id == "n1"
        assert note.image_uris == ["file://a.jpg"]
        assert note.scheduled_date == "2024-05-10"
        assert note.tags == ["garden"]

    def test_from_dict_snake_case(self):
        note = Note.from_dict({"id": "n4", "parent_id": "n1", "created_at": "2024"})
        assert note.parent_id == "n1"
        assert note.created_at == "2024"

    def test_from_dict_numeric_id(self):
        assert Note.from_dict({"id": 7}).id == "7"

    def test_to_dict_omits_empty_fields(self):
        data = Note(id="n5", content="x", created_at="2024").to_dict()
        assert data == {"id": "n5", "content": "x", "createdAt": "2024"}

    def test_to_dict_round_trip(self):
        note = Note(id="n6", title="T", parent_id="n1", tags=["a"], reminders=["r1"])
        assert Note.from_dict(note.to_dict()) == note

    def test_from_dict_numeric_parent_id(self):
        """Numeric parent ids are matched against string note ids."""
        assert Note.from_dict({"id": 2, "parentId": 1}).parent_id == "1"
        assert Note.from_dict({"id": 3, "parentId": 0}).parent_id == "0"
        assert Note.from_dict({"id": 4, "parentId": ""}).parent_id is None

    def test_copy_is_independent(self):
        note = Note(id="n7", parent_id="n1", tags=["a"])
        copy = note.copy()
        copy.parent_id = None
        copy.tags.append("b")

        assert copy == Note(id="n7", tags=["a", "b"])
        assert note.parent_id == "n1"
        assert note.tags == ["a"]
