#!/usr/bin/env python3
"""Tests for validated note collection mutations."""

import pytest

from notegraph.core.models import Note
from notegraph.core.note_store import NoteCollection
from notegraph.core.service import HierarchyService
from notegraph.tree.tree_exceptions import (
    HierarchyError, HierarchyViolationError, NoteExistsError, NoteNotFoundError
)
from notegraph.tree.tree_types import CacheKind, HierarchyConfig


class TestNoteCollection:
    """Test the sub-note flows."""

    def setup_method(self):
        self.service = HierarchyService(HierarchyConfig(max_depth=3), start_cleanup=False)
        self.collection = NoteCollection([
            Note(id="home", title="Home", created_at="2024-01-01T00:00:00Z"),
            Note(id="kitchen", title="Kitchen", parent_id="home", created_at="2024-01-02T00:00:00Z"),
            Note(id="garden", title="Garden", parent_id="home", created_at="2024-01-03T00:00:00Z"),
            Note(id="work", title="Work", created_at="2024-01-04T00:00:00Z"),
        ], service=self.service)

    def teardown_method(self):
        self.service.close()

    def test_duplicate_ids_rejected_on_load(self):
        with pytest.raises(NoteExistsError):
            NoteCollection([Note(id="a"), Note(id="a")], service=self.service)

    def test_lookup(self):
        assert len(self.collection) == 4
        assert "home" in self.collection
        assert "nope" not in self.collection
        assert self.collection.get("work").title == "Work"
        with pytest.raises(NoteNotFoundError):
            self.collection.get("nope")

    def test_parent_notes_and_family(self):
        assert [n.id for n in self.collection.get_parent_notes()] == ["home", "work"]

        parent, children = self.collection.get_note_family("home")
        assert parent.id == "home"
        assert [c.id for c in children] == ["garden", "kitchen"]

    def test_family_of_sub_note_fails(self):
        with pytest.raises(NoteNotFoundError):
            self.collection.get_note_family("kitchen")

    def test_create_sub_note(self):
        note = self.collection.create_sub_note("kitchen", {"title": "Recipes"})

        assert note.parent_id == "kitchen"
        assert note.title == "Recipes"
        assert note.id
        assert note.created_at.endswith("Z")
        assert self.collection.get_sub_note_count("kitchen") == 1

    def test_create_sub_note_refreshes_cached_counts(self):
        assert self.collection.get_sub_note_count("home") == 2
        self.collection.create_sub_note("home", {"id": "attic"})
        assert self.collection.get_sub_note_count("home") == 3

    def test_create_sub_note_too_deep(self):
        self.collection.create_sub_note("kitchen", {"id": "recipes"})

        with pytest.raises(HierarchyViolationError) as exc_info:
            self.collection.create_sub_note("recipes", {"title": "Soup"})

        assert "Maximum depth exceeded" in exc_info.value.message
        assert exc_info.value.operation == "create_sub_note"
        assert exc_info.value.errors
        assert len(self.collection) == 5

    def test_create_under_missing_parent(self):
        with pytest.raises(HierarchyViolationError) as exc_info:
            self.collection.create_sub_note("ghost", {})
        assert not exc_info.value.result.parent_found

    def test_add_note(self):
        self.collection.add_note(Note(id="loose"))
        with pytest.raises(NoteExistsError):
            self.collection.add_note(Note(id="loose"))

    def test_convert_to_sub_note(self):
        self.collection.convert_to_sub_note("work", "home")

        assert self.collection.get("work").parent_id == "home"
        assert self.collection.get_sub_note_count("home") == 3

    def test_convert_existing_sub_note_fails(self):
        with pytest.raises(HierarchyError) as exc_info:
            self.collection.convert_to_sub_note("kitchen", "work")
        assert "already a sub-note" in exc_info.value.message

    def test_move_note_rejects_cycle(self):
        with pytest.raises(HierarchyViolationError) as exc_info:
            self.collection.move_note("home", "kitchen")

        assert exc_info.value.result.would_create_cycle
        assert self.collection.get("home").parent_id is None

    def test_move_note_updates_depths_below(self):
        self.collection.create_sub_note("garden", {"id": "roses"})
        assert self.service.depth("roses", self.collection.snapshot()) == 2

        self.collection.move_note("garden", None)

        assert self.service.depth("garden", self.collection.snapshot()) == 0
        assert self.service.depth("roses", self.collection.snapshot()) == 1
        assert self.collection.get_sub_note_count("home") == 1

    def test_move_to_same_parent_is_noop(self):
        note = self.collection.move_note("kitchen", "home")
        assert note.parent_id == "home"

    def test_update_note_with_new_parent(self):
        updated = Note(id="kitchen", title="Kitchen (renovated)", parent_id="work")
        self.collection.update_note(updated)

        assert self.collection.get("kitchen").title == "Kitchen (renovated)"
        assert self.collection.get_sub_note_count("work") == 1
        assert self.collection.get_sub_note_count("home") == 1

    def test_delete_note_cascades(self):
        self.collection.create_sub_note("kitchen", {"id": "recipes"})
        self.service.depth("recipes", self.collection.snapshot())

        removed = self.collection.delete_note("kitchen")

        assert set(removed) == {"kitchen", "recipes"}
        assert "recipes" not in self.collection
        assert not self.service.cache.contains(CacheKind.DEPTH, "recipes")
        assert self.collection.get_sub_note_count("home") == 1

    def test_snapshot_is_a_copy(self):
        snapshot = self.collection.snapshot()
        snapshot.clear()
        assert len(self.collection) == 4


class TestStoredNotesAreIsolated:
    """Edits to returned notes only take effect through validated mutations."""

    def setup_method(self):
        self.service = HierarchyService(start_cleanup=False)
        self.collection = NoteCollection([
            Note(id="A", title="Projects"),
            Note(id="B", title="Garden", parent_id="A"),
            Note(id="C", title="Seeds", parent_id="B"),
        ], service=self.service)

    def teardown_method(self):
        self.service.close()

    def test_get_returns_a_copy(self):
        note = self.collection.get("B")
        note.parent_id = None
        note.tags.append("outdoor")

        stored = self.collection.get("B")
        assert stored.parent_id == "A"
        assert stored.tags == []

    def test_update_note_rejects_in_place_cycle(self):
        """Editing a fetched note into a loop is refused by update_note."""
        note = self.collection.get("A")
        note.parent_id = "C"

        with pytest.raises(HierarchyViolationError) as exc_info:
            self.collection.update_note(note)

        assert exc_info.value.result.would_create_cycle
        assert self.collection.get("A").parent_id is None
        assert self.service.find_circular_references(self.collection.snapshot()) == []

    def test_update_note_in_place_reparent_refreshes_depths(self):
        assert self.service.depth("C", self.collection.snapshot()) == 2

        note = self.collection.get("B")
        note.parent_id = None
        self.collection.update_note(note)

        notes = self.collection.snapshot()
        assert self.service.depth("B", notes) == 0
        assert self.service.depth("C", notes) == 1
        assert self.collection.get_sub_note_count("A") == 0

    def test_update_note_in_place_checks_depth(self):
        service = HierarchyService(HierarchyConfig(max_depth=3), start_cleanup=False)
        collection = NoteCollection(self.collection.snapshot() + [Note(id="D")], service=service)

        note = collection.get("D")
        note.parent_id = "C"
        with pytest.raises(HierarchyViolationError):
            collection.update_note(note)
        assert collection.get("D").parent_id is None
        service.close()

    def test_added_note_is_not_shared_with_caller(self):
        note = Note(id="D", parent_id="A")
        self.collection.add_note(note)
        note.parent_id = "C"

        assert self.collection.get("D").parent_id == "A"

    def test_add_note_closing_loop_with_orphan_is_rejected(self):
        """An orphan already pointing at the new id would form a cycle."""
        collection = NoteCollection([Note(id="Y", parent_id="X")], service=self.service)

        with pytest.raises(HierarchyViolationError) as exc_info:
            collection.add_note(Note(id="X", parent_id="Y"))

        assert exc_info.value.result.would_create_cycle
        assert "X" not in collection

    def test_create_sub_note_closing_loop_with_orphan_is_rejected(self):
        collection = NoteCollection([Note(id="Y", parent_id="X")], service=self.service)

        with pytest.raises(HierarchyViolationError):
            collection.create_sub_note("Y", {"id": "X"})
        assert len(collection) == 1
