#!/usr/bin/env python3
"""Tests for the hierarchy service facade."""

import pytest

from notegraph.core.models import Note
from notegraph.core.service import HierarchyService
from notegraph.tree.tree_exceptions import HierarchyConfigError
from notegraph.tree.tree_types import CacheKind, HierarchyConfig, PerformanceTier


def reparent(notes, note_id, new_parent_id):
    for note in notes:
        if note.id == note_id:
            note.parent_id = new_parent_id


class TestHierarchyService:
    """Test cached queries and validation through the service."""

    def setup_method(self):
        self.notes = [
            Note(id="A", title="Projects"),
            Note(id="B", title="Garden", parent_id="A"),
            Note(id="C", title="Seeds", parent_id="B"),
            Note(id="X", title="Archive"),
            Note(id="Y", title="2023", parent_id="X"),
        ]
        self.service = HierarchyService(start_cleanup=False)

    def teardown_method(self):
        self.service.close()

    def test_queries(self):
        assert self.service.depth("C", self.notes) == 2
        assert [n.id for n in self.service.direct_children("A", self.notes)] == ["B"]
        assert {n.id for n in self.service.all_descendants("A", self.notes)} == {"B", "C"}
        assert [n.title for n in self.service.get_note_path("C", self.notes)] == \
            ["Projects", "Garden", "Seeds"]
        assert self.service.get_hierarchy_stats("A", self.notes).total_descendants == 2

    def test_can_attach_uses_cache(self):
        result = self.service.can_attach("C", self.notes)

        assert result.is_valid
        assert self.service.cache.contains(CacheKind.DEPTH, "C")
        assert self.service.cache.contains(CacheKind.CHILDREN, "C")

    def test_can_attach_detects_cycle(self):
        result = self.service.can_attach("C", self.notes, moving_note_id="A")
        assert result.would_create_cycle
        assert not self.service.can_make_sub_note("A", "C", self.notes)

    def test_invalidate_after_create(self):
        assert len(self.service.direct_children("B", self.notes)) == 1

        self.notes.append(Note(id="D", parent_id="B"))
        self.service.invalidate("D", self.notes)

        assert len(self.service.direct_children("B", self.notes)) == 2
        assert self.service.get_hierarchy_stats("A", self.notes).total_descendants == 3

    def test_reparent_refreshes_descendant_depths(self):
        """Moving B under Y changes the depth of C, which is below the moved note."""
        assert self.service.depth("C", self.notes) == 2

        reparent(self.notes, "B", "Y")
        self.service.invalidate_reparented("B", self.notes, previous_parent_id="A")

        assert self.service.depth("B", self.notes) == 2
        assert self.service.depth("C", self.notes) == 3
        assert self.service.direct_children("A", self.notes) == ()

    def test_plain_invalidate_leaves_descendant_depths(self):
        self.service.depth("C", self.notes)

        reparent(self.notes, "B", "Y")
        self.service.invalidate("B", self.notes, previous_parent_id="A")

        # Only the moved note and its ancestor chains are refreshed
        assert self.service.depth("B", self.notes) == 2
        assert self.service.depth("C", self.notes) == 2

    def test_health_and_cycles(self):
        health = self.service.validate_hierarchy_health(self.notes)
        assert health.is_healthy
        assert self.service.find_circular_references(self.notes) == []

    def test_recommendations(self):
        notes = [Note(id="R")] + [Note(id=f"k{i}", parent_id="R") for i in range(60)]
        recommendations = self.service.get_performance_recommendations("R", notes)

        assert recommendations.should_use_lazy_loading
        assert recommendations.performance_tier == PerformanceTier.WARNING

    def test_page(self):
        page = self.service.page("A", self.notes)
        assert page.total_count == 1
        assert page.page_size == 50


class TestServiceConfig:
    """Test configuration updates and lifecycle."""

    def setup_method(self):
        self.notes = [Note(id="A"), Note(id="B", parent_id="A"), Note(id="C", parent_id="B")]

    def test_get_config_returns_copy(self):
        service = HierarchyService(start_cleanup=False)
        config = service.get_config()
        config.max_depth = 99

        assert service.get_config().max_depth == 5
        service.close()

    def test_update_config_applies_new_limits_and_clears_cache(self):
        service = HierarchyService(start_cleanup=False)
        assert service.can_attach("C", self.notes).is_valid
        assert service.cache.entry_count() > 0

        service.update_config(max_depth=3)

        assert service.cache.entry_count() == 0
        assert service.cache.config.max_depth == 3
        assert service.can_attach("C", self.notes).would_exceed_depth
        service.close()

    def test_update_config_rejects_invalid_values(self):
        service = HierarchyService(start_cleanup=False)
        with pytest.raises(HierarchyConfigError):
            service.update_config(max_depth=0)
        assert service.get_config().max_depth == 5
        service.close()

    def test_metrics_and_clear(self):
        service = HierarchyService(HierarchyConfig(), start_cleanup=False)
        service.depth("C", self.notes)
        service.depth("C", self.notes)

        assert service.get_metrics().hits == 1
        service.clear_cache()
        assert service.get_metrics().entry_counts["depth"] == 0
        service.close()

    def test_context_manager_closes_cache(self):
        with HierarchyService() as service:
            assert service.cache.background_cleanup_running
        assert not service.cache.background_cleanup_running
