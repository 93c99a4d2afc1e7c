#!/usr/bin/env python3
"""Tests for paging through a note's children."""

import pytest

from notegraph.core.hierarchy_cache import HierarchyCache
from notegraph.core.lazy_loader import iter_children_pages, page_children
from notegraph.core.models import Note
from notegraph.tree.tree_types import HierarchyConfig


class TestPageChildren:
    """Test single page slicing."""

    def setup_method(self):
        self.notes = [Note(id="P")] + [Note(id=f"c{i:03}", parent_id="P") for i in range(120)]
        self.cache = HierarchyCache(start_cleanup=False)

    def teardown_method(self):
        self.cache.close()

    def test_first_page(self):
        page = page_children(self.cache, "P", self.notes)

        assert len(page.children) == 50
        assert page.children[0].id == "c000"
        assert page.has_more
        assert page.total_count == 120
        assert page.page_index == 0
        assert page.page_size == 50

    def test_last_page_is_partial(self):
        page = page_children(self.cache, "P", self.notes, page_index=2)

        assert [c.id for c in page.children][:2] == ["c100", "c101"]
        assert len(page.children) == 20
        assert not page.has_more

    def test_page_past_the_end_is_empty(self):
        page = page_children(self.cache, "P", self.notes, page_index=5)

        assert page.children == ()
        assert not page.has_more
        assert page.total_count == 120

    def test_exact_multiple_has_no_more(self):
        page = page_children(self.cache, "P", self.notes, page_index=3, page_size=40)
        assert page.children == ()
        assert not page_children(self.cache, "P", self.notes, 2, 40).has_more

    def test_page_size_from_config(self):
        cache = HierarchyCache(HierarchyConfig(page_size=7), start_cleanup=False)
        assert len(page_children(cache, "P", self.notes).children) == 7
        cache.close()

    def test_leaf_has_empty_page(self):
        page = page_children(self.cache, "c000", self.notes)
        assert page.total_count == 0
        assert not page.has_more

    @pytest.mark.parametrize("page_index,page_size", [(-1, 10), (0, 0), (0, -5)])
    def test_invalid_arguments(self, page_index, page_size):
        with pytest.raises(ValueError):
            page_children(self.cache, "P", self.notes, page_index, page_size)

    def test_pages_share_one_cached_list(self):
        page_children(self.cache, "P", self.notes, 0)
        page_children(self.cache, "P", self.notes, 1)
        page_children(self.cache, "P", self.notes, 2)

        metrics = self.cache.get_metrics()
        assert metrics.misses == 1
        assert metrics.hits == 2


class TestIterChildrenPages:
    """Test iterating over all pages."""

    def test_iterates_every_child_once(self):
        notes = [Note(id="P")] + [Note(id=f"c{i}", parent_id="P") for i in range(23)]
        cache = HierarchyCache(start_cleanup=False)

        pages = list(iter_children_pages(cache, "P", notes, page_size=10))

        assert [len(p.children) for p in pages] == [10, 10, 3]
        ids = [c.id for p in pages for c in p.children]
        assert ids == [f"c{i}" for i in range(23)]
        cache.close()

    def test_no_children_yields_one_empty_page(self):
        cache = HierarchyCache(start_cleanup=False)
        pages = list(iter_children_pages(cache, "P", [Note(id="P")]))

        assert len(pages) == 1
        assert pages[0].children == ()
        cache.close()
