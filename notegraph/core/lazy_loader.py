#!/usr/bin/env python3
"""Page-at-a-time access to a note's children for incremental rendering."""

from typing import Optional, Sequence

from notegraph.core.hierarchy_cache import HierarchyCache
from notegraph.tree.tree_types import ChildrenPage, NoteProtocol


def page_children(cache: HierarchyCache, note_id: str, notes: Sequence[NoteProtocol],
                  page_index: int = 0, page_size: Optional[int] = None) -> ChildrenPage:
    """
    Slice the cached children list of ``note_id``.

    Args:
        cache: Cache holding the full children list
        note_id: Parent whose children are paged
        notes: Current snapshot
        page_index: Zero-based page number
        page_size: Items per page, defaults to the cache config

    Returns:
        ChildrenPage with the slice, ``has_more`` and ``total_count``
    """
    if page_size is None:
        page_size = cache.config.page_size
    if page_index < 0:
        raise ValueError(f"page_index must be non-negative, got {page_index}")
    if page_size < 1:
        raise ValueError(f"page_size must be positive, got {page_size}")

    all_children = cache.get_direct_children(note_id, notes)
    start = page_index * page_size
    end = start + page_size

    return ChildrenPage(
        children=tuple(all_children[start:end]),
        has_more=end < len(all_children),
        total_count=len(all_children),
        page_index=page_index,
        page_size=page_size,
    )


def iter_children_pages(cache: HierarchyCache, note_id: str, notes: Sequence[NoteProtocol],
                        page_size: Optional[int] = None):
    """Yield successive pages until the children list is exhausted."""
    page_index = 0
    while True:
        page = page_children(cache, note_id, notes, page_index, page_size)
        yield page
        if not page.has_more:
            return
        page_index += 1
