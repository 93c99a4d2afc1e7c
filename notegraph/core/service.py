#!/usr/bin/env python3
"""
Hierarchy service: the one object calling flows talk to.

It owns a single HierarchyCache and the active HierarchyConfig. Construct
one per process (or per test) and ``close()`` it on shutdown.
"""

import time
from typing import Any, Callable, List, Optional, Sequence, Tuple

from notegraph.core.advisor import get_performance_recommendations
from notegraph.core.hierarchy_cache import HierarchyCache
from notegraph.core.lazy_loader import page_children
from notegraph.core.logging_config import get_logger
from notegraph.core.performance import performance_timer
from notegraph.tree.tree_operations import find_circular_references, get_note_path
from notegraph.tree.tree_types import (
    CacheMetrics, ChildrenPage, CircularReference, HierarchyConfig, HierarchyHealth,
    HierarchyStats, NoteProtocol, PerformanceRecommendations, ValidationResult
)
from notegraph.tree.tree_validator import HierarchyValidator


class HierarchyService:
    """Cached hierarchy queries, validation and invalidation over note snapshots."""

    def __init__(self, config: Optional[HierarchyConfig] = None,
                 cache: Optional[HierarchyCache] = None,
                 clock: Callable[[], float] = time.time,
                 start_cleanup: bool = True):
        self.config = config or (cache.config if cache else HierarchyConfig())
        self.cache = cache or HierarchyCache(self.config, clock=clock, start_cleanup=start_cleanup)
        self.validator = HierarchyValidator(self.config)
        self.logger = get_logger(__name__)

    def __enter__(self) -> 'HierarchyService':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Cached queries

    def depth(self, note_id: str, notes: Sequence[NoteProtocol]) -> int:
        return self.cache.get_note_depth(note_id, notes)

    def direct_children(self, note_id: str, notes: Sequence[NoteProtocol]) -> Tuple[Any, ...]:
        return self.cache.get_direct_children(note_id, notes)

    def all_descendants(self, note_id: str, notes: Sequence[NoteProtocol]) -> Tuple[Any, ...]:
        return self.cache.get_all_descendants(note_id, notes)

    def get_hierarchy_stats(self, note_id: str, notes: Sequence[NoteProtocol]) -> HierarchyStats:
        return self.cache.get_hierarchy_stats(note_id, notes)

    def get_note_path(self, note_id: str, notes: Sequence[NoteProtocol]) -> List[Any]:
        return get_note_path(note_id, notes)

    # Validation

    def can_attach(self, candidate_parent_id: str, notes: Sequence[NoteProtocol],
                   moving_note_id: Optional[str] = None) -> ValidationResult:
        """Validate a create (no ``moving_note_id``) or a move, using cached lookups."""
        return self.validator.can_attach(
            candidate_parent_id, notes, moving_note_id,
            depth_of=self.cache.get_note_depth,
            children_of=self.cache.get_direct_children,
        )

    def can_make_sub_note(self, note_id: str, parent_id: str,
                          notes: Sequence[NoteProtocol]) -> bool:
        return self.validator.can_make_sub_note(note_id, parent_id, notes)

    @performance_timer("hierarchy.health")
    def validate_hierarchy_health(self, notes: Sequence[NoteProtocol]) -> HierarchyHealth:
        return self.validator.validate_hierarchy_health(notes)

    def find_circular_references(self, notes: Sequence[NoteProtocol]) -> List[CircularReference]:
        return find_circular_references(notes)

    # Invalidation

    def invalidate(self, note_id: str, notes: Sequence[NoteProtocol],
                   previous_parent_id: Optional[str] = None) -> int:
        """Must be called after any create, update or delete touching ``parent_id``."""
        return self.cache.invalidate(note_id, notes, previous_parent_id)

    def invalidate_reparented(self, note_id: str, notes: Sequence[NoteProtocol],
                              previous_parent_id: Optional[str] = None) -> int:
        """Invalidate after a move: both ancestor chains plus every descendant's depth."""
        removed = self.cache.invalidate(note_id, notes, previous_parent_id)
        removed += self.cache.invalidate_subtree_depths(note_id, notes)
        return removed

    # Advisory helpers

    def get_performance_recommendations(self, note_id: str,
                                        notes: Sequence[NoteProtocol]) -> PerformanceRecommendations:
        return get_performance_recommendations(self.get_hierarchy_stats(note_id, notes), self.config)

    def page(self, note_id: str, notes: Sequence[NoteProtocol], page_index: int = 0,
             page_size: Optional[int] = None) -> ChildrenPage:
        return page_children(self.cache, note_id, notes, page_index, page_size)

    # Configuration and lifecycle

    def get_metrics(self) -> CacheMetrics:
        return self.cache.get_metrics()

    def get_config(self) -> HierarchyConfig:
        return self.config.replace()

    def update_config(self, **changes: Any) -> HierarchyConfig:
        """Apply config changes; cached values computed under the old limits are dropped."""
        new_config = self.config.replace(**changes)
        self.config = new_config
        self.validator.config = new_config
        self.cache.update_config(new_config)
        self.cache.clear()
        self.logger.info(f"Hierarchy configuration updated: {changes}")
        return new_config

    def clear_cache(self) -> None:
        self.cache.clear()

    def close(self) -> None:
        self.cache.close()
