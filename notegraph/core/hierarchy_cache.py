#!/usr/bin/env python3
"""Memoization of derived hierarchy metrics with TTL, size cap and invalidation."""

import threading
import time
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from notegraph.core.logging_config import get_logger
from notegraph.core.performance import PerformanceMonitor, get_performance_monitor
from notegraph.tree.tree_constants import EMA_DECAY, ESTIMATED_BYTES_PER_ENTRY
from notegraph.tree.tree_operations import (
    compute_hierarchy_stats, get_all_descendants, get_direct_children,
    get_note_depth, index_notes
)
from notegraph.tree.tree_types import (
    ANCESTOR_KINDS, CacheEntry, CacheKind, CacheMetrics, HierarchyConfig,
    HierarchyStats, NoteProtocol
)


class HierarchyCache:
    """
    Per-kind cache of accessor results keyed by note id.

    Entries expire ``ttl_seconds`` after they were computed. Each kind is
    capped at ``max_cache_entries_per_kind``; over the cap, entries with the
    oldest computation time go first. That approximates LRU by computation
    time, not by access time.

    Mutation flows must call ``invalidate`` after every create, move or
    delete; the cache cannot see changes to the snapshot on its own.
    """

    def __init__(self, config: Optional[HierarchyConfig] = None,
                 clock: Callable[[], float] = time.time,
                 start_cleanup: bool = True,
                 monitor: Optional[PerformanceMonitor] = None):
        self.config = config or HierarchyConfig()
        self._clock = clock
        self._entries: Dict[CacheKind, Dict[str, CacheEntry]] = {kind: {} for kind in CacheKind}
        self._lock = threading.RLock()
        self._metrics = CacheMetrics(last_cleanup=clock())
        self._cleanup_timer: Optional[threading.Timer] = None
        self._cleanup_active = False
        self.monitor = monitor or get_performance_monitor()
        self.logger = get_logger(__name__)

        if start_cleanup:
            self.start_background_cleanup()

    def __enter__(self) -> 'HierarchyCache':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # Lookups

    def get(self, kind: CacheKind, note_id: str, notes: Sequence[NoteProtocol]) -> Any:
        """Return the cached value for (kind, note_id), computing it on a miss."""
        if not note_id:
            raise ValueError("note_id is required")

        with self._lock:
            bucket = self._entries[kind]
            now = self._clock()
            entry = bucket.get(note_id)

            if entry is not None and self._is_fresh(entry, now):
                self._record_access(hit=True)
                return entry.value

            started = time.perf_counter()
            with self.monitor.measure(f"hierarchy.{kind.value}", note_id=note_id):
                value = self._compute(kind, note_id, notes)
            elapsed_ms = (time.perf_counter() - started) * 1000

            bucket[note_id] = CacheEntry(value=value, computed_at=now)
            self._record_access(hit=False, calculation_ms=elapsed_ms)

            if len(bucket) > self.config.max_cache_entries_per_kind:
                self._trim(kind)

            return value

    def get_note_depth(self, note_id: str, notes: Sequence[NoteProtocol]) -> int:
        return self.get(CacheKind.DEPTH, note_id, notes)

    def get_direct_children(self, note_id: str, notes: Sequence[NoteProtocol]) -> Tuple[Any, ...]:
        return self.get(CacheKind.CHILDREN, note_id, notes)

    def get_all_descendants(self, note_id: str, notes: Sequence[NoteProtocol]) -> Tuple[Any, ...]:
        return self.get(CacheKind.DESCENDANTS, note_id, notes)

    def get_hierarchy_stats(self, note_id: str, notes: Sequence[NoteProtocol]) -> HierarchyStats:
        return self.get(CacheKind.STATS, note_id, notes)

    def contains(self, kind: CacheKind, note_id: str) -> bool:
        """True if a fresh entry exists, without touching metrics."""
        with self._lock:
            entry = self._entries[kind].get(note_id)
            return entry is not None and self._is_fresh(entry, self._clock())

    def entry_count(self, kind: Optional[CacheKind] = None) -> int:
        with self._lock:
            if kind is not None:
                return len(self._entries[kind])
            return sum(len(bucket) for bucket in self._entries.values())

    def _compute(self, kind: CacheKind, note_id: str, notes: Sequence[NoteProtocol]) -> Any:
        # Lists are frozen into tuples so callers can't edit cached values
        if kind is CacheKind.DEPTH:
            return get_note_depth(note_id, notes)
        if kind is CacheKind.CHILDREN:
            return tuple(get_direct_children(note_id, notes))
        if kind is CacheKind.DESCENDANTS:
            return tuple(get_all_descendants(note_id, notes))
        return compute_hierarchy_stats(note_id, notes, self.config)

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.computed_at < self.config.ttl_seconds

    # Invalidation

    def invalidate(self, note_id: str, notes: Sequence[NoteProtocol],
                   previous_parent_id: Optional[str] = None) -> int:
        """
        Drop everything cached for ``note_id`` and the derived entries of
        each ancestor up to the root.

        ``previous_parent_id`` names the old parent after a move or delete,
        so the chain the note left is cleared as well. Returns the number of
        entries removed.
        """
        with self._lock:
            removed = self._drop(note_id, CacheKind)

            by_id = index_notes(notes)
            note = by_id.get(note_id)
            start_ids = [note.parent_id if note is not None else None, previous_parent_id]

            visited = set()
            for parent_id in start_ids:
                while parent_id is not None and parent_id not in visited:
                    visited.add(parent_id)
                    removed += self._drop(parent_id, ANCESTOR_KINDS)
                    parent = by_id.get(parent_id)
                    parent_id = parent.parent_id if parent is not None else None

        self.logger.debug(f"Cache invalidated for note {note_id} and {len(visited)} "
                          f"ancestor(s), {removed} entries removed")
        return removed

    def invalidate_subtree_depths(self, note_id: str, notes: Sequence[NoteProtocol]) -> int:
        """Drop depth-dependent entries for every descendant of ``note_id``."""
        with self._lock:
            removed = 0
            for descendant in get_all_descendants(note_id, notes):
                removed += self._drop(descendant.id, (CacheKind.DEPTH, CacheKind.STATS))
        if removed:
            self.logger.debug(f"Dropped {removed} depth entries below {note_id}")
        return removed

    def discard(self, note_ids: Iterable[str]) -> int:
        """Drop every kind for the given ids (e.g. notes that were deleted)."""
        with self._lock:
            return sum(self._drop(note_id, CacheKind) for note_id in note_ids)

    def clear(self) -> None:
        with self._lock:
            for bucket in self._entries.values():
                bucket.clear()
        self.logger.debug("Hierarchy cache cleared")

    def _drop(self, note_id: str, kinds: Iterable[CacheKind]) -> int:
        removed = 0
        for kind in kinds:
            if self._entries[kind].pop(note_id, None) is not None:
                removed += 1
        return removed

    # Eviction

    def cleanup_expired(self) -> int:
        """Remove expired entries, then trim each kind to its cap."""
        with self._lock:
            now = self._clock()
            removed = 0

            for bucket in self._entries.values():
                expired = [key for key, entry in bucket.items() if not self._is_fresh(entry, now)]
                for key in expired:
                    del bucket[key]
                removed += len(expired)

            for kind in CacheKind:
                removed += self._trim(kind)

            self._metrics.last_cleanup = now

        if removed:
            self.logger.debug(f"Cleaned up {removed} expired cache entries")
        return removed

    def _trim(self, kind: CacheKind) -> int:
        bucket = self._entries[kind]
        excess = len(bucket) - self.config.max_cache_entries_per_kind
        if excess <= 0:
            return 0
        oldest = sorted(bucket.items(), key=lambda item: item[1].computed_at)[:excess]
        for key, _ in oldest:
            del bucket[key]
        return excess

    def start_background_cleanup(self) -> None:
        """(Re)arm the periodic sweep on a daemon timer thread."""
        with self._lock:
            self._cancel_timer()
            self._cleanup_active = True
            self._schedule_cleanup()

    def stop_background_cleanup(self) -> None:
        with self._lock:
            self._cleanup_active = False
            self._cancel_timer()

    @property
    def background_cleanup_running(self) -> bool:
        return self._cleanup_active and self._cleanup_timer is not None

    def _schedule_cleanup(self) -> None:
        timer = threading.Timer(self.config.cleanup_interval_seconds, self._run_cleanup)
        timer.daemon = True
        self._cleanup_timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        if self._cleanup_timer is not None:
            self._cleanup_timer.cancel()
            self._cleanup_timer = None

    def _run_cleanup(self) -> None:
        try:
            self.cleanup_expired()
        except Exception:
            self.logger.exception("Background cache cleanup failed")
        finally:
            with self._lock:
                if self._cleanup_active:
                    self._schedule_cleanup()

    # Configuration and diagnostics

    def update_config(self, config: HierarchyConfig) -> None:
        """Swap in a new config; the sweep is re-armed if the interval changed."""
        with self._lock:
            interval_changed = (config.cleanup_interval_seconds
                                != self.config.cleanup_interval_seconds)
            self.config = config
            for kind in CacheKind:
                self._trim(kind)
            if interval_changed and self._cleanup_active:
                self.start_background_cleanup()
        self.logger.debug(f"Hierarchy cache configuration updated: {config}")

    def _record_access(self, hit: bool, calculation_ms: float = 0.0) -> None:
        metrics = self._metrics
        metrics.cache_hit_rate = metrics.cache_hit_rate * EMA_DECAY + (1.0 if hit else 0.0) * (1 - EMA_DECAY)
        if hit:
            metrics.hits += 1
        else:
            metrics.misses += 1
            metrics.average_calculation_time = (
                metrics.average_calculation_time * EMA_DECAY + calculation_ms * (1 - EMA_DECAY))

    def get_metrics(self) -> CacheMetrics:
        """Copy of the current metrics; diagnostic only."""
        with self._lock:
            counts = {kind.value: len(bucket) for kind, bucket in self._entries.items()}
            m = self._metrics
            return CacheMetrics(
                cache_hit_rate=m.cache_hit_rate,
                average_calculation_time=m.average_calculation_time,
                memory_usage=sum(counts.values()) * ESTIMATED_BYTES_PER_ENTRY,
                last_cleanup=m.last_cleanup,
                hits=m.hits,
                misses=m.misses,
                entry_counts=counts,
            )

    def close(self) -> None:
        """Stop the sweep and release all entries."""
        self.stop_background_cleanup()
        self.clear()
