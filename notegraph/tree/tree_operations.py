#!/usr/bin/env python3
"""
Read-only traversal over a flat note snapshot.

The hierarchy is never stored as live pointers: every function here
re-derives parent/child relations from the ``parent_id`` fields of the
snapshot it is given. All functions are pure and terminate on corrupt data
(existing cycles, dangling parent ids).
"""

from collections import deque
from typing import Dict, List, Optional, Sequence, Set, TypeVar

from notegraph.core.advisor import classify_performance
from notegraph.core.logging_config import get_logger
from notegraph.tree.tree_types import (
    CircularReference, HierarchyConfig, HierarchyStats, NoteProtocol
)

logger = get_logger(__name__)

N = TypeVar("N", bound=NoteProtocol)


def index_notes(notes: Sequence[N]) -> Dict[str, N]:
    """Map id -> note. On duplicate ids the first occurrence wins."""
    by_id: Dict[str, N] = {}
    for note in notes:
        by_id.setdefault(note.id, note)
    return by_id


def index_children(notes: Sequence[N]) -> Dict[str, List[N]]:
    """Map parent id -> children in snapshot order."""
    by_parent: Dict[str, List[N]] = {}
    for note in notes:
        if note.parent_id is not None:
            by_parent.setdefault(note.parent_id, []).append(note)
    return by_parent


def depth_from_index(note: NoteProtocol, by_id: Dict[str, NoteProtocol], bound: int) -> int:
    """Depth of ``note`` using a prebuilt id index, capped at ``bound`` hops."""
    depth = 0
    current = note
    while current.parent_id is not None:
        depth += 1
        if depth > bound:
            logger.warning(f"Parent chain of note {note.id} exceeds {bound} hops; "
                           f"snapshot contains a cycle")
            return bound
        parent = by_id.get(current.parent_id)
        if parent is None:
            # Dangling parent id: the hop still counts
            break
        current = parent
    return depth


def get_note_depth(note_id: str, notes: Sequence[NoteProtocol]) -> int:
    """Number of parent hops from ``note_id`` to a root (0 for roots and unknown ids)."""
    by_id = index_notes(notes)
    note = by_id.get(note_id)
    if note is None:
        return 0
    return depth_from_index(note, by_id, len(notes))


def get_direct_children(note_id: str, notes: Sequence[N]) -> List[N]:
    """Notes whose parent is ``note_id``, in snapshot order."""
    return [note for note in notes if note.parent_id == note_id]


def get_all_descendants(note_id: str, notes: Sequence[N]) -> List[N]:
    """
    Every note transitively below ``note_id``, breadth-first.

    The start note is never included and no note appears twice, even when
    the snapshot already contains a cycle.
    """
    by_parent = index_children(notes)
    descendants: List[N] = []
    visited: Set[str] = {note_id}
    queue = deque([note_id])

    while queue:
        current = queue.popleft()
        for child in by_parent.get(current, ()):
            if child.id in visited:
                logger.debug(f"Skipping already visited note {child.id} under {current}")
                continue
            visited.add(child.id)
            descendants.append(child)
            queue.append(child.id)

    return descendants


def get_note_path(note_id: str, notes: Sequence[N]) -> List[N]:
    """Notes from the root down to ``note_id`` (inclusive). Empty if unknown."""
    by_id = index_notes(notes)
    path: List[N] = []
    seen: Set[str] = set()
    current: Optional[N] = by_id.get(note_id)

    while current is not None and current.id not in seen:
        seen.add(current.id)
        path.append(current)
        current = by_id.get(current.parent_id) if current.parent_id is not None else None

    path.reverse()
    return path


def get_max_subtree_depth(note_id: str, notes: Sequence[NoteProtocol]) -> int:
    """Length in edges of the longest downward path from ``note_id``."""
    by_parent = index_children(notes)
    visited: Set[str] = {note_id}
    frontier = [note_id]
    depth = 0

    while True:
        next_level = []
        for parent_id in frontier:
            for child in by_parent.get(parent_id, ()):
                if child.id not in visited:
                    visited.add(child.id)
                    next_level.append(child.id)
        if not next_level:
            return depth
        depth += 1
        frontier = next_level


def has_circular_reference(note_id: str, notes: Sequence[NoteProtocol]) -> bool:
    """True if ``note_id`` sits on a cycle or hangs below one."""
    by_id = index_notes(notes)
    seen: Set[str] = set()
    current = by_id.get(note_id)

    while current is not None:
        if current.id in seen:
            return True
        seen.add(current.id)
        if current.parent_id is None:
            return False
        current = by_id.get(current.parent_id)

    return False


def find_circular_references(notes: Sequence[NoteProtocol]) -> List[CircularReference]:
    """
    Find every cycle in the parent graph.

    Each note has at most one parent, so following parent ids from any note
    either reaches a root, a dangling id, or loops. Every note is walked at
    most once overall, which also catches cycles no root can reach.
    """
    by_id = index_notes(notes)
    done: Set[str] = set()
    cycles: List[CircularReference] = []

    for note in notes:
        walk: List[str] = []
        position: Dict[str, int] = {}
        current: Optional[str] = note.id

        while current is not None and current not in done and current in by_id:
            if current in position:
                cycle = walk[position[current]:]
                cycles.append(CircularReference(
                    path=tuple(cycle + [current]),
                    affected_notes=tuple(cycle),
                ))
                break
            position[current] = len(walk)
            walk.append(current)
            current = by_id[current].parent_id

        done.update(walk)

    if cycles:
        logger.warning(f"Found {len(cycles)} circular reference(s) in {len(notes)} notes")
    return cycles


def compute_hierarchy_stats(note_id: str, notes: Sequence[NoteProtocol],
                            config: Optional[HierarchyConfig] = None) -> HierarchyStats:
    """Build a fresh HierarchyStats snapshot for ``note_id``."""
    config = config or HierarchyConfig()
    by_id = index_notes(notes)
    note = by_id.get(note_id)
    if note is None:
        return HierarchyStats()

    descendants = get_all_descendants(note_id, notes)
    max_subtree_depth = get_max_subtree_depth(note_id, notes)

    return HierarchyStats(
        direct_child_count=len(get_direct_children(note_id, notes)),
        total_descendants=len(descendants),
        max_subtree_depth=max_subtree_depth,
        performance_tier=classify_performance(len(descendants), max_subtree_depth, config),
        depth=depth_from_index(note, by_id, len(notes)),
        has_circular_ref=has_circular_reference(note_id, notes),
        total_size=len(descendants) + 1,
    )
