#!/usr/bin/env python3
"""
Structural validation for note hierarchy mutations.

The validator only reports: hard violations make ``is_valid`` false, soft
findings land in ``warnings``/``suggestions``. Callers persist a change only
when the result is valid.
"""

import logging
from typing import Callable, Optional, Sequence, Set

from notegraph.tree.tree_constants import (
    ERROR_MESSAGES, SUGGESTIONS, UNTITLED_NOTE, WARNING_MESSAGES
)
from notegraph.tree.tree_operations import (
    depth_from_index, find_circular_references, get_all_descendants, get_direct_children,
    get_note_depth, get_note_path, index_children, index_notes
)
from notegraph.tree.tree_types import (
    HierarchyConfig, HierarchyHealth, NoteProtocol, ValidationResult
)

DepthLookup = Callable[[str, Sequence[NoteProtocol]], int]
ChildrenLookup = Callable[[str, Sequence[NoteProtocol]], Sequence[NoteProtocol]]


class HierarchyValidator:
    """Gates note creation and moves on cycle, depth and fan-out limits."""

    def __init__(self, config: Optional[HierarchyConfig] = None):
        self.config = config or HierarchyConfig()
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def can_attach(self, candidate_parent_id: str, notes: Sequence[NoteProtocol],
                   moving_note_id: Optional[str] = None,
                   depth_of: Optional[DepthLookup] = None,
                   children_of: Optional[ChildrenLookup] = None) -> ValidationResult:
        """
        Check whether a note may be placed under ``candidate_parent_id``.

        Args:
            candidate_parent_id: Prospective parent
            notes: Current snapshot
            moving_note_id: Existing note being moved; None for a new note
            depth_of: Depth lookup, defaults to the uncached accessor
            children_of: Children lookup, defaults to the uncached accessor

        Returns:
            ValidationResult with every hard error and soft warning found
        """
        if not candidate_parent_id:
            raise ValueError("candidate_parent_id is required")

        config = self.config
        depth_of = depth_of or get_note_depth
        children_of = children_of or get_direct_children
        result = ValidationResult(max_depth_allowed=config.max_depth)

        by_id = index_notes(notes)
        if candidate_parent_id not in by_id:
            result.parent_found = False
            result.add_error(ERROR_MESSAGES["PARENT_NOT_FOUND"])
            return result

        if moving_note_id is not None and self._reaches(candidate_parent_id, moving_note_id, by_id):
            result.would_create_cycle = True
            result.add_error(ERROR_MESSAGES["CIRCULAR_REFERENCE"].format(
                note_id=moving_note_id, parent_id=candidate_parent_id))

        current_depth = depth_of(candidate_parent_id, notes)
        new_depth = current_depth + 1
        result.current_depth = current_depth
        warning_depth = config.effective_warning_depth

        if new_depth >= config.max_depth:
            result.would_exceed_depth = True
            result.add_error(ERROR_MESSAGES["MAX_DEPTH_EXCEEDED"].format(max_depth=config.max_depth))
        elif new_depth >= warning_depth:
            result.hierarchy_path = [
                note_title(note) for note in get_note_path(candidate_parent_id, notes)
            ]
            result.add_warning(
                WARNING_MESSAGES["DEEP_HIERARCHY"].format(
                    new_depth=new_depth, warning_depth=warning_depth,
                    path=" > ".join(result.hierarchy_path)),
                SUGGESTIONS["DEEP_HIERARCHY"])

        children = children_of(candidate_parent_id, notes)
        children_count = sum(1 for child in children if child.id != moving_note_id)
        result.children_count = children_count

        if children_count >= config.max_children_per_node:
            result.would_exceed_children = True
            result.add_error(ERROR_MESSAGES["MAX_CHILDREN_EXCEEDED"].format(
                max_children=config.max_children_per_node))
        elif children_count >= config.children_warning_count:
            result.add_warning(
                WARNING_MESSAGES["MANY_CHILDREN"].format(
                    children_count=children_count, max_children=config.max_children_per_node),
                SUGGESTIONS["MANY_CHILDREN"])

        self.logger.debug(
            f"Validated attach under {candidate_parent_id} (moving={moving_note_id}): "
            f"valid={result.is_valid}, depth={current_depth}, children={children_count}, "
            f"warnings={len(result.warnings)}")
        return result

    def can_make_sub_note(self, note_id: str, parent_id: str,
                          notes: Sequence[NoteProtocol]) -> bool:
        """Cycle-only check: False if ``parent_id`` is the note itself or below it."""
        if note_id == parent_id:
            return False
        return all(desc.id != parent_id for desc in get_all_descendants(note_id, notes))

    def validate_hierarchy_health(self, notes: Sequence[NoteProtocol]) -> HierarchyHealth:
        """Diagnose the whole snapshot: cycles, orphans, deep and crowded notes."""
        config = self.config
        issues = []
        warnings = []

        cycles = find_circular_references(notes)
        if cycles:
            issues.append(f"{len(cycles)} circular reference(s) detected")

        by_id = index_notes(notes)
        orphans = [n for n in notes if n.parent_id is not None and n.parent_id not in by_id]
        if orphans:
            issues.append(f"{len(orphans)} orphaned note(s) found")

        by_parent = index_children(notes)
        warning_depth = config.effective_warning_depth
        max_depth = 0
        total_depth = 0

        for note in notes:
            depth = depth_from_index(note, by_id, len(notes))
            max_depth = max(max_depth, depth)
            total_depth += depth

            if depth >= warning_depth:
                warnings.append(f'Note "{note_title(note)}" is at depth {depth}')

            children_count = len(by_parent.get(note.id, ()))
            if children_count >= config.children_warning_count:
                warnings.append(f'Note "{note_title(note)}" has {children_count} children')

        avg_depth = total_depth / len(notes) if notes else 0.0

        return HierarchyHealth(
            is_healthy=not issues,
            issues=issues,
            warnings=warnings,
            stats={
                "total_notes": len(notes),
                "root_notes": sum(1 for n in notes if n.parent_id is None),
                "max_depth": max_depth,
                "avg_depth": round(avg_depth, 2),
                "circular_references": len(cycles),
                "orphaned_notes": len(orphans),
            },
        )

    @staticmethod
    def _reaches(start_id: str, target_id: str, by_id) -> bool:
        """True if walking up from ``start_id`` meets ``target_id``."""
        seen: Set[str] = set()
        current: Optional[str] = start_id
        while current is not None and current not in seen:
            if current == target_id:
                return True
            seen.add(current)
            note = by_id.get(current)
            current = note.parent_id if note is not None else None
        return False


def note_title(note: NoteProtocol) -> str:
    """Display title for messages, falling back to the id."""
    title = getattr(note, "title", None)
    return title or note.id or UNTITLED_NOTE


def can_attach(candidate_parent_id: str, notes: Sequence[NoteProtocol],
               moving_note_id: Optional[str] = None,
               config: Optional[HierarchyConfig] = None) -> ValidationResult:
    """Uncached convenience wrapper around HierarchyValidator.can_attach."""
    return HierarchyValidator(config).can_attach(candidate_parent_id, notes, moving_note_id)
