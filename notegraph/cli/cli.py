#!/usr/bin/env python3
"""Command-line inspection of a note snapshot's hierarchy."""

import argparse
import sys
from typing import List, Optional, Sequence

from notegraph.core.loader import load_notes
from notegraph.core.logging_config import get_logger, setup_logging
from notegraph.core.models import Note
from notegraph.core.performance import enable_performance_monitoring, get_performance_monitor
from notegraph.core.service import HierarchyService
from notegraph.tree.tree_exceptions import HierarchyError
from notegraph.tree.tree_operations import get_direct_children
from notegraph.tree.tree_types import HierarchyConfig


def show_health(service: HierarchyService, notes: Sequence[Note]) -> bool:
    """Print the hierarchy health report. Returns True when healthy."""
    health = service.validate_hierarchy_health(notes)

    print("Hierarchy is healthy" if health.is_healthy else "Hierarchy has problems")
    for issue in health.issues:
        print(f"  error: {issue}")
    for warning in health.warnings:
        print(f"  warning: {warning}")

    print()
    stats = health.stats
    print(f"Total notes:          {stats['total_notes']}")
    print(f"Root notes:           {stats['root_notes']}")
    print(f"Maximum depth:        {stats['max_depth']}")
    print(f"Average depth:        {stats['avg_depth']}")
    if stats['circular_references']:
        print(f"Circular references:  {stats['circular_references']}")
    if stats['orphaned_notes']:
        print(f"Orphaned notes:       {stats['orphaned_notes']}")

    return health.is_healthy


def show_stats(service: HierarchyService, notes: Sequence[Note], note_id: str) -> bool:
    """Print subtree stats and recommendations for one note."""
    if not any(note.id == note_id for note in notes):
        print(f"Error: Note {note_id} not found")
        return False

    stats = service.get_hierarchy_stats(note_id, notes)
    recommendations = service.get_performance_recommendations(note_id, notes)

    print(f"Note:               {note_id}")
    print(f"Depth:              {stats.depth}")
    print(f"Direct children:    {stats.direct_child_count}")
    print(f"Total descendants:  {stats.total_descendants}")
    print(f"Max subtree depth:  {stats.max_subtree_depth}")
    print(f"Performance:        {stats.performance_tier.value}")
    print(f"Depth limit:        {recommendations.recommended_depth_limit}")
    print(f"Lazy loading:       {'yes' if recommendations.should_use_lazy_loading else 'no'}")
    for suggestion in recommendations.optimization_suggestions:
        print(f"  - {suggestion}")

    return True


def check_attach(service: HierarchyService, notes: Sequence[Note], parent_id: str,
                 moving_note_id: Optional[str] = None) -> bool:
    """Print whether a note may be created or moved under ``parent_id``."""
    result = service.can_attach(parent_id, notes, moving_note_id)

    print("Allowed" if result.is_valid else "Rejected")
    for error in result.errors:
        print(f"  error: {error}")
    for warning in result.warnings:
        print(f"  warning: {warning}")
    for suggestion in result.suggestions:
        print(f"  suggestion: {suggestion}")
    print(f"Parent depth: {result.current_depth} (max {result.max_depth_allowed}), "
          f"children: {result.children_count}")

    return result.is_valid


def list_children(service: HierarchyService, notes: Sequence[Note], note_id: str,
                  page_index: int = 0, page_size: Optional[int] = None) -> bool:
    """Print one page of a note's direct children."""
    page = service.page(note_id, notes, page_index, page_size)

    start = page.page_index * page.page_size
    print(f"Children of {note_id}: {page.total_count} total, page {page.page_index + 1}")
    for offset, child in enumerate(page.children):
        print(f"  {start + offset + 1:3}. {child.display_title}")
    if page.has_more:
        print(f"  ... more on page {page.page_index + 2}")

    return True


def print_tree(notes: Sequence[Note], root_id: Optional[str] = None,
               max_depth: Optional[int] = None) -> List[str]:
    """Print the forest (or one subtree) indented by depth. Returns the lines."""
    lines: List[str] = []
    roots = [n for n in notes if n.id == root_id] if root_id else [n for n in notes if n.parent_id is None]
    stack = [(note, 0) for note in reversed(roots)]
    seen = set()

    while stack:
        note, depth = stack.pop()
        if note.id in seen:
            continue
        seen.add(note.id)
        lines.append(f"{'  ' * depth}{note.display_title}")
        if max_depth is not None and depth >= max_depth:
            continue
        for child in reversed(get_direct_children(note.id, notes)):
            stack.append((child, depth + 1))

    for line in lines:
        print(line)
    return lines


def build_config(args: argparse.Namespace) -> HierarchyConfig:
    """Map command-line overrides onto the default configuration."""
    overrides = {}
    if args.max_depth is not None:
        overrides['max_depth'] = args.max_depth
    if args.warning_depth is not None:
        overrides['warning_depth'] = args.warning_depth
    if args.max_children is not None:
        overrides['max_children_per_node'] = args.max_children
    if args.page_size is not None:
        overrides['page_size'] = args.page_size
    return HierarchyConfig.from_dict(overrides)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="notegraph",
        description="Inspect and validate the sub-note hierarchy of a journal export",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--profile", action="store_true", help="Report computation timings")
    parser.add_argument("--max-depth", type=int, help="Maximum hierarchy depth")
    parser.add_argument("--warning-depth", type=int, help="Depth at which to warn")
    parser.add_argument("--max-children", type=int, help="Maximum sub-notes per note")
    parser.add_argument("--page-size", type=int, help="Children per page")
    parser.add_argument("notes_file", help="Path to notes JSON export")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("health", help="Check the whole hierarchy")

    stats_parser = subparsers.add_parser("stats", help="Show subtree statistics")
    stats_parser.add_argument("note_id", help="Note to inspect")

    check_parser = subparsers.add_parser("check", help="Check whether a note can go under a parent")
    check_parser.add_argument("parent_id", help="Candidate parent note")
    check_parser.add_argument("--moving", help="Existing note to move (omit for a new note)")

    children_parser = subparsers.add_parser("children", help="List a page of sub-notes")
    children_parser.add_argument("note_id", help="Parent note")
    children_parser.add_argument("-p", "--page", type=int, default=1, help="Page number (1-based)")

    tree_parser = subparsers.add_parser("tree", help="Print the note tree")
    tree_parser.add_argument("--root", help="Only print this note's subtree")
    tree_parser.add_argument("--depth", type=int, help="Stop below this depth")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level="WARNING", debug_mode=args.debug)
    logger = get_logger(__name__)
    if args.profile:
        enable_performance_monitoring(True)

    try:
        config = build_config(args)
        notes = load_notes(args.notes_file)
    except HierarchyError as e:
        print(f"Error: {e.message}")
        logger.debug(str(e))
        return 1

    with HierarchyService(config, start_cleanup=False) as service:
        if args.command == "stats":
            ok = show_stats(service, notes, args.note_id)
        elif args.command == "check":
            ok = check_attach(service, notes, args.parent_id, args.moving)
        elif args.command == "children":
            if args.page < 1:
                print("Error: page must be 1 or greater")
                return 1
            ok = list_children(service, notes, args.note_id, args.page - 1)
        elif args.command == "tree":
            print_tree(notes, args.root, args.depth)
            ok = True
        else:
            ok = show_health(service, notes)

    if args.profile:
        for name, stat in get_performance_monitor().get_stats().items():
            if isinstance(stat, dict):
                print(f"{name}: {stat['count']} calls, avg {stat['avg_time'] * 1000:.3f}ms",
                      file=sys.stderr)

    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
