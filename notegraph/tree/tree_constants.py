#!/usr/bin/env python3
"""
Constants and default limits for the note hierarchy.
"""

# Structural limits
DEFAULT_MAX_DEPTH = 5
DEFAULT_MAX_CHILDREN_PER_NODE = 20
CHILDREN_WARNING_RATIO = 0.8  # Fan-out warning at 80% of the limit

# Cache tuning (seconds)
DEFAULT_CACHE_TTL = 5 * 60
DEFAULT_CLEANUP_INTERVAL = 10 * 60
DEFAULT_MAX_CACHE_ENTRIES_PER_KIND = 1000
ESTIMATED_BYTES_PER_ENTRY = 1024

# Metric smoothing
EMA_DECAY = 0.9

# Lazy loading
DEFAULT_PAGE_SIZE = 50

# Advisor thresholds
LAZY_LOADING_THRESHOLD = 50
LARGE_HIERARCHY_THRESHOLD = 100
DEPTH_WARNING_THRESHOLD = 3
MIN_RECOMMENDED_DEPTH = 3

# Error message templates
ERROR_MESSAGES = {
    "PARENT_NOT_FOUND": "Parent note not found",
    "NOTE_NOT_FOUND": "Note {note_id} does not exist",
    "NOTE_EXISTS": "Note {note_id} already exists",
    "CIRCULAR_REFERENCE": "Moving note {note_id} under {parent_id} would create a circular reference",
    "MAX_DEPTH_EXCEEDED": "Maximum depth exceeded ({max_depth} levels)",
    "MAX_CHILDREN_EXCEEDED": "Maximum number of sub-notes exceeded ({max_children} sub-notes)",
    "ALREADY_SUB_NOTE": "Note {note_id} is already a sub-note",
}

# Soft warning templates
WARNING_MESSAGES = {
    "DEEP_HIERARCHY": "This note will be at level {new_depth} (recommended: <{warning_depth}). Current path: {path}",
    "MANY_CHILDREN": "This note already has {children_count} sub-notes (limit: {max_children})",
}

SUGGESTIONS = {
    "DEEP_HIERARCHY": "Deep hierarchies make navigation harder",
    "MANY_CHILDREN": "Consider grouping sub-notes under an intermediate category note",
    "LIMIT_DEPTH": "Consider limiting depth due to large hierarchy",
    "LAZY_LOADING": "Use lazy loading for better performance",
    "RESTRUCTURE": "Hierarchy is very deep, consider restructuring",
    "MONITORING": "Large hierarchy detected, enable performance monitoring",
}

UNTITLED_NOTE = "Untitled note"
