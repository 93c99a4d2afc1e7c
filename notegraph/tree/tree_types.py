#!/usr/bin/env python3
"""
Type definitions and value objects for the note hierarchy.
"""

from dataclasses import asdict, dataclass, field, fields, replace as dc_replace
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, Protocol, Tuple, TypeVar

from notegraph.core.logging_config import get_logger
from notegraph.tree.tree_constants import (
    CHILDREN_WARNING_RATIO, DEFAULT_CACHE_TTL, DEFAULT_CLEANUP_INTERVAL,
    DEFAULT_MAX_CACHE_ENTRIES_PER_KIND, DEFAULT_MAX_CHILDREN_PER_NODE,
    DEFAULT_MAX_DEPTH, DEFAULT_PAGE_SIZE, DEPTH_WARNING_THRESHOLD,
    LARGE_HIERARCHY_THRESHOLD, LAZY_LOADING_THRESHOLD
)
from notegraph.tree.tree_exceptions import HierarchyConfigError

logger = get_logger(__name__)

T = TypeVar("T")


class NoteProtocol(Protocol):
    """Anything with an id and an optional parent id can sit in the hierarchy."""
    id: str
    parent_id: Optional[str]


class CacheKind(Enum):
    """Kinds of derived metric held by the cache."""
    DEPTH = "depth"
    CHILDREN = "children"
    DESCENDANTS = "descendants"
    STATS = "stats"


# Kinds that change for every ancestor when a subtree changes
ANCESTOR_KINDS = (CacheKind.CHILDREN, CacheKind.DESCENDANTS, CacheKind.STATS)


class PerformanceTier(Enum):
    """Health classification of a subtree."""
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass
class HierarchyConfig:
    """Limits and tuning for validation, caching and pagination."""
    max_depth: int = DEFAULT_MAX_DEPTH
    warning_depth: Optional[int] = None  # None means max_depth - 1
    max_children_per_node: int = DEFAULT_MAX_CHILDREN_PER_NODE
    children_warning_ratio: float = CHILDREN_WARNING_RATIO
    ttl_seconds: float = DEFAULT_CACHE_TTL
    max_cache_entries_per_kind: int = DEFAULT_MAX_CACHE_ENTRIES_PER_KIND
    cleanup_interval_seconds: float = DEFAULT_CLEANUP_INTERVAL
    page_size: int = DEFAULT_PAGE_SIZE
    lazy_loading_threshold: int = LAZY_LOADING_THRESHOLD
    large_hierarchy_threshold: int = LARGE_HIERARCHY_THRESHOLD
    depth_warning_threshold: int = DEPTH_WARNING_THRESHOLD

    def __post_init__(self) -> None:
        self.validate()

    @property
    def effective_warning_depth(self) -> int:
        if self.warning_depth is None:
            return max(1, self.max_depth - 1)
        return self.warning_depth

    @property
    def children_warning_count(self) -> float:
        return self.max_children_per_node * self.children_warning_ratio

    def validate(self) -> None:
        """Raise HierarchyConfigError for out-of-range values."""
        if self.max_depth < 1:
            raise HierarchyConfigError("max_depth", self.max_depth, "must be at least 1")
        if self.warning_depth is not None and not 1 <= self.warning_depth <= self.max_depth:
            raise HierarchyConfigError("warning_depth", self.warning_depth,
                                       f"must be between 1 and max_depth ({self.max_depth})")
        if self.max_children_per_node < 1:
            raise HierarchyConfigError("max_children_per_node", self.max_children_per_node,
                                       "must be at least 1")
        if not 0 < self.children_warning_ratio <= 1:
            raise HierarchyConfigError("children_warning_ratio", self.children_warning_ratio,
                                       "must be in (0, 1]")
        if self.ttl_seconds <= 0:
            raise HierarchyConfigError("ttl_seconds", self.ttl_seconds, "must be positive")
        if self.max_cache_entries_per_kind < 1:
            raise HierarchyConfigError("max_cache_entries_per_kind",
                                       self.max_cache_entries_per_kind, "must be at least 1")
        if self.cleanup_interval_seconds <= 0:
            raise HierarchyConfigError("cleanup_interval_seconds",
                                       self.cleanup_interval_seconds, "must be positive")
        if self.page_size < 1:
            raise HierarchyConfigError("page_size", self.page_size, "must be at least 1")

    def replace(self, **changes: Any) -> 'HierarchyConfig':
        """Return a validated copy with ``changes`` applied."""
        return dc_replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'HierarchyConfig':
        """Build a config from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown hierarchy config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class CacheEntry(Generic[T]):
    """A cached value and the time it was computed."""
    value: T
    computed_at: float


@dataclass(frozen=True)
class HierarchyStats:
    """Read-only snapshot of a note's subtree metrics."""
    direct_child_count: int = 0
    total_descendants: int = 0
    max_subtree_depth: int = 0
    performance_tier: PerformanceTier = PerformanceTier.GOOD
    depth: int = 0
    has_circular_ref: bool = False
    total_size: int = 0


@dataclass
class ValidationResult:
    """Outcome of checking whether a note may be attached under a parent."""
    is_valid: bool = True
    reason: Optional[str] = None
    warnings: List[str] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    current_depth: int = 0
    max_depth_allowed: int = DEFAULT_MAX_DEPTH
    children_count: int = 0
    would_exceed_depth: bool = False
    would_exceed_children: bool = False
    would_create_cycle: bool = False
    parent_found: bool = True
    hierarchy_path: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        """Record a hard violation; the first one becomes the reason."""
        self.errors.append(error)
        self.is_valid = False
        if self.reason is None:
            self.reason = error

    def add_warning(self, warning: str, suggestion: Optional[str] = None) -> None:
        self.warnings.append(warning)
        if suggestion:
            self.suggestions.append(suggestion)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass(frozen=True)
class CircularReference:
    """A cycle found in the parent graph."""
    path: Tuple[str, ...]
    affected_notes: Tuple[str, ...]
    severity: str = "error"


@dataclass
class HierarchyHealth:
    """Whole-collection diagnostic report."""
    is_healthy: bool
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChildrenPage:
    """One page of a note's direct children."""
    children: Tuple[Any, ...]
    has_more: bool
    total_count: int
    page_index: int
    page_size: int


@dataclass
class PerformanceRecommendations:
    """Advisory output for a subtree."""
    recommended_depth_limit: int
    should_use_lazy_loading: bool = False
    performance_tier: PerformanceTier = PerformanceTier.GOOD
    optimization_suggestions: List[str] = field(default_factory=list)


@dataclass
class CacheMetrics:
    """Diagnostic snapshot of cache behaviour."""
    cache_hit_rate: float = 0.0
    average_calculation_time: float = 0.0  # milliseconds
    memory_usage: int = 0  # estimated bytes
    last_cleanup: float = 0.0
    hits: int = 0
    misses: int = 0
    entry_counts: Dict[str, int] = field(default_factory=dict)
