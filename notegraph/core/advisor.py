#!/usr/bin/env python3
"""Advisory performance classification for note subtrees.

Nothing here blocks an operation or touches state; the output is meant for
the UI layer to show as hints.
"""

from typing import Optional

from notegraph.tree.tree_constants import MIN_RECOMMENDED_DEPTH, SUGGESTIONS
from notegraph.tree.tree_types import (
    HierarchyConfig, HierarchyStats, PerformanceRecommendations, PerformanceTier
)


def classify_performance(total_descendants: int, max_subtree_depth: int,
                         config: Optional[HierarchyConfig] = None) -> PerformanceTier:
    """Classify a subtree by size and depth, the worse of the two wins."""
    config = config or HierarchyConfig()

    if (total_descendants > config.large_hierarchy_threshold
            or max_subtree_depth > config.max_depth):
        return PerformanceTier.CRITICAL

    if (total_descendants > config.lazy_loading_threshold
            or max_subtree_depth > config.depth_warning_threshold):
        return PerformanceTier.WARNING

    return PerformanceTier.GOOD


def get_performance_recommendations(stats: HierarchyStats,
                                    config: Optional[HierarchyConfig] = None
                                    ) -> PerformanceRecommendations:
    """Suggest depth limits, lazy loading and restructuring for a subtree."""
    config = config or HierarchyConfig()
    recommendations = PerformanceRecommendations(
        recommended_depth_limit=config.max_depth,
        performance_tier=classify_performance(
            stats.total_descendants, stats.max_subtree_depth, config),
    )
    suggestions = recommendations.optimization_suggestions
    is_large = stats.total_descendants > config.large_hierarchy_threshold

    if is_large:
        recommendations.recommended_depth_limit = max(MIN_RECOMMENDED_DEPTH, config.max_depth - 2)
        suggestions.append(SUGGESTIONS["LIMIT_DEPTH"])

    if stats.total_descendants > config.lazy_loading_threshold:
        recommendations.should_use_lazy_loading = True
        suggestions.append(SUGGESTIONS["LAZY_LOADING"])

    if stats.max_subtree_depth > config.depth_warning_threshold:
        suggestions.append(SUGGESTIONS["RESTRUCTURE"])

    if is_large:
        suggestions.append(SUGGESTIONS["MONITORING"])

    return recommendations
