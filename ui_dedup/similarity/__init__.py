"""Similarity scoring and grouping of UI components.

- **metrics**: complexity score and node statistics of an element tree
- **props** / **structure**: property and element tree sub-scores
- **comparator**: `ComponentComparator` combining the sub-scores with
  the complexity gate
- **clustering**: connected-component merge of significant pairs
- **consolidation**: greedy selection of non-redundant groups

Example usage:

    from ui_dedup.similarity import compare, cluster, consolidate

    result = compare(button_a, button_b)
    groups = consolidate(cluster([result]))
"""

from .clustering import TRANSITIVE_DISCOUNT, SimilarityClustering, cluster
from .comparator import GATED_SCORE, ComponentComparator, compare, round_score
from .consolidation import consolidate
from .metrics import StructureMetrics, calculate_structure_metrics, complexity_ratio
from .patterns import GENERIC_UI_TAGS, is_component_tag
from .structure import are_alike, find_common_structure

__all__ = [
    # Metrics
    "StructureMetrics",
    "calculate_structure_metrics",
    "complexity_ratio",
    # Patterns
    "GENERIC_UI_TAGS",
    "is_component_tag",
    # Comparison
    "ComponentComparator",
    "GATED_SCORE",
    "are_alike",
    "compare",
    "find_common_structure",
    "round_score",
    # Grouping
    "SimilarityClustering",
    "TRANSITIVE_DISCOUNT",
    "cluster",
    "consolidate",
]
