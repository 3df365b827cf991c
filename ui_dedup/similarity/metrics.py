"""Structure metrics for a single element tree.

The complexity score is a weighted node count used to gate the more
expensive structural comparison.
"""

from dataclasses import dataclass
from typing import Any

from ..models import ElementNode
from .patterns import has_style_property, is_component_tag

BASE_NODE_WEIGHT = 1.0
PROPERTY_WEIGHT = 0.5
COMPONENT_WEIGHT = 1.0
STYLE_WEIGHT = 0.5


@dataclass(frozen=True)
class StructureMetrics:
    """Node and depth statistics of an element tree."""

    total_nodes: int = 0
    max_depth: int = 0
    component_count: int = 0
    complexity: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_nodes": self.total_nodes,
            "max_depth": self.max_depth,
            "component_count": self.component_count,
            "complexity": self.complexity,
        }


def node_complexity(node: ElementNode) -> float:
    """Complexity contribution of one node, ignoring its children."""
    score = BASE_NODE_WEIGHT + PROPERTY_WEIGHT * len(node.properties)
    if is_component_tag(node.tag_name):
        score += COMPONENT_WEIGHT
    if has_style_property(node):
        score += STYLE_WEIGHT
    return score


def calculate_structure_metrics(tree: ElementNode | None) -> StructureMetrics:
    """Compute node count, depth, component count and complexity.

    Args:
        tree: Root of the element tree, or None when extraction failed.

    Returns:
        StructureMetrics; all zeros for an absent tree.
    """
    if tree is None:
        return StructureMetrics()

    total_nodes = 0
    max_depth = 0
    component_count = 0
    complexity = 0.0

    for node, depth, _ in tree.iter_nodes():
        total_nodes += 1
        max_depth = max(max_depth, depth)
        if is_component_tag(node.tag_name):
            component_count += 1
        complexity += node_complexity(node)

    return StructureMetrics(
        total_nodes=total_nodes,
        max_depth=max_depth,
        component_count=component_count,
        complexity=complexity,
    )


def complexity_ratio(complexity_a: float, complexity_b: float) -> float:
    """Smaller over larger complexity; 0 when both are 0."""
    largest = max(complexity_a, complexity_b)
    if largest <= 0:
        return 0.0
    return min(complexity_a, complexity_b) / largest
