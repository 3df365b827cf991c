"""Element tree comparison.

Provides common-substructure extraction and the structural, child
distribution and style sub-scores of a pairwise comparison.
"""

from collections import Counter, defaultdict

from ..models import ElementNode, UniqueElement
from .patterns import collect_class_tokens, generic_tag_fraction, is_component_tag

# Mean generic-tag fraction above which the common-pattern penalty applies
PATTERN_PENALTY_THRESHOLD = 0.7
PATTERN_PENALTY_FACTOR = 0.5
MAX_PATTERN_PENALTY = 0.15


def are_alike(node_a: ElementNode, node_b: ElementNode) -> bool:
    """Whether two nodes can be merged into a common structure.

    Nodes are alike when their tags match, or when both are nested
    components with the same number of children.
    """
    if node_a.tag_name == node_b.tag_name:
        return True
    return (
        is_component_tag(node_a.tag_name)
        and is_component_tag(node_b.tag_name)
        and len(node_a.children) == len(node_b.children)
    )


def find_common_structure(
    tree_a: ElementNode | None,
    tree_b: ElementNode | None,
) -> ElementNode | None:
    """Merge two trees into their common substructure.

    Children are paired by position. A pair of children that is not
    alike contributes nothing, and merging stops on that branch.

    Returns:
        The merged tree carrying ``tree_a``'s tag names, or None when the
        roots are not alike or either tree is missing.
    """
    if tree_a is None or tree_b is None or not are_alike(tree_a, tree_b):
        return None

    children = []
    for child_a, child_b in zip(tree_a.children, tree_b.children, strict=False):
        merged = find_common_structure(child_a, child_b)
        if merged is not None:
            children.append(merged)

    return ElementNode(tag_name=tree_a.tag_name, children=tuple(children))


def structure_similarity(
    common: ElementNode | None,
    tree_a: ElementNode | None,
    tree_b: ElementNode | None,
) -> float:
    """Common node count relative to the larger of the two trees."""
    if common is None or tree_a is None or tree_b is None:
        return 0.0
    largest = max(tree_a.node_count(), tree_b.node_count())
    return common.node_count() / largest if largest else 0.0


def depth_histogram(tree: ElementNode | None) -> dict[int, Counter]:
    """Count tags per depth: ``{depth: Counter({tag: count})}``."""
    histogram: dict[int, Counter] = defaultdict(Counter)
    if tree is None:
        return histogram
    for node, depth, _ in tree.iter_nodes():
        histogram[depth][node.tag_name] += 1
    return histogram


def child_component_similarity(
    tree_a: ElementNode | None,
    tree_b: ElementNode | None,
) -> float:
    """Similarity of the tag distribution at each depth.

    For every depth present in either tree, averages ``min/max`` of the
    per-tag counts over all tags seen at that depth (0 for a tag missing
    on one side), then averages across depths.
    """
    histogram_a = depth_histogram(tree_a)
    histogram_b = depth_histogram(tree_b)
    depths = set(histogram_a) | set(histogram_b)
    if not depths:
        return 0.0

    total = 0.0
    for depth in depths:
        counts_a = histogram_a.get(depth, Counter())
        counts_b = histogram_b.get(depth, Counter())
        tags = set(counts_a) | set(counts_b)
        depth_score = 0.0
        for tag in tags:
            count_a = counts_a.get(tag, 0)
            count_b = counts_b.get(tag, 0)
            if count_a and count_b:
                depth_score += min(count_a, count_b) / max(count_a, count_b)
        total += depth_score / len(tags)

    return total / len(depths)


def style_similarity(
    tree_a: ElementNode | None,
    tree_b: ElementNode | None,
) -> float:
    """Jaccard similarity of class tokens; 1.0 when neither tree has any."""
    classes_a = collect_class_tokens(tree_a)
    classes_b = collect_class_tokens(tree_b)
    if not classes_a and not classes_b:
        return 1.0
    return len(classes_a & classes_b) / len(classes_a | classes_b)


def common_pattern_penalty(
    tree_a: ElementNode | None,
    tree_b: ElementNode | None,
) -> float:
    """Penalty for pairs made mostly of generic wrapper markup."""
    mean_fraction = (generic_tag_fraction(tree_a) + generic_tag_fraction(tree_b)) / 2
    if mean_fraction <= PATTERN_PENALTY_THRESHOLD:
        return 0.0
    return min(
        (mean_fraction - PATTERN_PENALTY_THRESHOLD) * PATTERN_PENALTY_FACTOR,
        MAX_PATTERN_PENALTY,
    )


def find_unique_elements(
    tree: ElementNode | None,
    other: ElementNode | None,
) -> list[UniqueElement]:
    """Elements of ``tree`` not reflected in its common structure with ``other``.

    Walks both trees in parallel by child index. A node is reflected only
    when it and every ancestor pair are alike; below the first mismatch
    every node is unique.
    """
    if tree is None:
        return []

    unique: list[UniqueElement] = []
    stack: list[tuple[ElementNode, ElementNode | None, str]] = [(tree, other, "")]
    while stack:
        node, counterpart, path = stack.pop()
        reflected = counterpart is not None and are_alike(node, counterpart)
        if not reflected:
            unique.append(
                UniqueElement(
                    element=node.tag_name,
                    location=path,
                    properties={prop.name: prop.type for prop in node.properties},
                )
            )
        for index in range(len(node.children) - 1, -1, -1):
            child_counterpart = None
            if reflected and index < len(counterpart.children):
                child_counterpart = counterpart.children[index]
            child_path = f"{path}{'.' if path else ''}children[{index}]"
            stack.append((node.children[index], child_counterpart, child_path))

    return unique
