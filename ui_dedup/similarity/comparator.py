"""Pairwise component comparison.

This module combines property, structure, child-distribution and style
signals into one similarity score per component pair, with a cheap
complexity gate in front of the structural signals.
"""

import math

from ..config.thresholds import SimilarityThresholds, ensure_thresholds
from ..dedup_logging import LogCategory, get_category_logger
from ..models import (
    ComponentInfo,
    ComponentRecord,
    DedupDetail,
    ElementNode,
    PairwiseResult,
    PropertySignature,
    SharedProperty,
    SimilarityBreakdown,
)
from .metrics import calculate_structure_metrics, complexity_ratio
from .patterns import collect_class_tokens
from .props import find_common_properties, props_similarity, unique_properties
from .structure import (
    child_component_similarity,
    common_pattern_penalty,
    find_common_structure,
    find_unique_elements,
    structure_similarity,
    style_similarity,
)

logger = get_category_logger(LogCategory.SIMILARITY)

# Score assigned to pairs rejected by the complexity gate. Non-zero so that
# tiny identical components stay distinguishable from unrelated ones.
GATED_SCORE = 0.1

PROPS_WEIGHT = 0.4
STRUCTURE_WEIGHT = 0.6


def round_score(value: float) -> float:
    """Round half-up to two decimals."""
    return math.floor(value * 100 + 0.5) / 100


class ComponentComparator:
    """Multi-signal similarity scoring for component records.

    Combines property overlap with structural (common subtree size),
    child-distribution and style (class token) signals. Pairs whose
    element trees differ too much in complexity, or are too small to be
    meaningful, are short-circuited to ``GATED_SCORE``.
    """

    def __init__(self, thresholds: SimilarityThresholds | None = None):
        """Initialize the comparator.

        Args:
            thresholds: Validated thresholds; defaults when omitted.
        """
        self.thresholds = ensure_thresholds(thresholds)

    def compare(self, comp_a: ComponentRecord, comp_b: ComponentRecord) -> PairwiseResult:
        """Compare two components.

        Never raises for missing properties or trees; absent data
        degrades to low similarity.

        Args:
            comp_a: First component.
            comp_b: Second component.

        Returns:
            PairwiseResult with score, breakdown and dedup detail.
        """
        tree_a = comp_a.element_tree
        tree_b = comp_b.element_tree

        common_props = find_common_properties(comp_a.properties, comp_b.properties)
        common_structure = find_common_structure(tree_a, tree_b)

        complexity_a = calculate_structure_metrics(tree_a).complexity
        complexity_b = calculate_structure_metrics(tree_b).complexity
        ratio = complexity_ratio(complexity_a, complexity_b)

        detail = build_dedup_detail(comp_a, comp_b, common_props, common_structure)

        if self._is_gated(complexity_a, complexity_b, ratio):
            logger.debug(
                f"Pair {comp_a.id} / {comp_b.id} gated: complexity "
                f"{complexity_a:.1f} vs {complexity_b:.1f} (ratio {ratio:.2f})"
            )
            return PairwiseResult(
                component_ids=(comp_a.id, comp_b.id),
                common_properties=common_props,
                common_structure=common_structure,
                similarity_score=GATED_SCORE,
                breakdown=SimilarityBreakdown(
                    complexity_a=complexity_a,
                    complexity_b=complexity_b,
                    complexity_ratio=ratio,
                    gated=True,
                ),
                dedup_detail=detail,
            )

        props_score = props_similarity(
            common_props, comp_a.properties, comp_b.properties
        )
        structure_score = structure_similarity(common_structure, tree_a, tree_b)
        child_score = child_component_similarity(tree_a, tree_b)
        style_score = style_similarity(tree_a, tree_b)

        composite = (structure_score + child_score + style_score) / 3
        raw_score = props_score * PROPS_WEIGHT + composite * STRUCTURE_WEIGHT
        penalty = common_pattern_penalty(tree_a, tree_b)
        score = round_score(max(0.0, raw_score - penalty))

        return PairwiseResult(
            component_ids=(comp_a.id, comp_b.id),
            common_properties=common_props,
            common_structure=common_structure,
            similarity_score=score,
            breakdown=SimilarityBreakdown(
                props_score=props_score,
                structure_score=structure_score,
                child_score=child_score,
                style_score=style_score,
                structure_composite=composite,
                raw_score=raw_score,
                pattern_penalty=penalty,
                complexity_a=complexity_a,
                complexity_b=complexity_b,
                complexity_ratio=ratio,
            ),
            dedup_detail=detail,
        )

    def _is_gated(self, complexity_a: float, complexity_b: float, ratio: float) -> bool:
        minimum = self.thresholds.min_structure_complexity
        return (
            ratio < self.thresholds.min_complexity_ratio
            or complexity_a < minimum
            or complexity_b < minimum
        )


def compare(
    comp_a: ComponentRecord,
    comp_b: ComponentRecord,
    thresholds: SimilarityThresholds | None = None,
) -> PairwiseResult:
    """Compare two components with the given thresholds."""
    return ComponentComparator(thresholds).compare(comp_a, comp_b)


def build_dedup_detail(
    comp_a: ComponentRecord,
    comp_b: ComponentRecord,
    common_props: list[PropertySignature],
    common_structure: ElementNode | None,
) -> DedupDetail:
    """Describe what two components share and where they differ."""
    ids = (comp_a.id, comp_b.id)
    tree_a = comp_a.element_tree
    tree_b = comp_b.element_tree

    shared_classes = collect_class_tokens(tree_a) & collect_class_tokens(tree_b)

    return DedupDetail(
        components=[ComponentInfo.from_record(comp_a), ComponentInfo.from_record(comp_b)],
        shared_properties=[
            SharedProperty(
                name=prop.name, type=prop.type, required=prop.required, used_in=ids
            )
            for prop in common_props
        ],
        unique_properties={
            comp_a.id: unique_properties(comp_a.properties, common_props),
            comp_b.id: unique_properties(comp_b.properties, common_props),
        },
        unique_elements={
            comp_a.id: find_unique_elements(tree_a, tree_b),
            comp_b.id: find_unique_elements(tree_b, tree_a),
        },
        shared_root_tag=common_structure.tag_name if common_structure else "",
        shared_structure=common_structure.tag_names() if common_structure else [],
        shared_class_names=sorted(shared_classes),
    )
