"""Connected-component clustering of significant pairwise results.

Groups are kept in an arena indexed by integer handles. Merging moves
members and results into the surviving handle and invalidates the
others, so no group ever references another.
"""

import uuid
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from ..dedup_logging import LogCategory, get_category_logger
from ..models import ComponentGroup, ElementNode, PairwiseResult, pair_key
from .comparator import round_score
from .props import intersect_properties

logger = get_category_logger(LogCategory.CLUSTERING)

# Discount applied to the group score for member pairs that were never
# measured directly. A flat approximation, not an estimate of the true score.
TRANSITIVE_DISCOUNT = 0.8


@dataclass
class _GroupSlot:
    """In-progress group held in the arena."""

    member_ids: list[str] = field(default_factory=list)
    results: list[PairwiseResult] = field(default_factory=list)

    def add_members(self, ids: Iterable[str]) -> None:
        for component_id in ids:
            if component_id not in self.member_ids:
                self.member_ids.append(component_id)


class SimilarityClustering:
    """Online merge of pairwise results into maximal connected groups."""

    def __init__(self, transitive_discount: float = TRANSITIVE_DISCOUNT):
        """Initialize the clustering engine.

        Args:
            transitive_discount: Factor applied to the group score for
                member pairs without a direct measurement.
        """
        self.transitive_discount = transitive_discount

    def cluster(self, results: Sequence[PairwiseResult]) -> list[ComponentGroup]:
        """Merge overlapping pairs into groups.

        Args:
            results: Significant pairwise results, in a deterministic order.

        Returns:
            One ComponentGroup per connected set, in creation order.
        """
        arena: list[_GroupSlot | None] = []
        handle_of: dict[str, int] = {}

        for result in results:
            ids = result.component_ids
            handles = sorted({handle_of[cid] for cid in ids if cid in handle_of})

            if not handles:
                arena.append(_GroupSlot(member_ids=[], results=[result]))
                target = len(arena) - 1
                arena[target].add_members(ids)
            else:
                target = handles[0]
                slot = arena[target]
                slot.add_members(ids)
                slot.results.append(result)
                for stale in handles[1:]:
                    merged = arena[stale]
                    slot.add_members(merged.member_ids)
                    slot.results.extend(merged.results)
                    arena[stale] = None
                if len(handles) > 1:
                    logger.debug(f"Merged {len(handles)} groups via {ids[0]} / {ids[1]}")

            for member in arena[target].member_ids:
                handle_of[member] = target

        groups = [self._finalize(slot) for slot in arena if slot is not None]
        logger.debug(
            f"Clustered {len(results)} pairs into {len(groups)} groups",
            extra={"group_count": len(groups)},
        )
        return groups

    def _finalize(self, slot: _GroupSlot) -> ComponentGroup:
        score = group_similarity(slot.results)
        matrix, estimated = self._internal_matrix(slot.results, slot.member_ids, score)
        return ComponentGroup(
            group_id=str(uuid.uuid4()),
            member_ids=list(slot.member_ids),
            similarities=list(slot.results),
            common_properties=intersect_properties(
                [result.common_properties for result in slot.results]
            ),
            common_structure=merge_common_structure(slot.results),
            similarity_score=score,
            internal_matrix=matrix,
            estimated_pairs=estimated,
        )

    def _internal_matrix(
        self,
        results: Sequence[PairwiseResult],
        member_ids: Sequence[str],
        group_score: float,
    ) -> tuple[dict[tuple[str, str], float], set[tuple[str, str]]]:
        """Score every unordered member pair.

        Directly measured pairs keep their score; the rest are estimated
        as ``group_score * transitive_discount``.
        """
        matrix: dict[tuple[str, str], float] = {}
        for result in results:
            id_a, id_b = result.component_ids
            if id_a != id_b:
                matrix.setdefault(pair_key(id_a, id_b), result.similarity_score)

        estimated: set[tuple[str, str]] = set()
        for i, id_a in enumerate(member_ids):
            for id_b in member_ids[i + 1 :]:
                key = pair_key(id_a, id_b)
                if key not in matrix:
                    matrix[key] = group_score * self.transitive_discount
                    estimated.add(key)
        return matrix, estimated


def cluster(results: Sequence[PairwiseResult]) -> list[ComponentGroup]:
    """Merge significant pairwise results into connected groups."""
    return SimilarityClustering().cluster(results)


def group_similarity(results: Sequence[PairwiseResult]) -> float:
    """Mean result score rounded to two decimals; 0 for no results."""
    if not results:
        return 0.0
    return round_score(sum(r.similarity_score for r in results) / len(results))


def merge_common_structure(results: Sequence[PairwiseResult]) -> ElementNode | None:
    """Fold the pairwise common structures of a group.

    A single result keeps its full common tree. For more, the root tags
    must agree across every result and only a childless placeholder with
    that tag is kept; children are not intersected across the group.
    """
    if not results:
        return None
    if len(results) == 1:
        return results[0].common_structure

    structures = [result.common_structure for result in results]
    if any(structure is None for structure in structures):
        return None
    root_tags = {structure.tag_name for structure in structures}
    if len(root_tags) != 1:
        return None
    return ElementNode(tag_name=root_tags.pop())
