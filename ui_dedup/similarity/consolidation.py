"""Greedy selection of a non-redundant set of groups."""

from collections.abc import Sequence

from ..dedup_logging import LogCategory, get_category_logger
from ..models import ComponentGroup

logger = get_category_logger(LogCategory.CLUSTERING)

# Groups of at least this size are considered in the first pass
MIN_CLUSTER_SIZE = 3
# Share of a large group's members that must still be unclaimed
MIN_NEW_MEMBER_SHARE = 0.5
# Pairs above this score may repeat members of an accepted group
HIGH_PAIR_SCORE = 0.8


def consolidate(groups: Sequence[ComponentGroup]) -> list[ComponentGroup]:
    """Pick groups that add information, preferring larger and tighter ones.

    Groups are ordered by member count, then score, both descending; the
    sort is stable so ties keep their input order. Large groups are taken
    while at least half their members are new. Pairs are taken when both
    members are new, or when they score above ``HIGH_PAIR_SCORE`` and an
    accepted group already contains both.

    Args:
        groups: Candidate groups, typically the output of clustering.

    Returns:
        Accepted groups in acceptance order.
    """
    ordered = sorted(groups, key=lambda g: (-g.size, -g.similarity_score))
    claimed: set[str] = set()
    accepted: list[ComponentGroup] = []

    for group in ordered:
        if group.size < MIN_CLUSTER_SIZE:
            continue
        new_members = [cid for cid in group.member_ids if cid not in claimed]
        if len(new_members) >= group.size * MIN_NEW_MEMBER_SHARE:
            accepted.append(group)
            claimed.update(group.member_ids)

    for group in ordered:
        if group.size != 2:
            continue
        id_a, id_b = group.member_ids
        both_new = id_a not in claimed and id_b not in claimed
        covered = group.similarity_score > HIGH_PAIR_SCORE and any(
            id_a in chosen.members and id_b in chosen.members for chosen in accepted
        )
        if both_new or covered:
            accepted.append(group)
            claimed.update(group.member_ids)

    dropped = len(groups) - len(accepted)
    if dropped:
        logger.debug(f"Consolidation dropped {dropped} of {len(groups)} groups")
    return accepted
