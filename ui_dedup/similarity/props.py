"""Property signature comparison.

Repeated ``(name, type)`` entries in one list count once, so a pair
scores the same in either order.
"""

from collections.abc import Sequence

from ..models import PropertySignature


def dedupe_properties(
    props: Sequence[PropertySignature] | None,
) -> list[PropertySignature]:
    """First occurrence of each ``(name, type)``, in order."""
    seen: set[tuple[str, str]] = set()
    unique = []
    for prop in props or []:
        if prop.key not in seen:
            seen.add(prop.key)
            unique.append(prop)
    return unique


def find_common_properties(
    props_a: Sequence[PropertySignature] | None,
    props_b: Sequence[PropertySignature] | None,
) -> list[PropertySignature]:
    """Properties of ``props_a`` whose ``(name, type)`` also appears in ``props_b``.

    Returns an empty list when either side is missing.
    """
    if not props_a or not props_b:
        return []
    keys_b = {prop.key for prop in props_b}
    return [prop for prop in dedupe_properties(props_a) if prop.key in keys_b]


def props_similarity(
    common: Sequence[PropertySignature],
    props_a: Sequence[PropertySignature] | None,
    props_b: Sequence[PropertySignature] | None,
) -> float:
    """Share of common properties relative to the larger property list.

    Two components without any properties are considered identical.
    """
    count_a = len(dedupe_properties(props_a))
    count_b = len(dedupe_properties(props_b))
    if count_a == 0 and count_b == 0:
        return 1.0
    return len(dedupe_properties(common)) / max(count_a, count_b, 1)


def unique_properties(
    props: Sequence[PropertySignature] | None,
    common: Sequence[PropertySignature],
) -> list[PropertySignature]:
    """Properties whose name is not among the common properties."""
    common_names = {prop.name for prop in common}
    return [prop for prop in props or [] if prop.name not in common_names]


def intersect_properties(
    property_lists: Sequence[Sequence[PropertySignature]],
) -> list[PropertySignature]:
    """Intersection by ``(name, type)`` keeping the first list's order.

    Total over empty input: no lists yields no properties.
    """
    if not property_lists:
        return []
    common = dedupe_properties(property_lists[0])
    for props in property_lists[1:]:
        keys = {prop.key for prop in props}
        common = [prop for prop in common if prop.key in keys]
    return common
