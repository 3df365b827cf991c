"""Serializable report of the selected duplicate groups.

This module turns consolidated ``ComponentGroup`` values into a
``DeduplicationReport`` that can be written as JSON or summarized as
plain text for the CLI. It only reads the analysis output; component
sources are never touched.
"""

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np

from .dedup_logging import LogCategory, get_category_logger
from .models import (
    ComponentGroup,
    ComponentInfo,
    PropertySignature,
    SharedProperty,
    UniqueElement,
)
from .performance import PerformanceTimer

logger = get_category_logger(LogCategory.REPORT)


@dataclass(frozen=True)
class InternalSimilarity:
    """Score of one member pair inside a group."""

    source: str
    target: str
    score: float
    estimated: bool = False  # True when derived from the group score

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "score": self.score,
            "estimated": self.estimated,
        }


@dataclass
class GroupReport:
    """Consolidation view of one duplicate group."""

    group_id: str
    similarity_score: float
    members: list[ComponentInfo] = field(default_factory=list)
    shared_properties: list[SharedProperty] = field(default_factory=list)
    shared_root_tag: str = ""
    shared_structure: list[str] = field(default_factory=list)
    shared_class_names: list[str] = field(default_factory=list)
    unique_properties: dict[str, list[PropertySignature]] = field(default_factory=dict)
    unique_elements: dict[str, list[UniqueElement]] = field(default_factory=dict)
    internal_similarities: list[InternalSimilarity] = field(default_factory=list)
    similarity_matrix: list[list[float]] = field(default_factory=list)  # member_ids order
    weakest_pair_score: float = 0.0

    @property
    def member_ids(self) -> list[str]:
        return [member.id for member in self.members]

    @property
    def estimated_count(self) -> int:
        """Number of member pairs without a direct measurement."""
        return sum(1 for entry in self.internal_similarities if entry.estimated)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "group_id": self.group_id,
            "similarity_score": self.similarity_score,
            "members": [member.to_dict() for member in self.members],
            "commonalities": {
                "properties": [prop.to_dict() for prop in self.shared_properties],
                "structure": {
                    "shared_root_tag": self.shared_root_tag,
                    "shared_structure": list(self.shared_structure),
                    "shared_class_names": list(self.shared_class_names),
                },
            },
            "differences": {
                "properties": {
                    cid: [prop.to_dict() for prop in props]
                    for cid, props in self.unique_properties.items()
                },
                "elements": {
                    cid: [elem.to_dict() for elem in elems]
                    for cid, elems in self.unique_elements.items()
                },
            },
            "internal_similarities": [
                entry.to_dict() for entry in self.internal_similarities
            ],
            "similarity_matrix": {
                "members": self.member_ids,
                "scores": self.similarity_matrix,
            },
            "weakest_pair_score": self.weakest_pair_score,
        }


@dataclass
class DeduplicationReport:
    """Report over all selected groups of one analysis run."""

    groups: list[GroupReport] = field(default_factory=list)
    stats: dict[str, Any] = field(default_factory=dict)

    @property
    def group_count(self) -> int:
        return len(self.groups)

    @property
    def component_count(self) -> int:
        """Distinct components appearing in any group."""
        return len({cid for group in self.groups for cid in group.member_ids})

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "summary": {
                "group_count": self.group_count,
                "component_count": self.component_count,
            },
            "stats": dict(self.stats),
            "groups": [group.to_dict() for group in self.groups],
        }

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def write(self, output_path: Path | str) -> Path:
        """Write the JSON report, creating parent directories.

        Returns:
            The path written.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with PerformanceTimer("write_report"), open(
            output_path, "w", encoding="utf-8"
        ) as f:
            f.write(self.to_json())
        logger.info(f"Wrote report with {self.group_count} groups to {output_path}")
        return output_path

    def format_text(self, use_color: bool = False) -> str:
        """Plain-text summary for terminal output.

        Example output:
            Group 1: score 0.92, 3 components
              src/a/Card.tsx#UserCard
              src/b/Card.tsx#ProfileCard
              ...
              shared properties: title: string, onClick: () => void
              shared root: Card

            1 duplicate group(s) covering 3 component(s)
        """
        bold = "\033[1m" if use_color else ""
        dim = "\033[2m" if use_color else ""
        reset = "\033[0m" if use_color else ""

        lines: list[str] = []
        for index, group in enumerate(self.groups, start=1):
            lines.append(
                f"{bold}Group {index}: score {group.similarity_score:.2f}, "
                f"{len(group.members)} components{reset}"
            )
            for member in group.members:
                lines.append(f"  {member.id}")
            if group.shared_properties:
                props = ", ".join(f"{p.name}: {p.type}" for p in group.shared_properties)
                lines.append(f"  {dim}shared properties: {props}{reset}")
            if group.shared_root_tag:
                lines.append(f"  {dim}shared root: {group.shared_root_tag}{reset}")
            if len(group.members) > 1:
                lines.append(
                    f"  {dim}weakest pair: {group.weakest_pair_score:.2f}{reset}"
                )
            if group.estimated_count:
                lines.append(
                    f"  {dim}{group.estimated_count} pair score(s) estimated{reset}"
                )
            lines.append("")

        if not self.groups:
            lines.append("No duplicate components found")
        else:
            lines.append(
                f"{self.group_count} duplicate group(s) covering "
                f"{self.component_count} component(s)"
            )

        if self.stats:
            comparisons = self.stats.get("comparisons", 0)
            gated = self.stats.get("gated_comparisons", 0)
            lines.append(f"{dim}{comparisons} comparisons ({gated} gated){reset}")

        return "\n".join(lines)


def assemble_report(
    groups: Sequence[ComponentGroup],
    stats: Mapping[str, Any] | None = None,
) -> DeduplicationReport:
    """Build the report for the selected groups.

    Args:
        groups: Consolidated groups.
        stats: Optional run statistics to embed.

    Returns:
        DeduplicationReport with one GroupReport per group, in order.
    """
    report = DeduplicationReport(
        groups=[build_group_report(group) for group in groups],
        stats=dict(stats or {}),
    )
    logger.debug(
        f"Assembled report for {report.group_count} groups",
        extra={"group_count": report.group_count},
    )
    return report


def build_group_report(group: ComponentGroup) -> GroupReport:
    """Merge the per-pair details of a group into one view."""
    details = [result.dedup_detail for result in group.similarities]

    known: dict[str, ComponentInfo] = {}
    for detail in details:
        for info in detail.components:
            known.setdefault(info.id, info)
    members = [known.get(cid) or ComponentInfo.from_id(cid) for cid in group.member_ids]

    member_tuple = tuple(group.member_ids)
    shared_properties = [
        SharedProperty(
            name=prop.name, type=prop.type, required=prop.required, used_in=member_tuple
        )
        for prop in group.common_properties
    ]

    shared_root_tag = details[0].shared_root_tag if details else ""
    shared_structure = _intersect_ordered([d.shared_structure for d in details])
    shared_class_names = _intersect_ordered([d.shared_class_names for d in details])

    unique_properties: dict[str, list[PropertySignature]] = {
        cid: [] for cid in group.member_ids
    }
    unique_elements: dict[str, list[UniqueElement]] = {cid: [] for cid in group.member_ids}
    for detail in details:
        for cid, props in detail.unique_properties.items():
            merged = unique_properties.setdefault(cid, [])
            seen_names = {prop.name for prop in merged}
            merged.extend(prop for prop in props if prop.name not in seen_names)
        for cid, elements in detail.unique_elements.items():
            merged_elements = unique_elements.setdefault(cid, [])
            seen = {(elem.element, elem.location) for elem in merged_elements}
            for elem in elements:
                if (elem.element, elem.location) not in seen:
                    seen.add((elem.element, elem.location))
                    merged_elements.append(elem)

    internal = [
        InternalSimilarity(
            source=source,
            target=target,
            score=score,
            estimated=(source, target) in group.estimated_pairs,
        )
        for (source, target), score in group.internal_matrix.items()
    ]

    matrix = group.to_matrix()
    off_diagonal = matrix[~np.eye(len(matrix), dtype=bool)]

    return GroupReport(
        group_id=group.group_id,
        similarity_score=group.similarity_score,
        members=members,
        shared_properties=shared_properties,
        shared_root_tag=shared_root_tag,
        shared_structure=shared_structure,
        shared_class_names=shared_class_names,
        unique_properties=unique_properties,
        unique_elements=unique_elements,
        internal_similarities=internal,
        similarity_matrix=np.round(matrix, 2).tolist(),
        weakest_pair_score=round(float(off_diagonal.min()), 2) if off_diagonal.size else 0.0,
    )


def _intersect_ordered(lists: Sequence[Sequence[str]]) -> list[str]:
    """Items of the first list present in every other list."""
    if not lists:
        return []
    common = list(lists[0])
    for items in lists[1:]:
        present = set(items)
        common = [item for item in common if item in present]
    return common
