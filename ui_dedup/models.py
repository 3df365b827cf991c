"""Data models for component deduplication.

This module defines the records consumed from the extraction layer
(property signatures, element trees, component records) and the
values produced by the analysis pipeline (pairwise results and
component groups).
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import numpy as np


def _first(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting snake_case and camelCase."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def pair_key(id_a: str, id_b: str) -> tuple[str, str]:
    """Canonical key for an unordered pair of component ids."""
    return (id_a, id_b) if id_a <= id_b else (id_b, id_a)


@dataclass(frozen=True)
class PropertySignature:
    """One declared or used property of a component or element."""

    name: str
    type: str
    required: bool = False

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for matching properties across components."""
        return (self.name, self.type)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"name": self.name, "type": self.type, "required": self.required}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PropertySignature":
        """Create from dictionary."""
        return cls(
            name=str(data["name"]),
            type=str(_first(data, "type", default="any")),
            required=bool(_first(data, "required", "isRequired", default=False)),
        )


@dataclass(frozen=True)
class ElementNode:
    """One rendered element (intrinsic tag or nested component) in a tree.

    Trees are immutable snapshots: properties and children are stored
    as tuples and nodes hold no reference to their parent.
    """

    tag_name: str
    properties: tuple[PropertySignature, ...] = ()
    children: tuple["ElementNode", ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", tuple(self.properties))
        object.__setattr__(self, "children", tuple(self.children))

    def get_property(self, name: str) -> PropertySignature | None:
        """Return the first property with the given name, if any."""
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def iter_nodes(self) -> Iterator[tuple["ElementNode", int, str]]:
        """Iterate nodes in pre-order as ``(node, depth, path)``.

        Paths use positional child indexes, e.g. ``children[0].children[2]``;
        the root's path is the empty string.
        """
        stack: list[tuple[ElementNode, int, str]] = [(self, 0, "")]
        while stack:
            node, depth, path = stack.pop()
            yield node, depth, path
            for index in range(len(node.children) - 1, -1, -1):
                child_path = f"{path}{'.' if path else ''}children[{index}]"
                stack.append((node.children[index], depth + 1, child_path))

    def node_count(self) -> int:
        """Total number of nodes in this subtree."""
        return sum(1 for _ in self.iter_nodes())

    def tag_names(self) -> list[str]:
        """Tag names of every node in pre-order."""
        return [node.tag_name for node, _, _ in self.iter_nodes()]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "tag_name": self.tag_name,
            "properties": [prop.to_dict() for prop in self.properties],
            "children": [child.to_dict() for child in self.children],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ElementNode":
        """Create from dictionary (``tagName``/``props`` accepted)."""
        return cls(
            tag_name=str(_first(data, "tag_name", "tagName", default="")),
            properties=tuple(
                PropertySignature.from_dict(prop)
                for prop in _first(data, "properties", "props", default=[])
            ),
            children=tuple(
                cls.from_dict(child) for child in data.get("children") or []
            ),
        )


@dataclass
class ComponentRecord:
    """A component as produced by the extraction layer.

    ``properties`` and ``element_tree`` are optional because extraction
    can fail for a given source; missing data yields low similarity
    rather than errors.
    """

    id: str
    name: str
    file_path: str
    properties: list[PropertySignature] | None = None
    element_tree: ElementNode | None = None

    @staticmethod
    def make_id(file_path: str, name: str) -> str:
        """Build the stable ``<filePath>#<name>`` identifier."""
        return f"{file_path}#{name}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "file_path": self.file_path,
            "properties": (
                [prop.to_dict() for prop in self.properties]
                if self.properties is not None
                else None
            ),
            "element_tree": (
                self.element_tree.to_dict() if self.element_tree else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ComponentRecord":
        """Create from dictionary."""
        name = str(data["name"])
        file_path = str(_first(data, "file_path", "filePath", "fullPath", default=""))
        raw_props = _first(data, "properties", "props")
        raw_tree = _first(data, "element_tree", "elementTree", "jsxStructure")
        return cls(
            id=str(_first(data, "id", default=cls.make_id(file_path, name))),
            name=name,
            file_path=file_path,
            properties=(
                [PropertySignature.from_dict(prop) for prop in raw_props]
                if raw_props is not None
                else None
            ),
            element_tree=ElementNode.from_dict(raw_tree) if raw_tree else None,
        )


@dataclass(frozen=True)
class ComponentInfo:
    """Display information for a compared component."""

    id: str
    name: str
    file_path: str

    @classmethod
    def from_record(cls, record: ComponentRecord) -> "ComponentInfo":
        return cls(id=record.id, name=record.name, file_path=record.file_path)

    @classmethod
    def from_id(cls, component_id: str) -> "ComponentInfo":
        """Best-effort info from a ``<path>#<name>`` identifier."""
        if "#" in component_id:
            path, _, name = component_id.rpartition("#")
            return cls(id=component_id, name=name, file_path=path)
        stem = component_id.rsplit("/", 1)[-1]
        for suffix in (".tsx", ".jsx", ".ts", ".js"):
            if stem.endswith(suffix):
                stem = stem[: -len(suffix)]
                break
        return cls(id=component_id, name=stem, file_path=component_id)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "file_path": self.file_path}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ComponentInfo":
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            file_path=_first(data, "file_path", "filePath", default=""),
        )


@dataclass(frozen=True)
class SharedProperty:
    """A property common to compared components."""

    name: str
    type: str
    required: bool
    used_in: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "required": self.required,
            "used_in": list(self.used_in),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SharedProperty":
        return cls(
            name=data["name"],
            type=data["type"],
            required=data.get("required", False),
            used_in=tuple(data.get("used_in", [])),
        )


@dataclass(frozen=True)
class UniqueElement:
    """An element present in one component but not in the common structure."""

    element: str
    location: str  # e.g. "children[0].children[2]", "" for the root
    properties: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "element": self.element,
            "location": self.location,
            "properties": dict(self.properties),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UniqueElement":
        return cls(
            element=data["element"],
            location=data.get("location", ""),
            properties=dict(data.get("properties") or {}),
        )


@dataclass
class DedupDetail:
    """Per-comparison detail a report formatter can render directly."""

    components: list[ComponentInfo] = field(default_factory=list)
    shared_properties: list[SharedProperty] = field(default_factory=list)
    unique_properties: dict[str, list[PropertySignature]] = field(default_factory=dict)
    unique_elements: dict[str, list[UniqueElement]] = field(default_factory=dict)
    shared_root_tag: str = ""
    shared_structure: list[str] = field(default_factory=list)
    shared_class_names: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "components": [info.to_dict() for info in self.components],
            "shared_properties": [prop.to_dict() for prop in self.shared_properties],
            "unique_properties": {
                cid: [prop.to_dict() for prop in props]
                for cid, props in self.unique_properties.items()
            },
            "unique_elements": {
                cid: [elem.to_dict() for elem in elems]
                for cid, elems in self.unique_elements.items()
            },
            "shared_root_tag": self.shared_root_tag,
            "shared_structure": list(self.shared_structure),
            "shared_class_names": list(self.shared_class_names),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DedupDetail":
        """Create from dictionary."""
        return cls(
            components=[ComponentInfo.from_dict(c) for c in data.get("components", [])],
            shared_properties=[
                SharedProperty.from_dict(p) for p in data.get("shared_properties", [])
            ],
            unique_properties={
                cid: [PropertySignature.from_dict(p) for p in props]
                for cid, props in data.get("unique_properties", {}).items()
            },
            unique_elements={
                cid: [UniqueElement.from_dict(e) for e in elems]
                for cid, elems in data.get("unique_elements", {}).items()
            },
            shared_root_tag=data.get("shared_root_tag", ""),
            shared_structure=list(data.get("shared_structure", [])),
            shared_class_names=list(data.get("shared_class_names", [])),
        )


@dataclass(frozen=True)
class SimilarityBreakdown:
    """Sub-scores behind a pairwise similarity score."""

    props_score: float = 0.0
    structure_score: float = 0.0
    child_score: float = 0.0
    style_score: float = 0.0
    structure_composite: float = 0.0
    raw_score: float = 0.0
    pattern_penalty: float = 0.0
    complexity_a: float = 0.0
    complexity_b: float = 0.0
    complexity_ratio: float = 0.0
    gated: bool = False  # True when the complexity gate short-circuited scoring

    def to_dict(self) -> dict[str, Any]:
        return {
            "props_score": self.props_score,
            "structure_score": self.structure_score,
            "child_score": self.child_score,
            "style_score": self.style_score,
            "structure_composite": self.structure_composite,
            "raw_score": self.raw_score,
            "pattern_penalty": self.pattern_penalty,
            "complexity_a": self.complexity_a,
            "complexity_b": self.complexity_b,
            "complexity_ratio": self.complexity_ratio,
            "gated": self.gated,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SimilarityBreakdown":
        known = cls.__dataclass_fields__
        return cls(**{key: value for key, value in data.items() if key in known})


@dataclass
class PairwiseResult:
    """Result of comparing two components. Produced once per pair."""

    component_ids: tuple[str, str]
    common_properties: list[PropertySignature] = field(default_factory=list)
    common_structure: ElementNode | None = None
    similarity_score: float = 0.0
    breakdown: SimilarityBreakdown = field(default_factory=SimilarityBreakdown)
    dedup_detail: DedupDetail = field(default_factory=DedupDetail)

    @property
    def key(self) -> tuple[str, str]:
        """Order-independent key of the compared pair."""
        return pair_key(*self.component_ids)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "component_ids": list(self.component_ids),
            "common_properties": [prop.to_dict() for prop in self.common_properties],
            "common_structure": (
                self.common_structure.to_dict() if self.common_structure else None
            ),
            "similarity_score": self.similarity_score,
            "breakdown": self.breakdown.to_dict(),
            "dedup_detail": self.dedup_detail.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PairwiseResult":
        """Create from dictionary."""
        id_a, id_b = data["component_ids"]
        structure = data.get("common_structure")
        return cls(
            component_ids=(id_a, id_b),
            common_properties=[
                PropertySignature.from_dict(p) for p in data.get("common_properties", [])
            ],
            common_structure=ElementNode.from_dict(structure) if structure else None,
            similarity_score=data.get("similarity_score", 0.0),
            breakdown=SimilarityBreakdown.from_dict(data.get("breakdown", {})),
            dedup_detail=DedupDetail.from_dict(data.get("dedup_detail", {})),
        )


@dataclass
class ComponentGroup:
    """A connected group of similar components.

    ``member_ids`` is the union of the contained results' ids, in first-seen
    order. ``internal_matrix`` holds one score per unordered member pair,
    keyed by the sorted id pair; pairs without a direct measurement carry
    an estimate and are listed in ``estimated_pairs``.
    """

    group_id: str
    member_ids: list[str] = field(default_factory=list)
    similarities: list[PairwiseResult] = field(default_factory=list)
    common_properties: list[PropertySignature] = field(default_factory=list)
    common_structure: ElementNode | None = None
    similarity_score: float = 0.0
    internal_matrix: dict[tuple[str, str], float] = field(default_factory=dict)
    estimated_pairs: set[tuple[str, str]] = field(default_factory=set)

    @property
    def size(self) -> int:
        """Number of member components."""
        return len(self.member_ids)

    @property
    def members(self) -> frozenset[str]:
        return frozenset(self.member_ids)

    def similarity(self, id_a: str, id_b: str) -> float | None:
        """Look up the internal score of a member pair in either order."""
        if id_a == id_b:
            return 1.0 if id_a in self.members else None
        return self.internal_matrix.get(pair_key(id_a, id_b))

    def to_matrix(self) -> np.ndarray:
        """Dense symmetric matrix in ``member_ids`` order, 1.0 on the diagonal."""
        n = len(self.member_ids)
        matrix = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                score = self.similarity(self.member_ids[i], self.member_ids[j])
                value = score if score is not None else 0.0
                matrix[i, j] = value
                matrix[j, i] = value
        return matrix

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "group_id": self.group_id,
            "member_ids": list(self.member_ids),
            "similarities": [result.to_dict() for result in self.similarities],
            "common_properties": [prop.to_dict() for prop in self.common_properties],
            "common_structure": (
                self.common_structure.to_dict() if self.common_structure else None
            ),
            "similarity_score": self.similarity_score,
            "internal_matrix": [
                {
                    "source": source,
                    "target": target,
                    "score": score,
                    "estimated": (source, target) in self.estimated_pairs,
                }
                for (source, target), score in self.internal_matrix.items()
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ComponentGroup":
        """Create from dictionary."""
        structure = data.get("common_structure")
        matrix: dict[tuple[str, str], float] = {}
        estimated: set[tuple[str, str]] = set()
        for entry in data.get("internal_matrix", []):
            key = pair_key(entry["source"], entry["target"])
            matrix[key] = entry["score"]
            if entry.get("estimated"):
                estimated.add(key)
        return cls(
            group_id=data["group_id"],
            member_ids=list(data.get("member_ids", [])),
            similarities=[
                PairwiseResult.from_dict(r) for r in data.get("similarities", [])
            ],
            common_properties=[
                PropertySignature.from_dict(p) for p in data.get("common_properties", [])
            ],
            common_structure=ElementNode.from_dict(structure) if structure else None,
            similarity_score=data.get("similarity_score", 0.0),
            internal_matrix=matrix,
            estimated_pairs=estimated,
        )
