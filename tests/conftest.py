"""
Shared fixtures for the ui-dedup test suite.

Provides:
- Element tree and component record factories
- A small component set with one near-duplicate family
- Component files on disk for loader and CLI tests
"""

import json
import logging
from pathlib import Path

import pytest

from ui_dedup.config.thresholds import SimilarityThresholds
from ui_dedup.models import (
    ComponentGroup,
    ComponentRecord,
    ElementNode,
    PairwiseResult,
    PropertySignature,
)

# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def el(tag: str, *children: ElementNode, class_name: str | None = None, **props: str):
    """Build an element node; keyword props become ``name -> type`` signatures."""
    properties = [PropertySignature(name, value) for name, value in props.items()]
    if class_name is not None:
        properties.insert(0, PropertySignature("className", f'"{class_name}"'))
    return ElementNode(tag_name=tag, properties=tuple(properties), children=children)


def make_component(
    name: str,
    tree: ElementNode | None = None,
    props: dict[str, str] | None = None,
    file_path: str | None = None,
) -> ComponentRecord:
    """Build a component record with an id derived from its path and name."""
    file_path = file_path or f"src/components/{name}.tsx"
    properties = (
        [PropertySignature(prop, prop_type) for prop, prop_type in props.items()]
        if props is not None
        else None
    )
    return ComponentRecord(
        id=ComponentRecord.make_id(file_path, name),
        name=name,
        file_path=file_path,
        properties=properties,
        element_tree=tree,
    )


def make_result(id_a: str, id_b: str, score: float, tag: str = "section") -> PairwiseResult:
    """Build a pairwise result without running the comparator."""
    return PairwiseResult(
        component_ids=(id_a, id_b),
        common_structure=ElementNode(tag_name=tag),
        similarity_score=score,
    )


def make_group(group_id: str, members: list[str], score: float) -> ComponentGroup:
    """Build a group with the given members and score."""
    return ComponentGroup(group_id=group_id, member_ids=list(members), similarity_score=score)


def profile_tree() -> ElementNode:
    """Non-generic card markup with a nested avatar and action button."""
    return el(
        "section",
        el("header", el("Avatar"), el("h2")),
        el("article"),
        el("footer", el("IconButton")),
        class_name="card shadow",
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def thresholds() -> SimilarityThresholds:
    """Default thresholds."""
    return SimilarityThresholds()


@pytest.fixture
def profile_card() -> ComponentRecord:
    return make_component(
        "ProfileCard",
        profile_tree(),
        {"user": "User", "onSelect": "() => void"},
        "src/components/cards/ProfileCard.tsx",
    )


@pytest.fixture
def compact_profile_card() -> ComponentRecord:
    return make_component(
        "CompactProfileCard",
        profile_tree(),
        {"user": "User", "onSelect": "() => void", "compact": "boolean"},
        "src/components/cards/CompactProfileCard.tsx",
    )


@pytest.fixture
def member_card() -> ComponentRecord:
    return make_component(
        "MemberCard",
        profile_tree(),
        {"user": "User", "onSelect": "() => void"},
        "src/components/team/MemberCard.tsx",
    )


@pytest.fixture
def login_form() -> ComponentRecord:
    return make_component(
        "LoginForm",
        el("form", el("Input"), el("Input"), el("Button")),
        {"onSubmit": "() => void"},
        "src/components/auth/LoginForm.tsx",
    )


@pytest.fixture
def sample_components(
    profile_card, compact_profile_card, member_card, login_form
) -> list[ComponentRecord]:
    """Three near-duplicate profile cards and one unrelated form."""
    return [profile_card, compact_profile_card, member_card, login_form]


@pytest.fixture
def components_file(tmp_path: Path, sample_components) -> Path:
    """Sample components written as a camelCase JSON array."""
    path = tmp_path / "components.json"
    path.write_text(json.dumps([camel_record(c) for c in sample_components]))
    return path


def camel_record(record: ComponentRecord) -> dict:
    """Record in the camelCase shape the extractor writes."""

    def node(n: ElementNode) -> dict:
        return {
            "tagName": n.tag_name,
            "props": [{"name": p.name, "type": p.type} for p in n.properties],
            "children": [node(child) for child in n.children],
        }

    return {
        "name": record.name,
        "filePath": record.file_path,
        "props": [
            {"name": p.name, "type": p.type, "isRequired": p.required}
            for p in record.properties or []
        ],
        "elementTree": node(record.element_tree) if record.element_tree else None,
    }


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by setup_logging so streams do not leak between tests."""
    yield
    logger = logging.getLogger("ui_dedup")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
