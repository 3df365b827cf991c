"""Tests for component deduplication data models."""

import numpy as np
import pytest

from tests.conftest import el, make_component
from ui_dedup.models import (
    ComponentGroup,
    ComponentInfo,
    ComponentRecord,
    ElementNode,
    PairwiseResult,
    PropertySignature,
    pair_key,
)


class TestPropertySignature:
    """Tests for PropertySignature."""

    def test_key_is_name_and_type(self) -> None:
        """Test that matching identity ignores the required flag."""
        a = PropertySignature("label", "string", required=True)
        b = PropertySignature("label", "string", required=False)
        assert a.key == b.key == ("label", "string")

    def test_from_dict_accepts_is_required(self) -> None:
        """Test camelCase isRequired from the extractor."""
        prop = PropertySignature.from_dict(
            {"name": "onClick", "type": "() => void", "isRequired": True}
        )
        assert prop.required is True
        assert prop.type == "() => void"


class TestElementNode:
    """Tests for ElementNode trees."""

    def test_children_coerced_to_tuple(self) -> None:
        """Test that lists passed as children are stored immutably."""
        node = ElementNode("div", children=[ElementNode("span")])
        assert isinstance(node.children, tuple)

    def test_iter_nodes_preorder_with_paths(self) -> None:
        """Test pre-order traversal with depths and positional paths."""
        tree = el("div", el("header", el("h1")), el("footer"))
        visited = [(n.tag_name, depth, path) for n, depth, path in tree.iter_nodes()]
        assert visited == [
            ("div", 0, ""),
            ("header", 1, "children[0]"),
            ("h1", 2, "children[0].children[0]"),
            ("footer", 1, "children[1]"),
        ]

    def test_node_count_and_tag_names(self) -> None:
        """Test node helpers."""
        tree = el("Card", el("CardHeader"), el("CardContent", el("p")))
        assert tree.node_count() == 4
        assert tree.tag_names() == ["Card", "CardHeader", "CardContent", "p"]

    def test_from_dict_camel_case(self) -> None:
        """Test tagName/props keys."""
        node = ElementNode.from_dict(
            {
                "tagName": "div",
                "props": [{"name": "className", "type": '"row"'}],
                "children": [{"tagName": "span"}],
            }
        )
        assert node.tag_name == "div"
        assert node.get_property("className").type == '"row"'
        assert node.children[0].tag_name == "span"


class TestComponentRecord:
    """Tests for ComponentRecord."""

    def test_id_generated_from_path_and_name(self) -> None:
        """Test the <filePath>#<name> id when none is given."""
        record = ComponentRecord.from_dict(
            {"name": "Button", "filePath": "src/ui/Button.tsx"}
        )
        assert record.id == "src/ui/Button.tsx#Button"
        assert record.properties is None
        assert record.element_tree is None

    def test_round_trip(self) -> None:
        """Test to_dict / from_dict preserve the record."""
        record = make_component("Badge", el("span", class_name="badge"), {"tone": "string"})
        assert ComponentRecord.from_dict(record.to_dict()) == record


class TestComponentInfo:
    """Tests for ComponentInfo id parsing."""

    def test_from_id_with_hash(self) -> None:
        info = ComponentInfo.from_id("src/a/Card.tsx#UserCard")
        assert info.name == "UserCard"
        assert info.file_path == "src/a/Card.tsx"

    def test_from_id_plain_path(self) -> None:
        info = ComponentInfo.from_id("src/a/Card.tsx")
        assert info.name == "Card"


class TestComponentGroup:
    """Tests for ComponentGroup lookups and serialization."""

    @pytest.fixture
    def group(self) -> ComponentGroup:
        return ComponentGroup(
            group_id="g1",
            member_ids=["b", "a", "c"],
            similarities=[PairwiseResult(component_ids=("b", "a"), similarity_score=0.9)],
            similarity_score=0.9,
            internal_matrix={
                pair_key("a", "b"): 0.9,
                pair_key("a", "c"): 0.72,
                pair_key("b", "c"): 0.72,
            },
            estimated_pairs={pair_key("a", "c"), pair_key("b", "c")},
        )

    def test_similarity_either_order(self, group) -> None:
        """Test that pair lookup is order independent."""
        assert group.similarity("a", "b") == group.similarity("b", "a") == 0.9
        assert group.similarity("a", "a") == 1.0
        assert group.similarity("a", "zzz") is None

    def test_to_matrix(self, group) -> None:
        """Test dense symmetric matrix in member order."""
        matrix = group.to_matrix()
        assert matrix.shape == (3, 3)
        assert np.allclose(np.diag(matrix), 1.0)
        assert np.allclose(matrix, matrix.T)
        assert matrix[0, 1] == pytest.approx(0.9)  # b, a

    def test_to_dict_flags_estimates(self, group) -> None:
        """Test that serialized matrix entries carry the estimated flag."""
        entries = {(e["source"], e["target"]): e for e in group.to_dict()["internal_matrix"]}
        assert entries[("a", "b")]["estimated"] is False
        assert entries[("a", "c")]["estimated"] is True

    def test_round_trip(self, group) -> None:
        """Test from_dict restores matrix and estimates."""
        restored = ComponentGroup.from_dict(group.to_dict())
        assert restored.internal_matrix == group.internal_matrix
        assert restored.estimated_pairs == group.estimated_pairs
        assert restored.member_ids == group.member_ids
