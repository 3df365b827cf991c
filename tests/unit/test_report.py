"""Tests for report assembly and output."""

import json
from pathlib import Path

import pytest

from tests.conftest import make_result
from ui_dedup.report import DeduplicationReport, assemble_report, build_group_report
from ui_dedup.similarity.clustering import cluster
from ui_dedup.similarity.comparator import ComponentComparator


@pytest.fixture
def profile_group(profile_card, compact_profile_card, member_card):
    """Group built from the three profile card variants."""
    comparator = ComponentComparator()
    results = [
        comparator.compare(profile_card, compact_profile_card),
        comparator.compare(profile_card, member_card),
        comparator.compare(compact_profile_card, member_card),
    ]
    return cluster(results)[0]


class TestGroupReport:
    """Tests for per-group merging of comparison details."""

    def test_members_from_details(self, profile_group, profile_card) -> None:
        report = build_group_report(profile_group)
        assert [m.name for m in report.members] == [
            "ProfileCard",
            "CompactProfileCard",
            "MemberCard",
        ]
        assert report.members[0].file_path == profile_card.file_path

    def test_members_fall_back_to_id(self) -> None:
        """Test ids are parsed when no detail describes a member."""
        group = cluster([make_result("src/a/Card.tsx#UserCard", "src/b/Card.tsx#TeamCard", 0.9)])[0]
        report = build_group_report(group)
        assert [m.name for m in report.members] == ["UserCard", "TeamCard"]

    def test_shared_properties_used_in_all_members(self, profile_group) -> None:
        report = build_group_report(profile_group)
        assert [p.name for p in report.shared_properties] == ["user", "onSelect"]
        assert set(report.shared_properties[0].used_in) == set(profile_group.member_ids)

    def test_shared_structure(self, profile_group) -> None:
        report = build_group_report(profile_group)
        assert report.shared_root_tag == "section"
        assert report.shared_structure[0] == "section"
        assert report.shared_class_names == ["card", "shadow"]

    def test_differences_merged(self, profile_group, compact_profile_card, profile_card) -> None:
        """Test unique props merged across results without duplicates."""
        report = build_group_report(profile_group)
        compact_props = report.unique_properties[compact_profile_card.id]
        assert [p.name for p in compact_props] == ["compact"]
        assert report.unique_properties[profile_card.id] == []

    def test_internal_similarities(self) -> None:
        """Test one entry per member pair with estimate flags."""
        group = cluster([make_result("a", "b", 0.9), make_result("b", "c", 0.85)])[0]
        report = build_group_report(group)
        assert len(report.internal_similarities) == 3
        assert report.estimated_count == 1
        estimated = [e for e in report.internal_similarities if e.estimated]
        assert (estimated[0].source, estimated[0].target) == ("a", "c")

    def test_similarity_matrix(self) -> None:
        """Test the dense grid follows member order and includes estimates."""
        group = cluster([make_result("a", "b", 0.9), make_result("b", "c", 0.85)])[0]
        report = build_group_report(group)
        assert report.similarity_matrix == [
            [1.0, 0.9, 0.7],
            [0.9, 1.0, 0.85],
            [0.7, 0.85, 1.0],
        ]
        assert report.weakest_pair_score == 0.7
        data = report.to_dict()
        assert data["similarity_matrix"]["members"] == ["a", "b", "c"]
        assert data["weakest_pair_score"] == 0.7


class TestDeduplicationReport:
    """Tests for report serialization and text output."""

    def test_empty_report(self) -> None:
        report = assemble_report([])
        assert report.group_count == 0
        assert "No duplicate components found" in report.format_text()

    def test_to_dict_summary(self, profile_group) -> None:
        report = assemble_report([profile_group], {"comparisons": 6})
        data = report.to_dict()
        assert data["summary"] == {"group_count": 1, "component_count": 3}
        assert data["stats"]["comparisons"] == 6
        group = data["groups"][0]
        assert group["commonalities"]["structure"]["shared_root_tag"] == "section"
        assert len(group["internal_similarities"]) == 3

    def test_write(self, tmp_path: Path, profile_group) -> None:
        """Test the JSON file is written with parent directories."""
        path = assemble_report([profile_group]).write(tmp_path / "out" / "report.json")
        data = json.loads(path.read_text())
        assert data["summary"]["group_count"] == 1

    def test_format_text(self, profile_group, profile_card) -> None:
        text = assemble_report(
            [profile_group], {"comparisons": 6, "gated_comparisons": 1}
        ).format_text()
        assert "Group 1: score 0.91, 3 components" in text
        assert profile_card.id in text
        assert "shared properties: user: User, onSelect: () => void" in text
        assert "1 duplicate group(s) covering 3 component(s)" in text
        assert "weakest pair: 0.87" in text
        assert "6 comparisons (1 gated)" in text
        assert "\033[" not in text

    def test_format_text_color(self, profile_group) -> None:
        assert "\033[1m" in DeduplicationReport(
            groups=[build_group_report(profile_group)]
        ).format_text(use_color=True)
