"""Tests for loading component records."""

import json
from pathlib import Path

import pytest

from ui_dedup.errors import InputError
from ui_dedup.loader import load_components, parse_components


class TestLoadComponents:
    """Tests for file formats accepted by load_components."""

    def test_json_array(self, components_file: Path) -> None:
        """Test camelCase records from the extractor."""
        records = load_components(components_file)
        assert [r.name for r in records] == [
            "ProfileCard",
            "CompactProfileCard",
            "MemberCard",
            "LoginForm",
        ]
        assert records[0].id == "src/components/cards/ProfileCard.tsx#ProfileCard"
        assert records[0].element_tree.tag_name == "section"
        assert records[0].element_tree.get_property("className").type == '"card shadow"'

    def test_components_object(self, tmp_path: Path) -> None:
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"components": [{"name": "Badge", "filePath": "Badge.tsx"}]}))
        assert load_components(path)[0].id == "Badge.tsx#Badge"

    def test_json_lines(self, tmp_path: Path) -> None:
        """Test one record per line, skipping blank lines."""
        path = tmp_path / "components.jsonl"
        path.write_text(
            '{"name": "A", "filePath": "a.tsx"}\n\n{"name": "B", "filePath": "b.tsx", "id": "b"}\n'
        )
        records = load_components(path)
        assert [r.id for r in records] == ["a.tsx#A", "b"]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(InputError) as exc_info:
            load_components(tmp_path / "missing.json")
        assert exc_info.value.exit_code == 1

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("[{")
        with pytest.raises(InputError):
            load_components(path)

    def test_invalid_json_line(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.jsonl"
        path.write_text('{"name": "A"}\nnot json\n')
        with pytest.raises(InputError, match="line 2"):
            load_components(path)

    def test_record_without_name(self, tmp_path: Path) -> None:
        """Test malformed records are reported with their index."""
        path = tmp_path / "nameless.json"
        path.write_text(json.dumps([{"name": "A"}, {"filePath": "b.tsx"}]))
        with pytest.raises(InputError, match="#1"):
            load_components(path)

    def test_scalar_payload(self) -> None:
        with pytest.raises(InputError):
            parse_components(42)

    def test_partial_records_accepted(self) -> None:
        """Test records without props or trees load with None."""
        records = parse_components([{"name": "Empty", "filePath": "e.tsx"}])
        assert records[0].properties is None
        assert records[0].element_tree is None
