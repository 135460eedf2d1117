"""Tests for attention.store -- INI read/write of attribute stores."""

# pylint: disable=missing-class-docstring,missing-function-docstring

from __future__ import annotations

from pathlib import Path

import pytest

from attention.store import (
    MalformedStoreError,
    format_value,
    parse_text,
    read_raw,
    read_store,
    render_text,
    to_numeric,
    write_raw,
)

SAMPLE = """\
[Operator]
event_processing_works=0.0

[TechnicalDebt]
code_coverage = 0.3

[File:event_processor.rb]
git_object_id=ce013625030ba8dba906f756967f9e9ca394464a
review_status=0.0
"""


class TestParse:
    def test_sections_and_order(self) -> None:
        data = parse_text(SAMPLE)
        assert list(data) == ["Operator", "TechnicalDebt", "File:event_processor.rb"]
        assert data["TechnicalDebt"] == {"code_coverage": "0.3"}

    def test_key_case_preserved(self) -> None:
        data = parse_text("[Facet]\nCamelKey=1.0\n")
        assert "CamelKey" in data["Facet"]

    def test_default_section_is_ordinary(self) -> None:
        data = parse_text("[Default]\nx=0.5\n[Other]\ny=0.1\n")
        assert data["Default"] == {"x": "0.5"}
        assert data["Other"] == {"y": "0.1"}

    def test_comments_ignored(self) -> None:
        data = parse_text("; note\n[A]\n# other note\nk=1\n")
        assert data == {"A": {"k": "1"}}

    def test_key_before_section(self) -> None:
        with pytest.raises(MalformedStoreError):
            parse_text("orphan=1.0\n")

    def test_line_without_value(self) -> None:
        with pytest.raises(MalformedStoreError):
            parse_text("[A]\njust a line\n")

    def test_duplicate_section(self) -> None:
        with pytest.raises(MalformedStoreError):
            parse_text("[A]\nk=1\n[A]\nk=2\n")


class TestNumeric:
    def test_identity_dropped(self) -> None:
        data = to_numeric(parse_text(SAMPLE))
        assert data["File:event_processor.rb"] == {"review_status": 0.0}
        assert data["TechnicalDebt"]["code_coverage"] == pytest.approx(0.3)

    def test_float_like_identity_dropped(self) -> None:
        raw = {
            "File:a.rb": {"git_object_id": "1234567890" * 4, "review_status": "0.5"},
            "File:b.rb": {"git_object_id": "123e4567" + "0" * 32},
        }
        assert to_numeric(raw) == {"File:a.rb": {"review_status": 0.5}, "File:b.rb": {}}

    def test_empty_section_kept(self) -> None:
        assert to_numeric(parse_text("[Empty]\n")) == {"Empty": {}}


class TestRender:
    def test_no_spaces_around_equals(self) -> None:
        text = render_text({"A": {"k": 0.5}})
        assert text == "[A]\nk=0.5\n"

    def test_blank_line_between_sections(self) -> None:
        text = render_text({"A": {"k": "1.0"}, "B": {"j": "0.0"}})
        assert text == "[A]\nk=1.0\n\n[B]\nj=0.0\n"

    def test_empty(self) -> None:
        assert render_text({}) == ""

    def test_format_value(self) -> None:
        assert format_value(0.0) == "0.0"
        assert format_value(1) == "1.0"
        assert format_value("0.30") == "0.30"


class TestFiles:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert read_raw(tmp_path / "Attributes.ini") == {}
        assert read_store(tmp_path / "Attributes.ini") == {}

    def test_round_trip_preserves_text(self, tmp_path: Path) -> None:
        path = tmp_path / "Attributes.ini"
        path.write_text(SAMPLE)
        data = read_raw(path)
        data["Operator"]["event_processing_works"] = format_value(0.25)
        write_raw(path, data)

        again = read_raw(path)
        assert list(again) == list(data)
        assert again["Operator"]["event_processing_works"] == "0.25"
        assert again["TechnicalDebt"]["code_coverage"] == "0.3"

    def test_write_creates_parent(self, tmp_path: Path) -> None:
        path = tmp_path / "new" / "dir" / "Priorities.ini"
        write_raw(path, {"A": {"k": 1.0}})
        assert read_store(path) == {"A": {"k": 1.0}}

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        write_raw(tmp_path / "Attributes.ini", {"A": {"k": 1.0}})
        assert [p.name for p in tmp_path.iterdir()] == ["Attributes.ini"]

    def test_binary_garbage(self, tmp_path: Path) -> None:
        path = tmp_path / "Attributes.ini"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(MalformedStoreError):
            read_raw(path)
