"""Tests for attention.models -- facet tagging and result types."""

# pylint: disable=missing-class-docstring,missing-function-docstring

from __future__ import annotations

from attention.models import (
    FILE_UNREADABLE,
    NO_TRACKABLE_FILES,
    FacetStatistics,
    FileFacet,
    IdentityResult,
    ManualFacet,
    ResolvedTree,
    SyncResult,
    parse_facet,
)


class TestFacets:
    def test_file_facet(self) -> None:
        facet = parse_facet("File:event_processor.rb")
        assert facet == FileFacet("event_processor.rb")
        assert facet.section == "File:event_processor.rb"

    def test_manual_facet(self) -> None:
        facet = parse_facet("TechnicalDebt")
        assert facet == ManualFacet("TechnicalDebt")
        assert facet.section == "TechnicalDebt"

    def test_prefix_is_case_sensitive(self) -> None:
        assert isinstance(parse_facet("file:x.rb"), ManualFacet)

    def test_filename_with_colon(self) -> None:
        assert parse_facet("File:a:b.rb") == FileFacet("a:b.rb")


class TestResults:
    def test_identity_success(self) -> None:
        assert IdentityResult(path="a", sha="0" * 40).success
        assert not IdentityResult(path="a", reason=FILE_UNREADABLE).success

    def test_sync_message(self) -> None:
        ok = SyncResult(directory=".", created=2, updated=1, total=3)
        assert ok.message == "Created 2 and updated 1 file facets in ."
        failed = SyncResult(directory="docs", success=False, reason=NO_TRACKABLE_FILES)
        assert NO_TRACKABLE_FILES in failed.message
        assert failed.to_dict()["success"] is False

    def test_statistics_total(self) -> None:
        stats = FacetStatistics(directory=".", file_facets=3, manual_facets=2)
        assert stats.total == 5

    def test_resolved_tree_paths(self) -> None:
        tree = ResolvedTree(attributes={"b": {}, "a": {}}, priorities={"c": {}, "a": {}})
        assert tree.paths() == ["a", "b", "c"]
