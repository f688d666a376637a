"""Tests for input field length analysis."""

from registry_loader.models.raw import RawRecord
from registry_loader.reporting import analyze_field_lengths


class TestAnalyzeFieldLengths:
    def test_reports_long_fields_longest_first(self) -> None:
        records = [
            RawRecord(data={"mcp_name": "a", "mcp_description": "x" * 150, "app_slug": "s" * 120}, position=0),
            RawRecord(data={"mcp_name": "b", "mcp_description": "y" * 300}, position=1),
        ]
        stats = analyze_field_lengths(records)
        assert [s.name for s in stats] == ["mcp_description", "app_slug"]

        description = stats[0]
        assert description.max_length == 300
        assert description.longest_record == "b"
        assert description.over_threshold == 2
        assert description.declared_limit is None

    def test_declared_limit_overruns(self) -> None:
        records = [RawRecord(data={"app_slug": "s" * 120}, position=0)]
        (slug,) = analyze_field_lengths(records)
        assert slug.declared_limit == 100
        assert slug.over_limit == 1
        assert slug.longest_record == "<record 1>"

    def test_nothing_over_threshold(self) -> None:
        records = [RawRecord(data={"mcp_name": "short"}, position=0)]
        assert analyze_field_lengths(records) == []

    def test_custom_threshold_and_none_values(self) -> None:
        records = [RawRecord(data={"mcp_name": "twelve chars", "app_domain": None}, position=0)]
        stats = analyze_field_lengths(records, threshold=10)
        assert [s.name for s in stats] == ["mcp_name"]

    def test_samples_capped(self) -> None:
        records = [RawRecord(data={"mcp_purpose": "p" * (101 + i)}, position=i) for i in range(5)]
        (purpose,) = analyze_field_lengths(records)
        assert len(purpose.samples) == 3
        assert purpose.samples[0][0] == 105
