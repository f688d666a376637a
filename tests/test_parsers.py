"""Unit tests for the tolerant field parsers."""

import json
import logging

import pytest

from registry_loader.mapping.parsers import (
    LOG_PREVIEW_CHARS,
    normalize_timestamp,
    parse_legacy_json,
    to_json_text,
    truncate_field,
)


class TestParseLegacyJson:
    """Tests for parse_legacy_json."""

    @pytest.mark.parametrize(
        "text",
        ['["a", "b"]', '{"key": [1, 2]}', "[]", "42", '"plain"', "true"],
    )
    def test_valid_json_matches_json_loads(self, text: str) -> None:
        """Valid JSON decodes exactly as json.loads would."""
        assert parse_legacy_json(text) == json.loads(text)

    def test_empty_braces(self) -> None:
        """{} decodes to an empty list, not None and not an empty dict."""
        assert parse_legacy_json("{}") == []
        assert parse_legacy_json("{ }") == []

    def test_single_unquoted_item(self) -> None:
        assert parse_legacy_json("{A}") == ["A"]

    def test_unquoted_list(self) -> None:
        assert parse_legacy_json("{A,B}") == ["A", "B"]

    def test_unquoted_list_trims_tokens(self) -> None:
        assert parse_legacy_json("{ LOCAL_STDIO , REMOTE_HTTP_SSE }") == ["LOCAL_STDIO", "REMOTE_HTTP_SSE"]

    def test_comma_inside_quotes_is_not_a_separator(self) -> None:
        assert parse_legacy_json('{"A,B","C"}') == ["A,B", "C"]

    def test_mixed_quoted_and_unquoted(self) -> None:
        assert parse_legacy_json('{plain,"with, comma"}') == ["plain", "with, comma"]

    @pytest.mark.parametrize("value", [None, "", "null", "   "])
    def test_absent_values_return_none(self, value) -> None:
        assert parse_legacy_json(value) is None

    def test_decoded_values_pass_through(self) -> None:
        """Already-decoded input is returned unchanged."""
        value = [{"name": "tool"}]
        assert parse_legacy_json(value) is value
        assert parse_legacy_json(7) == 7

    def test_idempotent_on_canonical_json(self) -> None:
        once = to_json_text(parse_legacy_json("{A,B}"))
        assert parse_legacy_json(once) == ["A", "B"]

    def test_garbage_returns_none_and_logs_bounded_preview(self, caplog) -> None:
        """Unrecoverable input logs a warning with at most the preview length."""
        garbage = "not json " + "x" * 500
        with caplog.at_level(logging.WARNING):
            assert parse_legacy_json(garbage, field="mcp_features_json") is None
        assert "mcp_features_json" in caplog.text
        assert "x" * (LOG_PREVIEW_CHARS + 1) not in caplog.text

    def test_unbalanced_brace_returns_none(self) -> None:
        assert parse_legacy_json("{A,B") is None


class TestToJsonText:
    """Tests for to_json_text."""

    def test_none_stays_none(self) -> None:
        assert to_json_text(None) is None

    def test_list_serialized(self) -> None:
        assert to_json_text(["A", "B"]) == '["A", "B"]'

    def test_non_ascii_kept(self) -> None:
        assert to_json_text(["café"]) == '["café"]'

    def test_unserializable_returns_none(self) -> None:
        assert to_json_text({"bad": object()}) is None


class TestNormalizeTimestamp:
    """Tests for normalize_timestamp."""

    def test_legacy_format_with_microseconds(self) -> None:
        assert normalize_timestamp("2025-06-01 12:30:45.123456+00") == "2025-06-01T12:30:45.123456+00:00"

    def test_legacy_format_without_fraction(self) -> None:
        assert normalize_timestamp("2025-06-02 08:00:00+00") == "2025-06-02T08:00:00+00:00"

    def test_non_utc_offset_converted_to_utc(self) -> None:
        assert normalize_timestamp("2025-06-02 08:00:00-05") == "2025-06-02T13:00:00+00:00"

    def test_naive_taken_as_utc(self) -> None:
        assert normalize_timestamp("2025-06-02 08:00:00") == "2025-06-02T08:00:00+00:00"

    @pytest.mark.parametrize(
        "value",
        [
            "2025-06-01 12:30:45.123456+00",
            "2025-06-02 08:00:00-05",
            "2025-06-02T08:00:00Z",
            "2025-06-02",
        ],
    )
    def test_idempotent(self, value: str) -> None:
        once = normalize_timestamp(value)
        assert once is not None
        assert normalize_timestamp(once) == once

    @pytest.mark.parametrize("value", [None, "", "null"])
    def test_empty_returns_none(self, value) -> None:
        assert normalize_timestamp(value) is None

    def test_garbage_returns_none(self) -> None:
        assert normalize_timestamp("last tuesday") is None


class TestTruncateField:
    """Tests for truncate_field."""

    def test_within_limit_unchanged(self) -> None:
        assert truncate_field("short", 10, "repo_platform") == "short"

    def test_exact_limit_unchanged(self) -> None:
        assert truncate_field("x" * 20, 20, "repo_license_spdx_id") == "x" * 20

    def test_over_limit_cut_and_logged(self, caplog) -> None:
        with caplog.at_level(logging.INFO):
            result = truncate_field("y" * 300, 255, "mcp_name")
        assert result == "y" * 255
        assert "mcp_name" in caplog.text
        assert "300 -> 255" in caplog.text

    @pytest.mark.parametrize("length", [0, 1, 49, 50, 51, 500])
    def test_never_longer_than_max(self, length: int) -> None:
        assert len(truncate_field("z" * length, 50, "f")) <= 50

    def test_none_passes_through(self) -> None:
        assert truncate_field(None, 10, "app_slug") is None

    def test_non_string_converted(self) -> None:
        assert truncate_field(123456, 3, "repo_platform") == "123"
