"""Tests for reading import batches from files and URLs."""

import json

import httpx
import pytest

from registry_loader.errors import InputReadError
from registry_loader.input_reader import load_json, read_records, read_scoring
from tests.conftest import make_record_data


def mock_client(payload, status_code: int = 200) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        if isinstance(payload, str):
            return httpx.Response(status_code, text=payload)
        return httpx.Response(status_code, json=payload)

    return httpx.Client(transport=httpx.MockTransport(handler))


class TestReadRecords:
    def test_reads_array_in_order(self, records_file) -> None:
        path = records_file([make_record_data("a"), make_record_data("b")])
        records = read_records(path)
        assert [r.name for r in records] == ["a", "b"]
        assert [r.position for r in records] == [0, 1]

    def test_single_object_is_one_record(self, records_file) -> None:
        path = records_file(make_record_data("solo"))
        assert [r.name for r in read_records(path)] == ["solo"]

    def test_limit(self, records_file) -> None:
        path = records_file([make_record_data(str(i)) for i in range(5)])
        assert len(read_records(path, limit=2)) == 2

    def test_non_object_entries_kept_as_empty(self, records_file) -> None:
        path = records_file([make_record_data("a"), "junk", 3])
        records = read_records(path)
        assert len(records) == 3
        assert records[1].data == {}
        assert records[2].label == "<record 3>"

    def test_scalar_document_rejected(self, records_file) -> None:
        with pytest.raises(InputReadError):
            read_records(records_file(42))

    def test_missing_file(self, tmp_path) -> None:
        with pytest.raises(InputReadError):
            read_records(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(InputReadError):
            read_records(path)


class TestUrls:
    def test_reads_from_url(self) -> None:
        client = mock_client([make_record_data("remote")])
        records = read_records("https://example.org/import.json", client=client)
        assert records[0].name == "remote"

    def test_http_error(self) -> None:
        client = mock_client({"error": "gone"}, status_code=404)
        with pytest.raises(InputReadError, match="HTTP 404"):
            load_json("https://example.org/import.json", client)

    def test_transport_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with pytest.raises(InputReadError):
            load_json("http://localhost:9/import.json", client)


class TestReadScoring:
    def test_scoring_key(self, tmp_path) -> None:
        path = tmp_path / "scoring.json"
        path.write_text(json.dumps({"scoring": [{"category": "Docs", "score": 8}]}), encoding="utf-8")
        assert read_scoring(path) == [{"category": "Docs", "score": 8}]

    def test_bare_array(self) -> None:
        client = mock_client([{"score": 1}])
        assert read_scoring("https://example.org/scoring.json", client=client) == [{"score": 1}]

    def test_no_scoring(self, tmp_path) -> None:
        path = tmp_path / "scoring.json"
        path.write_text(json.dumps({"other": 1}), encoding="utf-8")
        assert read_scoring(path) is None
