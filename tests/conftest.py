"""Pytest fixtures for registry-loader tests."""

import json
import tempfile
from pathlib import Path
from typing import Any, Optional

import pytest

from registry_loader.errors import TransactionError
from registry_loader.models.raw import RawRecord
from registry_loader.store import DestinationStore, SQLiteServerStore


def make_record_data(name: Optional[str] = "Context7 MCP Server", **overrides: Any) -> dict[str, Any]:
    """Realistic raw record as it appears in an import file."""
    data: dict[str, Any] = {
        "mcp_name": name,
        "mcp_description": "Up-to-date code documentation for LLMs",
        "mcp_server_primary_category": "Developer Tools",
        "mcp_server_secondary_categories_json": "{Documentation,Search}",
        "provider_name": "Upstash, Inc.",
        "provider_is_official": True,
        "metadata_record_created_at": "2025-06-01 12:30:45.123456+00",
        "metadata_record_updated_at": "2025-06-02 08:00:00+00",
        "mcp_server_type_json": "{LOCAL_STDIO}",
        "mcp_features_json": '{"Version-specific docs","Code examples, snippets"}',
        "tools_count": 2,
        "tools_definitions_json": json.dumps(
            [
                {"name": "resolve-library-id", "desc": "Resolve a package name"},
                {"name": "get-library-docs", "desc": "Fetch docs"},
            ]
        ),
        "repo_full_name": "upstash/context7",
        "repo_stargazers_count": 1200,
        "repo_primary_language": "TypeScript",
        "repo_topics_json": "{mcp,documentation}",
        "repo_created_at": "2025-03-26 00:00:00+00",
    }
    if name is None:
        data.pop("mcp_name")
    data.update(overrides)
    return data


def make_record(name: Optional[str] = "Context7 MCP Server", position: int = 0, **overrides: Any) -> RawRecord:
    return RawRecord(data=make_record_data(name, **overrides), position=position)


@pytest.fixture
def sample_record() -> RawRecord:
    """One well-formed raw record."""
    return make_record()


@pytest.fixture
def temp_db() -> Path:
    """Temporary database path for isolated tests."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    path.unlink(missing_ok=True)


@pytest.fixture
def store(temp_db: Path) -> SQLiteServerStore:
    """SQLiteServerStore with temporary database."""
    return SQLiteServerStore(temp_db)


@pytest.fixture
def records_file(tmp_path: Path):
    """Write a list of record dicts to a JSON file and return its path."""

    def _write(records: list, name: str = "import.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(records), encoding="utf-8")
        return path

    return _write


class FlakyStore(DestinationStore):
    """
    In-memory store that can fail the control plane on demand.
    fail_begin_on / fail_commit_on are 1-based batch numbers;
    fail_insert_on is a set of row keys whose INSERT drops the connection.
    """

    def __init__(
        self,
        existing: Optional[set[str]] = None,
        *,
        fail_begin_on: Optional[set[int]] = None,
        fail_commit_on: Optional[set[int]] = None,
        fail_insert_on: Optional[set[str]] = None,
    ):
        self.existing = set(existing or ())
        self.fail_begin_on = fail_begin_on or set()
        self.fail_commit_on = fail_commit_on or set()
        self.fail_insert_on = fail_insert_on or set()
        self.committed: list[dict[str, Any]] = []
        self.pending: list[dict[str, Any]] = []
        self.calls: list[str] = []
        self.batch = 0
        self.connected = False

    def connect(self) -> None:
        self.calls.append("connect")
        self.connected = True

    def close(self) -> None:
        self.calls.append("close")
        self.connected = False

    def existing_keys(self) -> set[str]:
        return set(self.existing)

    def begin(self) -> None:
        self.batch += 1
        self.calls.append("begin")
        if self.batch in self.fail_begin_on:
            raise TransactionError("cannot begin")
        self.pending = []

    def commit(self) -> None:
        self.calls.append("commit")
        if self.batch in self.fail_commit_on:
            raise TransactionError("connection lost during commit")
        self.committed.extend(self.pending)
        self.pending = []

    def rollback(self) -> None:
        self.calls.append("rollback")
        self.pending = []

    def insert_row(self, values) -> None:
        self.calls.append("insert")
        if values.get("mcp_name") in self.fail_insert_on:
            raise TransactionError("server closed the connection unexpectedly")
        self.pending.append(dict(values))

    @property
    def committed_names(self) -> list[str]:
        return [r["mcp_name"] for r in self.committed]
