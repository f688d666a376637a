"""SQLite-backed servers store with explicit batch transactions and run history."""

import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Mapping, Optional

from registry_loader.errors import RowInsertError, StoreConnectionError, TransactionError
from registry_loader.models.row import MappedRow

from .base import DestinationStore

logger = logging.getLogger(__name__)

_INSERTABLE_COLUMNS = frozenset(MappedRow.model_fields)


class RunRecord:
    """Record of a load run."""

    def __init__(
        self,
        id: int,
        source: str,
        started_at: datetime,
        finished_at: Optional[datetime],
        status: str,
        items_total: int,
        items_inserted: int,
        items_skipped: int,
        items_failed: int,
    ):
        self.id = id
        self.source = source
        self.started_at = started_at
        self.finished_at = finished_at
        self.status = status
        self.items_total = items_total
        self.items_inserted = items_inserted
        self.items_skipped = items_skipped
        self.items_failed = items_failed


class SQLiteServerStore(DestinationStore):
    """
    SQLite store for mapped server rows.

    connect/begin/insert_row/commit/rollback/close drive the single run
    connection owned by the loader. Reads and run bookkeeping open their
    own short-lived connections.
    """

    def __init__(self, db_path: str | Path = "registry.db", *, timeout: float = 5.0):
        self._db_path = Path(db_path)
        self._timeout = timeout
        self._conn: Optional[sqlite3.Connection] = None
        self._ensure_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path, timeout=self._timeout)
        conn.row_factory = sqlite3.Row
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        try:
            with self._connection() as conn:
                conn.executescript(schema_path.read_text())
        except sqlite3.Error as e:
            raise StoreConnectionError(f"Cannot open store at {self._db_path}: {e}") from e

    # Run connection

    def connect(self) -> None:
        if self._conn is not None:
            return
        try:
            conn = sqlite3.connect(self._db_path, timeout=self._timeout, isolation_level=None)
        except sqlite3.Error as e:
            raise StoreConnectionError(f"Cannot connect to {self._db_path}: {e}") from e
        conn.row_factory = sqlite3.Row
        self._conn = conn
        logger.info("Connected to %s", self._db_path)

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        finally:
            self._conn = None
        logger.info("Connection to %s closed", self._db_path)

    def _require_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise TransactionError("Store is not connected")
        return self._conn

    def existing_keys(self) -> set[str]:
        conn = self._require_conn()
        try:
            rows = conn.execute("SELECT mcp_name FROM servers").fetchall()
        except sqlite3.Error as e:
            raise StoreConnectionError(f"Cannot read existing keys: {e}") from e
        return {r["mcp_name"] for r in rows}

    def begin(self) -> None:
        self._control("BEGIN")

    def commit(self) -> None:
        self._control("COMMIT")

    def rollback(self) -> None:
        self._control("ROLLBACK")

    def _control(self, statement: str) -> None:
        conn = self._require_conn()
        try:
            conn.execute(statement)
        except sqlite3.Error as e:
            raise TransactionError(f"{statement} failed: {e}") from e

    def insert_row(self, values: Mapping[str, Any]) -> None:
        """
        Insert one row inside a savepoint so a rejected statement leaves the
        rest of the batch transaction intact.
        """
        unknown = set(values) - _INSERTABLE_COLUMNS
        if unknown:
            raise RowInsertError(f"Unknown columns: {sorted(unknown)}")
        columns = list(values)
        sql = "INSERT INTO servers ({}) VALUES ({})".format(
            ", ".join(columns), ", ".join("?" for _ in columns)
        )
        conn = self._require_conn()
        try:
            conn.execute("SAVEPOINT row_insert")
            try:
                conn.execute(sql, [values[c] for c in columns])
            except (sqlite3.IntegrityError, sqlite3.InterfaceError, OverflowError) as e:
                # Constraint violations and values sqlite3 cannot bind reject only this row
                conn.execute("ROLLBACK TO SAVEPOINT row_insert")
                conn.execute("RELEASE SAVEPOINT row_insert")
                raise RowInsertError(str(e)) from e
            conn.execute("RELEASE SAVEPOINT row_insert")
        except sqlite3.Error as e:
            raise TransactionError(f"INSERT failed: {e}") from e

    # Reads

    def query(self, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        """Run a read-only query and return all rows."""
        with self._connection() as conn:
            return conn.execute(sql, params).fetchall()

    def _row_to_mapped(self, row: sqlite3.Row) -> MappedRow:
        return MappedRow.model_validate({k: row[k] for k in row.keys() if k in _INSERTABLE_COLUMNS})

    def get(self, name: str) -> Optional[MappedRow]:
        """Get a single row by mcp_name."""
        rows = self.query("SELECT * FROM servers WHERE mcp_name = ?", (name,))
        return self._row_to_mapped(rows[0]) if rows else None

    def list_rows(self, limit: Optional[int] = None) -> list[MappedRow]:
        """Return rows, most recently inserted first."""
        if limit is None:
            rows = self.query("SELECT * FROM servers ORDER BY id DESC")
        else:
            rows = self.query("SELECT * FROM servers ORDER BY id DESC LIMIT ?", (limit,))
        return [self._row_to_mapped(r) for r in rows]

    def count(self) -> int:
        return self.query("SELECT COUNT(*) AS n FROM servers")[0]["n"]

    # Run history

    def start_run(self, source: str) -> RunRecord:
        """Record start of a load run. Returns RunRecord with id."""
        now = datetime.now(timezone.utc).isoformat()
        with self._connection() as conn:
            cursor = conn.execute(
                "INSERT INTO runs (source, started_at, status) VALUES (?, ?, 'running')",
                (source, now),
            )
            run_id = cursor.lastrowid
        return RunRecord(
            id=run_id or 0,
            source=source,
            started_at=datetime.fromisoformat(now),
            finished_at=None,
            status="running",
            items_total=0,
            items_inserted=0,
            items_skipped=0,
            items_failed=0,
        )

    def finish_run(
        self,
        run_id: int,
        *,
        items_total: int,
        items_inserted: int,
        items_skipped: int,
        items_failed: int,
        status: str = "completed",
    ) -> None:
        """Record completion of a load run."""
        now = datetime.now(timezone.utc).isoformat()
        with self._connection() as conn:
            conn.execute(
                """
                UPDATE runs SET finished_at = ?, status = ?, items_total = ?,
                    items_inserted = ?, items_skipped = ?, items_failed = ?
                WHERE id = ?
                """,
                (now, status, items_total, items_inserted, items_skipped, items_failed, run_id),
            )

    def get_run(self, run_id: int) -> Optional[RunRecord]:
        rows = self.query("SELECT * FROM runs WHERE id = ?", (run_id,))
        if not rows:
            return None
        r = rows[0]
        return RunRecord(
            id=r["id"],
            source=r["source"],
            started_at=datetime.fromisoformat(r["started_at"]),
            finished_at=datetime.fromisoformat(r["finished_at"]) if r["finished_at"] else None,
            status=r["status"],
            items_total=r["items_total"],
            items_inserted=r["items_inserted"],
            items_skipped=r["items_skipped"],
            items_failed=r["items_failed"],
        )
