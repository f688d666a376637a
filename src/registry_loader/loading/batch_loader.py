"""Batch-transactional loading with per-row failure isolation."""

import logging
import time
from enum import Enum
from typing import Callable, Optional, Sequence

from registry_loader.errors import LoaderStateError, RowInsertError, TransactionError
from registry_loader.mapping.columns import MANDATORY_COLUMNS
from registry_loader.models.config import DEFAULT_BATCH_SIZE
from registry_loader.models.result import BatchResult, LoadProgress, RowFailure
from registry_loader.models.row import MappedRow
from registry_loader.store.base import DestinationStore

from .duplicates import DuplicateTracker

logger = logging.getLogger(__name__)

# JSON text that counts as an empty primary content field
_EMPTY_JSON = frozenset({"", "[]", "{}", "null", '""'})

# Row outcomes within a batch
INSERTED = "inserted"
SKIPPED = "skipped"
FAILED = "failed"


class LoaderState(str, Enum):
    IDLE = "idle"
    CONNECTED = "connected"
    BATCH_IN_PROGRESS = "batch_in_progress"
    BATCH_COMMITTED = "batch_committed"
    BATCH_ROLLED_BACK = "batch_rolled_back"
    CLOSED = "closed"


_TRANSITIONS: dict[LoaderState, frozenset[LoaderState]] = {
    LoaderState.IDLE: frozenset({LoaderState.CONNECTED, LoaderState.CLOSED}),
    LoaderState.CONNECTED: frozenset({LoaderState.BATCH_IN_PROGRESS, LoaderState.CLOSED}),
    LoaderState.BATCH_IN_PROGRESS: frozenset(
        {LoaderState.BATCH_COMMITTED, LoaderState.BATCH_ROLLED_BACK}
    ),
    LoaderState.BATCH_COMMITTED: frozenset({LoaderState.BATCH_IN_PROGRESS, LoaderState.CLOSED}),
    LoaderState.BATCH_ROLLED_BACK: frozenset({LoaderState.BATCH_IN_PROGRESS, LoaderState.CLOSED}),
    LoaderState.CLOSED: frozenset(),
}


def missing_mandatory_fields(row: MappedRow) -> list[str]:
    """Mandatory columns that are absent or empty on a row."""
    missing: list[str] = []
    for column in MANDATORY_COLUMNS:
        value = getattr(row, column)
        if value is None:
            missing.append(column)
        elif column.endswith("_json"):
            if value.strip() in _EMPTY_JSON:
                missing.append(column)
        elif not str(value).strip():
            missing.append(column)
    return missing


def partition(rows: Sequence[MappedRow], batch_size: int) -> list[Sequence[MappedRow]]:
    """Split rows into consecutive fixed-size batches, preserving order."""
    if batch_size < 1:
        raise ValueError("batch_size must be >= 1")
    return [rows[i : i + batch_size] for i in range(0, len(rows), batch_size)]


class _BatchTally:
    """Per-batch outcomes, kept apart so a rollback can reclassify them."""

    def __init__(self, size: int):
        self.size = size
        self.outcomes: list[str] = []
        self.inserted_keys: list[str] = []

    @property
    def processed(self) -> int:
        return len(self.outcomes)

    def count(self, outcome: str) -> int:
        return self.outcomes.count(outcome)


class BatchLoader:
    """
    Loads mapped rows into a DestinationStore, one transaction per batch.

    Row-level problems (duplicate, missing mandatory field, rejected insert)
    are counted and the batch carries on. Only a control-plane failure
    (BEGIN/COMMIT or a dropped connection) rolls the batch back, at most
    once per batch, and every non-duplicate row of that batch is then
    counted as failed.
    """

    def __init__(
        self,
        store: DestinationStore,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        tracker: Optional[DuplicateTracker] = None,
        progress_every: int = 25,
        on_progress: Optional[Callable[[LoadProgress], None]] = None,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.store = store
        self.batch_size = batch_size
        self.tracker = tracker if tracker is not None else DuplicateTracker()
        self.progress_every = progress_every
        self.on_progress = on_progress
        self.state = LoaderState.IDLE
        self.history: list[LoaderState] = [LoaderState.IDLE]

    def _transition(self, target: LoaderState) -> None:
        if target not in _TRANSITIONS[self.state]:
            raise LoaderStateError(f"Illegal transition {self.state.value} -> {target.value}")
        self.state = target
        self.history.append(target)

    def load(self, rows: Sequence[MappedRow]) -> BatchResult:
        """
        Load rows in input order. Raises StoreConnectionError when the store
        cannot be opened; otherwise returns a BatchResult where
        inserted + skipped + failed == len(rows).
        """
        if self.state != LoaderState.IDLE:
            raise LoaderStateError(f"Loader already used (state={self.state.value})")
        result = BatchResult(total=len(rows))
        batches = partition(rows, self.batch_size)
        start = time.monotonic()

        try:
            self.store.connect()
            self._transition(LoaderState.CONNECTED)
            self.tracker.seed(self.store.existing_keys())
            logger.info(
                "Found %d existing rows; processing %d rows in %d batches of %d",
                len(self.tracker), len(rows), len(batches), self.batch_size,
            )

            processed = 0
            for number, batch in enumerate(batches, start=1):
                self._run_batch(number, batch, result, start)
                processed += len(batch)
                result.elapsed_seconds = time.monotonic() - start
                self._report_progress(number, len(batches), processed, result)
        finally:
            if self.state == LoaderState.BATCH_IN_PROGRESS:
                self._rollback(None)
            try:
                self.store.close()
            finally:
                self._transition(LoaderState.CLOSED)
                result.elapsed_seconds = time.monotonic() - start

        return result

    def _run_batch(
        self,
        number: int,
        batch: Sequence[MappedRow],
        result: BatchResult,
        start: float,
    ) -> None:
        tally = _BatchTally(len(batch))
        logger.info("Processing batch %d (%d rows)", number, len(batch))
        self._transition(LoaderState.BATCH_IN_PROGRESS)
        try:
            self.store.begin()
            for row in batch:
                tally.outcomes.append(self._load_row(number, row, tally, result, start))
            self.store.commit()
        except TransactionError as e:
            logger.error("Batch %d failed, rolling back: %s", number, e)
            self._rollback(number)
            self._fail_batch(number, batch, tally, result, str(e))
            return

        self._transition(LoaderState.BATCH_COMMITTED)
        result.inserted += tally.count(INSERTED)
        result.skipped += tally.count(SKIPPED)
        result.failed += tally.count(FAILED)
        result.batches_committed += 1
        logger.info("Batch %d committed", number)

    def _load_row(
        self,
        number: int,
        row: MappedRow,
        tally: _BatchTally,
        result: BatchResult,
        start: float,
    ) -> str:
        label = row.key or f"<row {number}.{tally.processed + 1}>"

        if self.tracker.has(row.key):
            logger.info("Skipping duplicate: %s", label)
            return SKIPPED

        missing = missing_mandatory_fields(row)
        if missing:
            reason = f"missing required fields: {', '.join(missing)}"
            logger.error("Failed to insert %s: %s", label, reason)
            result.failures.append(RowFailure(key=label, reason=reason, batch_number=number))
            return FAILED

        try:
            self.store.insert_row(row.insert_values())
        except RowInsertError as e:
            logger.error("Failed to insert %s: %s", label, e)
            result.failures.append(RowFailure(key=label, reason=str(e), batch_number=number))
            return FAILED

        tally.inserted_keys.append(row.key)
        self.tracker.add(row.key)
        inserted = result.inserted + len(tally.inserted_keys)
        if inserted % self.progress_every == 0:
            elapsed = time.monotonic() - start
            rate = inserted / elapsed if elapsed > 0 else 0.0
            logger.info("%d rows inserted (%.1f/sec, %.1fs elapsed)", inserted, rate, elapsed)
        return INSERTED

    def _rollback(self, number: Optional[int]) -> None:
        try:
            self.store.rollback()
        except TransactionError as e:
            logger.error("Rollback of batch %s failed: %s", number, e)
        self._transition(LoaderState.BATCH_ROLLED_BACK)

    def _fail_batch(
        self,
        number: int,
        batch: Sequence[MappedRow],
        tally: _BatchTally,
        result: BatchResult,
        reason: str,
    ) -> None:
        """
        Reclassify a rolled-back batch. Rows skipped against keys that were
        already stored stay skipped; everything else fails, including repeats
        of a key first inserted by this batch.
        """
        rolled_back = set(tally.inserted_keys)
        for key in rolled_back:
            self.tracker.discard(key)

        skipped = 0
        for index, row in enumerate(batch):
            outcome = tally.outcomes[index] if index < tally.processed else None
            if outcome == SKIPPED and row.key not in rolled_back:
                skipped += 1
                continue
            # Row-level failures are already recorded
            if outcome == FAILED:
                continue
            label = row.key or f"<row {number}.{index + 1}>"
            result.failures.append(
                RowFailure(key=label, reason=f"batch rolled back: {reason}", batch_number=number)
            )

        failed = tally.size - skipped
        result.skipped += skipped
        result.failed += failed
        result.batches_rolled_back += 1
        logger.error("Batch %d rolled back; %d rows counted as failed", number, failed)

    def _report_progress(
        self,
        number: int,
        total_batches: int,
        processed: int,
        result: BatchResult,
    ) -> None:
        progress = LoadProgress(
            batch_number=number,
            total_batches=total_batches,
            processed=processed,
            total=result.total,
            inserted=result.inserted,
            skipped=result.skipped,
            failed=result.failed,
            elapsed_seconds=result.elapsed_seconds,
        )
        logger.info(
            "Progress: %d/%d (%.1f%%), %.1f rows/sec",
            processed, result.total, progress.percent, progress.throughput,
        )
        if self.on_progress is not None:
            self.on_progress(progress)
