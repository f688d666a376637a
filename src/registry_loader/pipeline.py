"""Pipeline orchestration: read → map → load → validate."""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import httpx

from registry_loader.input_reader import read_records, read_scoring
from registry_loader.loading import BatchLoader
from registry_loader.mapping import SchemaMapper
from registry_loader.models.config import LoaderConfig
from registry_loader.models.result import BatchResult, LoadProgress
from registry_loader.models.row import MappedRow
from registry_loader.reporting import ValidationReport, ValidationReporter
from registry_loader.store import SQLiteServerStore

logger = logging.getLogger(__name__)


@dataclass
class LoadOutcome:
    """Everything a load run produced."""

    result: BatchResult
    run_id: int
    report: Optional[ValidationReport] = None


def map_records(
    input_source: str | Path,
    *,
    scoring_source: Optional[str | Path] = None,
    limit: Optional[int] = None,
    client: Optional[httpx.Client] = None,
) -> list[MappedRow]:
    """Read and map records without touching the store."""
    records = read_records(input_source, client=client, limit=limit)
    scoring = read_scoring(scoring_source, client=client) if scoring_source else None
    return SchemaMapper(scoring).map_many(records)


def run_load(
    config: LoaderConfig,
    input_source: str | Path,
    *,
    scoring_source: Optional[str | Path] = None,
    limit: Optional[int] = None,
    validate: bool = True,
    client: Optional[httpx.Client] = None,
    on_progress: Optional[Callable[[LoadProgress], None]] = None,
) -> LoadOutcome:
    """
    Run the full pipeline against the SQLite store in config.
    Raises InputReadError or StoreConnectionError on fatal failures; row and
    batch failures are reported in the returned BatchResult.
    """
    rows = map_records(input_source, scoring_source=scoring_source, limit=limit, client=client)
    logger.info("Mapped %d records", len(rows))

    store = SQLiteServerStore(config.db_path, timeout=config.busy_timeout)
    run = store.start_run(str(input_source))
    loader = BatchLoader(
        store,
        batch_size=config.batch_size,
        progress_every=config.progress_every,
        on_progress=on_progress,
    )
    try:
        result = loader.load(rows)
    except Exception:
        store.finish_run(
            run.id, items_total=len(rows), items_inserted=0, items_skipped=0,
            items_failed=len(rows), status="failed",
        )
        raise
    store.finish_run(
        run.id,
        items_total=result.total,
        items_inserted=result.inserted,
        items_skipped=result.skipped,
        items_failed=result.failed,
    )

    report = None
    if validate:
        report = ValidationReporter(store).report(top_n=config.top_n, group_by=config.group_by)
    return LoadOutcome(result=result, run_id=run.id, report=report)
