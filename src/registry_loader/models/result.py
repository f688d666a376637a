"""Run statistics produced by the batch loader."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class RowFailure:
    """A row that was not inserted, with the reason."""

    key: str
    reason: str
    batch_number: Optional[int] = None


@dataclass
class BatchResult:
    """
    Totals for one load run.
    inserted + skipped + failed always equals total.
    """

    total: int = 0
    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    elapsed_seconds: float = 0.0
    batches_committed: int = 0
    batches_rolled_back: int = 0
    failures: list[RowFailure] = field(default_factory=list)

    @property
    def throughput(self) -> float:
        """Inserted rows per second."""
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.inserted / self.elapsed_seconds

    @property
    def success_rate(self) -> float:
        """Percentage of non-duplicate rows that were inserted."""
        attempted = self.total - self.skipped
        if attempted <= 0:
            return 100.0
        return 100 * self.inserted / attempted

    @property
    def is_consistent(self) -> bool:
        return self.inserted + self.skipped + self.failed == self.total


@dataclass
class LoadProgress:
    """Snapshot passed to progress callbacks after each batch."""

    batch_number: int
    total_batches: int
    processed: int
    total: int
    inserted: int
    skipped: int
    failed: int
    elapsed_seconds: float

    @property
    def throughput(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.inserted / self.elapsed_seconds

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return 100 * self.processed / self.total
