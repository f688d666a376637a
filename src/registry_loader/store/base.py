"""Abstract interface for the destination store."""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Mapping


class DestinationStore(ABC):
    """
    Transactional sink for mapped rows.

    The batch loader owns one connection for a whole run and drives the
    transaction explicitly. Implementations raise StoreConnectionError from
    connect, TransactionError for control-plane failures and RowInsertError
    when a single statement is rejected.
    """

    @abstractmethod
    def connect(self) -> None:
        """Open the run connection."""

    @abstractmethod
    def close(self) -> None:
        """Release the run connection. Safe to call more than once."""

    @abstractmethod
    def existing_keys(self) -> Iterable[str]:
        """Identifying keys already present in the destination."""

    @abstractmethod
    def begin(self) -> None:
        """Start a batch transaction."""

    @abstractmethod
    def commit(self) -> None:
        """Commit the current batch transaction."""

    @abstractmethod
    def rollback(self) -> None:
        """Roll back the current batch transaction."""

    @abstractmethod
    def insert_row(self, values: Mapping[str, Any]) -> None:
        """Insert one row listing only the given columns."""
