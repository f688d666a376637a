"""Destination store for mapped server rows and run history."""

from registry_loader.store.base import DestinationStore
from registry_loader.store.sqlite_store import RunRecord, SQLiteServerStore

__all__ = ["DestinationStore", "RunRecord", "SQLiteServerStore"]
