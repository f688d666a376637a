"""Data models for raw records, mapped rows and run results."""

from registry_loader.models.config import LoaderConfig
from registry_loader.models.raw import RawRecord
from registry_loader.models.result import BatchResult, LoadProgress, RowFailure
from registry_loader.models.row import HostingType, MappedRow, ServerType

__all__ = [
    "BatchResult",
    "HostingType",
    "LoadProgress",
    "LoaderConfig",
    "MappedRow",
    "RawRecord",
    "RowFailure",
    "ServerType",
]
