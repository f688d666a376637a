"""Duplicate suppression and batch-transactional loading."""

from registry_loader.loading.batch_loader import (
    BatchLoader,
    LoaderState,
    missing_mandatory_fields,
    partition,
)
from registry_loader.loading.duplicates import DuplicateTracker

__all__ = [
    "BatchLoader",
    "DuplicateTracker",
    "LoaderState",
    "missing_mandatory_fields",
    "partition",
]
