"""Exception hierarchy for the registry loader.

Row-level problems are counted and logged by the loader; only the errors
below cross module boundaries.
"""


class RegistryLoaderError(Exception):
    """Base exception for all loader failures."""


class ConfigError(RegistryLoaderError):
    """Raised for invalid runtime configuration."""


class InputReadError(RegistryLoaderError):
    """Raised when the input batch or scoring file cannot be read."""


class StoreError(RegistryLoaderError):
    """Raised for destination store failures."""


class StoreConnectionError(StoreError):
    """Raised when the destination store cannot be opened."""


class TransactionError(StoreError):
    """Raised when BEGIN/COMMIT fails or the connection drops mid-batch."""


class RowInsertError(StoreError):
    """Raised when a single INSERT is rejected by the store."""


class LoaderStateError(RegistryLoaderError):
    """Raised on an illegal batch loader state transition."""
