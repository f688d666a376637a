"""Identifying keys already persisted, before and during a run."""

from typing import Iterable, Optional


class DuplicateTracker:
    """
    Set of known row keys.
    Seeded from the destination at run start and grown as rows are inserted,
    so repeats inside one import file are caught too.
    """

    def __init__(self) -> None:
        self._keys: set[str] = set()

    def seed(self, existing_keys: Iterable[str]) -> None:
        self._keys.update(k for k in existing_keys if k is not None)

    def has(self, key: Optional[str]) -> bool:
        return key is not None and key in self._keys

    def add(self, key: Optional[str]) -> None:
        if key is not None:
            self._keys.add(key)

    def discard(self, key: Optional[str]) -> None:
        """Forget a key whose insert was rolled back."""
        self._keys.discard(key)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __len__(self) -> int:
        return len(self._keys)
