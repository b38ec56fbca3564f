"""
Euno State Store — Persisted typed model per integration instance.

The declarative state manager owns persistence; lifecycle operations only
need get/set/delete keyed by the caller's instance key. InMemoryStateStore
is the reference backing store. Replace it for production.
"""
from __future__ import annotations
from typing import Iterator, Optional, Protocol, Union
import copy

from euno.models.resource import ImportedIdentity, IntegrationState

StoredState = Union[IntegrationState, ImportedIdentity]


class StateStore(Protocol):
    """Typed object store consumed by ManagedIntegration."""

    def get(self, key: str) -> Optional[StoredState]: ...

    def set(self, key: str, value: StoredState) -> None: ...

    def delete(self, key: str) -> bool: ...


class InMemoryStateStore:
    """In-memory state store.

    Values are copied on the way in and out, so a caller holding a returned
    object cannot change what is persisted.
    """

    def __init__(self):
        self._records: dict[str, StoredState] = {}

    def get(self, key: str) -> Optional[StoredState]:
        record = self._records.get(key)
        if record is None:
            return None
        return copy.deepcopy(record)

    def set(self, key: str, value: StoredState) -> None:
        self._records[key] = copy.deepcopy(value)

    def delete(self, key: str) -> bool:
        """Remove a record. Returns False if there was nothing to remove."""
        return self._records.pop(key, None) is not None

    def keys(self) -> Iterator[str]:
        return iter(list(self._records))

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)
