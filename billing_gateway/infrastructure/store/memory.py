"""In-process entity store and id sequences"""

import threading
from dataclasses import replace
from typing import Any, Dict, Generic, List, Optional, Protocol, TypeVar


class Record(Protocol):
    id: str


T = TypeVar("T", bound=Record)


class Store(Protocol[T]):
    """Collection interface the billing service depends on"""

    def list(self) -> List[T]:
        ...

    def get(self, record_id: str) -> Optional[T]:
        ...

    def insert(self, record: T) -> T:
        ...

    def update(self, record_id: str, patch: Dict[str, Any]) -> T:
        ...

    def delete(self, record_id: str) -> bool:
        ...


class InMemoryStore(Generic[T]):
    """
    List-backed store for dataclass records.

    Records are kept in collection order. With prepend=True new records go
    to the front, giving most-recent-first listings.
    """

    def __init__(self, prepend: bool = False):
        self.prepend = prepend
        self._records: List[T] = []

    def list(self) -> List[T]:
        return list(self._records)

    def get(self, record_id: str) -> Optional[T]:
        for record in self._records:
            if record.id == record_id:
                return record
        return None

    def insert(self, record: T) -> T:
        if self.get(record.id) is not None:
            raise KeyError(f"Duplicate id: {record.id}")
        if self.prepend:
            self._records.insert(0, record)
        else:
            self._records.append(record)
        return record

    def update(self, record_id: str, patch: Dict[str, Any]) -> T:
        index = self._index_of(record_id)
        if index is None:
            raise KeyError(record_id)
        updated = replace(self._records[index], **patch)
        self._records[index] = updated
        return updated

    def delete(self, record_id: str) -> bool:
        index = self._index_of(record_id)
        if index is None:
            return False
        del self._records[index]
        return True

    def __len__(self) -> int:
        return len(self._records)

    def _index_of(self, record_id: str) -> Optional[int]:
        for i, record in enumerate(self._records):
            if record.id == record_id:
                return i
        return None


class IdSequence:
    """
    Monotonic id generator; ids are never reused after deletes.

    Example:
        IdSequence("INV", width=3) -> INV001, INV002, ...
        IdSequence() -> 1, 2, ...
    """

    def __init__(self, prefix: str = "", width: int = 0, start: int = 1):
        self.prefix = prefix
        self.width = width
        self._next = start
        self._lock = threading.Lock()

    def __call__(self) -> str:
        with self._lock:
            value = self._next
            self._next += 1
        return f"{self.prefix}{str(value).zfill(self.width)}"

    def advance_past(self, record_id: str) -> None:
        """Make sure the next id is greater than an externally loaded one"""
        suffix = record_id[len(self.prefix):] if record_id.startswith(self.prefix) else ""
        if suffix.isdigit():
            with self._lock:
                self._next = max(self._next, int(suffix) + 1)
