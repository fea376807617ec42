"""In-memory record store, used by the tests and for throwaway sessions."""
from __future__ import annotations

from typing import Optional

from shopledger.store.base import RecordStore, Repository, T


class InMemoryRepository(Repository[T]):
    def __init__(self, name, model, key) -> None:
        super().__init__(name, model, key)
        # dicts keep insertion order; payloads are replaced, never mutated
        self._rows: dict[str, dict] = {}

    def all(self) -> list[T]:
        return [self._load(p) for p in self._rows.values()]

    def get(self, record_id: str) -> Optional[T]:
        payload = self._rows.get(record_id)
        return self._load(payload) if payload is not None else None

    def upsert(self, record: T) -> T:
        self._rows[self.key(record)] = self._dump(record)
        return record

    def delete(self, record_id: str) -> bool:
        return self._rows.pop(record_id, None) is not None

    def replace_all(self, records: list[T]) -> None:
        self._rows = {self.key(r): self._dump(r) for r in records}


class MemoryRecordStore(RecordStore):
    def __init__(self) -> None:
        self._snapshot: dict[str, dict[str, dict]] = {}
        super().__init__()

    def _make_repository(self, name, model, key) -> InMemoryRepository:
        return InMemoryRepository(name, model, key)

    def _begin(self) -> None:
        self._snapshot = {
            name: dict(repo._rows) for name, repo in self.repositories.items()
        }

    def _commit(self) -> None:
        self._snapshot = {}

    def _rollback(self) -> None:
        for name, rows in self._snapshot.items():
            self.repositories[name]._rows = rows
        self._snapshot = {}
