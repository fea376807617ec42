"""
Record store: one repository per named collection plus a unit of work.

Collections:
  products       – Product
  parties        – Party
  invoices       – Invoice
  stock_history  – StockTransaction (append-only)
  cashbook       – CashTransaction
  business_info  – BusinessInfo (singleton)

Repositories hand out fresh copies of records. Mutating a record does
nothing until it is passed back to ``upsert``.
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Callable, Generic, Iterator, Optional, TypeVar

from sqlmodel import SQLModel

from shopledger.models import (
    BusinessInfo,
    CashTransaction,
    Invoice,
    Party,
    Product,
    StockTransaction,
)

T = TypeVar("T", bound=SQLModel)

BUSINESS_INFO_KEY = "profile"

# collection name → (record model, key function)
COLLECTIONS: dict[str, tuple[type[SQLModel], Callable[[SQLModel], str]]] = {
    "products": (Product, lambda r: r.id),
    "parties": (Party, lambda r: r.id),
    "invoices": (Invoice, lambda r: r.id),
    "stock_history": (StockTransaction, lambda r: r.id),
    "cashbook": (CashTransaction, lambda r: r.id),
    "business_info": (BusinessInfo, lambda r: BUSINESS_INFO_KEY),
}


class Repository(ABC, Generic[T]):
    """CRUD over a single named collection."""

    def __init__(self, name: str, model: type[T], key: Callable[[T], str]) -> None:
        self.name = name
        self.model = model
        self.key = key

    def _dump(self, record: T) -> dict:
        return record.model_dump(mode="json")

    def _load(self, payload: dict) -> T:
        return self.model.model_validate(payload)

    @abstractmethod
    def all(self) -> list[T]:
        """Every record, in insertion order."""

    @abstractmethod
    def get(self, record_id: str) -> Optional[T]:
        ...

    @abstractmethod
    def upsert(self, record: T) -> T:
        ...

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Remove a record; False when it did not exist."""

    @abstractmethod
    def replace_all(self, records: list[T]) -> None:
        ...


class RecordStore(ABC):
    """Groups the collection repositories and serializes units of work."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._depth = 0
        self.repositories: dict[str, Repository] = {
            name: self._make_repository(name, model, key)
            for name, (model, key) in COLLECTIONS.items()
        }

    @abstractmethod
    def _make_repository(self, name: str, model, key) -> Repository:
        ...

    @property
    def products(self) -> Repository[Product]:
        return self.repositories["products"]

    @property
    def parties(self) -> Repository[Party]:
        return self.repositories["parties"]

    @property
    def invoices(self) -> Repository[Invoice]:
        return self.repositories["invoices"]

    @property
    def stock_history(self) -> Repository[StockTransaction]:
        return self.repositories["stock_history"]

    @property
    def cashbook(self) -> Repository[CashTransaction]:
        return self.repositories["cashbook"]

    @property
    def business_info(self) -> Repository[BusinessInfo]:
        return self.repositories["business_info"]

    @property
    def in_unit_of_work(self) -> bool:
        return self._depth > 0

    @contextmanager
    def unit_of_work(self) -> Iterator["RecordStore"]:
        """
        Commit every write made inside the block, or none of them.

        Nested blocks join the outermost one; only the outermost commits
        or rolls back.
        """
        with self._lock:
            if self._depth:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._begin()
            self._depth = 1
            try:
                yield self
            except BaseException:
                self._depth = 0
                self._rollback()
                raise
            else:
                self._depth = 0
                self._commit()

    @abstractmethod
    def _begin(self) -> None:
        ...

    @abstractmethod
    def _commit(self) -> None:
        ...

    @abstractmethod
    def _rollback(self) -> None:
        ...
