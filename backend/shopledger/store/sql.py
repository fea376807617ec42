"""
SQLite-backed record store.

Every record lives in the ``records`` table as a JSON payload keyed by
(collection, record_id). A unit of work maps onto one SQLModel session:
commit at the end of the outermost block, rollback on any exception.

Reads outside a unit of work degrade to an empty/default value when the
database is unavailable; anything inside a unit of work raises
StoreUnavailable so the write path aborts instead of partially applying.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from shopledger.core.errors import StoreUnavailable
from shopledger.models.store import StoredRecord, utcnow
from shopledger.store.base import RecordStore, Repository, T


class SqlRepository(Repository[T]):
    def __init__(self, store: "SqlRecordStore", name, model, key) -> None:
        super().__init__(name, model, key)
        self.store = store

    def _select(self):
        return select(StoredRecord).where(StoredRecord.collection == self.name)

    def _row(self, session: Session, record_id: str) -> Optional[StoredRecord]:
        return session.exec(
            self._select().where(StoredRecord.record_id == record_id)
        ).first()

    def all(self) -> list[T]:
        def _read(session: Session) -> list[T]:
            rows = session.exec(self._select().order_by(StoredRecord.id)).all()
            return [self._load(r.payload) for r in rows]

        return self.store._read(_read, default=[])

    def get(self, record_id: str) -> Optional[T]:
        def _read(session: Session) -> Optional[T]:
            row = self._row(session, record_id)
            return self._load(row.payload) if row else None

        return self.store._read(_read, default=None)

    def upsert(self, record: T) -> T:
        def _write(session: Session) -> T:
            record_id = self.key(record)
            row = self._row(session, record_id)
            if row:
                # Assign a new dict so the JSON column registers the change
                row.payload = self._dump(record)
                row.updated_at = utcnow()
            else:
                row = StoredRecord(
                    collection=self.name,
                    record_id=record_id,
                    payload=self._dump(record),
                )
            session.add(row)
            session.flush()
            return record

        return self.store._write(_write)

    def delete(self, record_id: str) -> bool:
        def _write(session: Session) -> bool:
            row = self._row(session, record_id)
            if not row:
                return False
            session.delete(row)
            session.flush()
            return True

        return self.store._write(_write)

    def replace_all(self, records: list[T]) -> None:
        def _write(session: Session) -> None:
            for old in session.exec(self._select()).all():
                session.delete(old)
            session.flush()
            for record in records:
                session.add(
                    StoredRecord(
                        collection=self.name,
                        record_id=self.key(record),
                        payload=self._dump(record),
                    )
                )
            session.flush()

        self.store._write(_write)


class SqlRecordStore(RecordStore):
    def __init__(self, engine) -> None:
        self.engine = engine
        self._session: Optional[Session] = None
        super().__init__()

    def _make_repository(self, name, model, key) -> SqlRepository:
        return SqlRepository(self, name, model, key)

    # ── unit of work ─────────────────────────────────────────────────────────

    def _begin(self) -> None:
        self._session = Session(self.engine)

    def _commit(self) -> None:
        session, self._session = self._session, None
        try:
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(f"Record store commit failed: {exc}")
            raise StoreUnavailable(str(exc)) from exc
        finally:
            session.close()

    def _rollback(self) -> None:
        session, self._session = self._session, None
        if session is None:
            return
        try:
            session.rollback()
        finally:
            session.close()

    # ── helpers used by repositories ─────────────────────────────────────────

    def _read(self, fn: Callable[[Session], Any], default: Any) -> Any:
        with self._lock:
            if self._session is not None:
                try:
                    return fn(self._session)
                except SQLAlchemyError as exc:
                    raise StoreUnavailable(str(exc)) from exc
            try:
                with Session(self.engine) as session:
                    return fn(session)
            except SQLAlchemyError as exc:
                logger.error(f"Record store read failed, using default: {exc}")
                return default

    def _write(self, fn: Callable[[Session], Any]) -> Any:
        with self.unit_of_work():
            try:
                return fn(self._session)
            except SQLAlchemyError as exc:
                logger.error(f"Record store write failed: {exc}")
                raise StoreUnavailable(str(exc)) from exc
