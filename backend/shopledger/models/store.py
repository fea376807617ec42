"""SQLModel table backing the record store (one row per stored record)."""
from typing import Any, Optional
from datetime import datetime, timezone

from sqlalchemy import Column, JSON, UniqueConstraint
from sqlmodel import SQLModel, Field


def utcnow() -> datetime:
    """Timezone-aware UTC now; datetime columns reject naive values."""
    return datetime.now(timezone.utc)


class StoredRecord(SQLModel, table=True):
    """A serialized record inside a named collection (products, invoices …)."""

    __tablename__ = "records"
    __table_args__ = (UniqueConstraint("collection", "record_id"),)

    # Autoincrement id doubles as insertion order within a collection
    id: Optional[int] = Field(default=None, primary_key=True)
    collection: str = Field(index=True)
    record_id: str = Field(index=True)
    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
