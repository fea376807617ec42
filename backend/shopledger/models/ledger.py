"""Ledger records: stock movements and cashbook entries."""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class StockMovementType(str, Enum):
    OPENING = "OPENING"
    PURCHASE = "PURCHASE"
    SALE = "SALE"
    RETURN_IN = "RETURN_IN"  # customer sent goods back
    RETURN_OUT = "RETURN_OUT"  # goods sent back to supplier
    DAMAGE = "DAMAGE"
    ADJUSTMENT = "ADJUSTMENT"  # manual correction or void entry, either sign
    TRANSFER = "TRANSFER"


class CashType(str, Enum):
    IN = "IN"
    OUT = "OUT"


class StockTransaction(SQLModel):
    """One signed change to a product's on-hand quantity. Never edited."""

    id: str
    product_id: str
    date: datetime = Field(default_factory=datetime.now)
    type: StockMovementType
    quantity: float  # positive = in, negative = out
    previous_stock: float
    new_stock: float
    note: Optional[str] = None
    reference_id: Optional[str] = None  # invoice that caused it


class CashTransaction(SQLModel):
    """Cashbook entry. Entries with ``linked_invoice_id`` belong to that invoice."""

    id: str
    date: datetime = Field(default_factory=datetime.now)
    type: CashType
    amount: float
    category: str = "General"
    description: Optional[str] = None
    party_id: Optional[str] = None
    party_name: Optional[str] = None
    linked_invoice_id: Optional[str] = None

    @property
    def locked(self) -> bool:
        return self.linked_invoice_id is not None
