"""Catalog records: products, parties and the business profile."""
from datetime import date
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel


class PartyType(str, Enum):
    CUSTOMER = "CUSTOMER"
    SUPPLIER = "SUPPLIER"


class Product(SQLModel):
    """A sellable item. ``stock`` is a cache of the stock ledger."""

    id: str
    name: str
    sku: Optional[str] = None
    barcode: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    description: Optional[str] = None
    price: float = 0.0  # sale unit price
    cost: float = 0.0  # purchase unit cost
    stock: float = 0.0
    unit: str = "pc"
    opening_stock: float = 0.0
    reorder_level: Optional[float] = None  # falls back to DEFAULT_REORDER_LEVEL
    discount: float = 0.0  # default flat per-unit discount
    batch_number: Optional[str] = None
    expiry_date: Optional[date] = None


class Party(SQLModel):
    """Customer or supplier. Positive balance = receivable, negative = payable."""

    id: str
    name: str
    phone: str = ""
    email: Optional[str] = None
    address: Optional[str] = None
    reference_code: Optional[str] = None
    type: PartyType = PartyType.CUSTOMER
    balance: float = 0.0


class BusinessInfo(SQLModel):
    name: str = "ShopLedger POS"
    address: str = ""
    phone: str = ""
    email: str = ""
    invoice_footer: Optional[str] = Field(
        default="Thank you for your business."
    )
