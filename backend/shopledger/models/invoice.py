"""Invoice records and the rules that derive their totals and status."""
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlmodel import Field, SQLModel

from shopledger.models.base import money, qty


class TransactionType(str, Enum):
    SALE = "SALE"
    PURCHASE = "PURCHASE"
    SALE_RETURN = "SALE_RETURN"
    PURCHASE_RETURN = "PURCHASE_RETURN"


class PaymentStatus(str, Enum):
    PAID = "PAID"
    PARTIAL = "PARTIAL"
    UNPAID = "UNPAID"


class InvoiceItem(SQLModel):
    product_id: str
    product_name: str = ""
    quantity: float = 0.0
    price: float = 0.0  # unit price
    discount: float = 0.0  # line-level
    total: float = 0.0


class InvoicePayment(SQLModel):
    id: str
    date: datetime = Field(default_factory=datetime.now)
    amount: float
    note: Optional[str] = None


class Invoice(SQLModel):
    id: str
    date: datetime = Field(default_factory=datetime.now)
    party_id: str = ""
    party_name: str = ""
    type: TransactionType = TransactionType.SALE
    items: list[InvoiceItem] = Field(default_factory=list)
    subtotal: float = 0.0
    discount: float = 0.0  # invoice-level
    total_amount: float = 0.0
    received_amount: float = 0.0
    due_amount: float = 0.0
    status: PaymentStatus = PaymentStatus.UNPAID
    payments: list[InvoicePayment] = Field(default_factory=list)


def derive_status(due_amount: float, received_amount: float) -> PaymentStatus:
    if due_amount == 0:
        return PaymentStatus.PAID
    if received_amount > 0:
        return PaymentStatus.PARTIAL
    return PaymentStatus.UNPAID


def settle(invoice: Invoice) -> Invoice:
    """Recompute due amount and status from total and received amounts."""
    invoice.received_amount = money(invoice.received_amount)
    invoice.due_amount = money(max(0.0, invoice.total_amount - invoice.received_amount))
    invoice.status = derive_status(invoice.due_amount, invoice.received_amount)
    return invoice


def compute_totals(invoice: Invoice) -> Invoice:
    """
    Fill every derived field of an invoice in place.

    line total = price × quantity − line discount
    subtotal   = Σ line totals
    total      = max(0, subtotal − invoice discount)
    due        = max(0, total − received)
    """
    for item in invoice.items:
        item.quantity = qty(item.quantity)
        item.total = money(item.price * item.quantity - item.discount)
    invoice.subtotal = money(sum(item.total for item in invoice.items))
    invoice.total_amount = money(max(0.0, invoice.subtotal - invoice.discount))
    return settle(invoice)
