from shopledger.models.catalog import BusinessInfo, Party, PartyType, Product
from shopledger.models.invoice import (
    Invoice,
    InvoiceItem,
    InvoicePayment,
    PaymentStatus,
    TransactionType,
)
from shopledger.models.ledger import (
    CashTransaction,
    CashType,
    StockMovementType,
    StockTransaction,
)
from shopledger.models.store import StoredRecord

__all__ = [
    "BusinessInfo",
    "Party",
    "PartyType",
    "Product",
    "Invoice",
    "InvoiceItem",
    "InvoicePayment",
    "PaymentStatus",
    "TransactionType",
    "CashTransaction",
    "CashType",
    "StockMovementType",
    "StockTransaction",
    "StoredRecord",
]
