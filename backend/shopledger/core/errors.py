"""Exception hierarchy shared by the store, the engine and the API layer."""


class ShopLedgerError(Exception):
    """Base class for every error raised by shopledger itself."""


class StoreUnavailable(ShopLedgerError):
    """The underlying persistence failed while a unit of work was open."""


class LockedEntryError(ShopLedgerError):
    """A cash entry owned by an invoice was deleted outside the invoice lifecycle."""

    def __init__(self, transaction_id: str, invoice_id: str) -> None:
        super().__init__(
            f"Cash entry {transaction_id} is linked to invoice {invoice_id} "
            f"and can only change through that invoice"
        )
        self.transaction_id = transaction_id
        self.invoice_id = invoice_id


class MalformedSnapshot(ShopLedgerError):
    """A backup snapshot could not be parsed or validated."""
