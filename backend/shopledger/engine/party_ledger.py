"""
Party balance ledger.

Balance lives on the Party record (positive = receivable, negative =
payable). Two callers mutate it and must agree on signs:

  invoices:  SALE +total   PURCHASE −total   SALE_RETURN −total   PURCHASE_RETURN +total
  cashbook:  IN −amount    OUT +amount

Reversal applies the exact inverse of the stored effect rather than
recomputing the balance, so entries booked in between are left alone.
"""
from __future__ import annotations

from typing import Optional

from loguru import logger

from shopledger.models import CashTransaction, CashType, Invoice, Party, TransactionType
from shopledger.models.base import money
from shopledger.store.base import RecordStore

INVOICE_BALANCE_SIGN: dict[TransactionType, int] = {
    TransactionType.SALE: 1,
    TransactionType.PURCHASE: -1,
    TransactionType.SALE_RETURN: -1,
    TransactionType.PURCHASE_RETURN: 1,
}

CASH_BALANCE_SIGN: dict[CashType, int] = {
    CashType.IN: -1,
    CashType.OUT: 1,
}


def invoice_delta(invoice: Invoice) -> float:
    return money(INVOICE_BALANCE_SIGN[invoice.type] * invoice.total_amount)


def cash_delta(tx: CashTransaction) -> float:
    return money(CASH_BALANCE_SIGN[tx.type] * tx.amount)


class PartyLedger:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def apply(self, party_id: Optional[str], delta: float, reason: str) -> Optional[Party]:
        if not party_id:
            return None
        party = self.store.parties.get(party_id)
        if party is None:
            logger.debug(f"Balance effect skipped, party {party_id} not found ({reason})")
            return None
        previous = party.balance
        party.balance = money(previous + delta)
        self.store.parties.upsert(party)
        logger.debug(f"Balance {party_id}: {previous} → {party.balance} ({reason})")
        return party

    def apply_invoice(self, invoice: Invoice, reverse: bool = False) -> Optional[Party]:
        delta = invoice_delta(invoice)
        return self.apply(
            invoice.party_id,
            -delta if reverse else delta,
            f"{'void ' if reverse else ''}{invoice.type.value} {invoice.id}",
        )

    def apply_cash(self, tx: CashTransaction, reverse: bool = False) -> Optional[Party]:
        delta = cash_delta(tx)
        return self.apply(
            tx.party_id,
            -delta if reverse else delta,
            f"{'void ' if reverse else ''}cash {tx.type.value} {tx.id}",
        )
