"""
Cashbook: cash IN/OUT entries, optionally tied to a party and/or an invoice.

Saving an entry whose id already exists is an update: the old entry's
balance effect is reversed before the new one is applied. Invoices rely on
this to resync their ``CASH-INV-<invoice id>`` entry across edits.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from loguru import logger

from shopledger.core.errors import LockedEntryError
from shopledger.engine.party_ledger import PartyLedger
from shopledger.models import CashTransaction, CashType
from shopledger.models.base import money, new_id
from shopledger.store.base import RecordStore

LINKED_PREFIX = "CASH-INV-"


def linked_cash_id(invoice_id: str) -> str:
    """Deterministic id of the cash entry carrying an invoice's upfront payment."""
    return f"{LINKED_PREFIX}{invoice_id}"


class Cashbook:
    def __init__(self, store: RecordStore, parties: PartyLedger) -> None:
        self.store = store
        self.parties = parties

    def list(
        self,
        day: Optional[date] = None,
        cash_type: Optional[CashType] = None,
        party_id: Optional[str] = None,
    ) -> list[CashTransaction]:
        rows = [
            (i, t)
            for i, t in enumerate(self.store.cashbook.all())
            if (day is None or t.date.date() == day)
            and (cash_type is None or t.type == cash_type)
            and (party_id is None or t.party_id == party_id)
        ]
        rows.sort(key=lambda pair: (pair[1].date, pair[0]), reverse=True)
        return [t for _, t in rows]

    def get(self, transaction_id: str) -> Optional[CashTransaction]:
        return self.store.cashbook.get(transaction_id)

    def linked_to(self, invoice_id: str) -> list[CashTransaction]:
        return [t for t in self.store.cashbook.all() if t.linked_invoice_id == invoice_id]

    def record(self, tx: CashTransaction) -> CashTransaction:
        with self.store.unit_of_work():
            if not tx.id:
                tx.id = new_id("CASH")
            tx.amount = money(tx.amount)
            if tx.party_id and not tx.party_name:
                party = self.store.parties.get(tx.party_id)
                tx.party_name = party.name if party else None

            existing = self.store.cashbook.get(tx.id)
            if existing is not None:
                self.parties.apply_cash(existing, reverse=True)
            self.store.cashbook.upsert(tx)
            self.parties.apply_cash(tx)

        logger.info(
            f"Cash {'updated' if existing else 'recorded'}: {tx.id} {tx.type.value} "
            f"{tx.amount} [{tx.category}]"
        )
        return tx

    def delete(self, transaction_id: str, allow_linked: bool = False) -> bool:
        """
        Reverse the entry's balance effect and remove it.

        Entries linked to an invoice are owned by that invoice; only the
        invoice lifecycle passes ``allow_linked=True``.
        """
        with self.store.unit_of_work():
            tx = self.store.cashbook.get(transaction_id)
            if tx is None:
                return False
            if tx.linked_invoice_id and not allow_linked:
                logger.warning(
                    f"Refused to delete {transaction_id}: locked to invoice {tx.linked_invoice_id}"
                )
                raise LockedEntryError(transaction_id, tx.linked_invoice_id)
            self.parties.apply_cash(tx, reverse=True)
            self.store.cashbook.delete(transaction_id)

        logger.info(f"Cash deleted: {transaction_id} {tx.type.value} {tx.amount}")
        return True
