"""
Invoice effects engine.

An invoice books three coupled effects, always in this order:

  1. stock     – one movement per line item (type mapped from the invoice type)
  2. balance   – the party's balance moves by the full invoice total
  3. cashbook  – an upfront payment becomes the ``CASH-INV-<id>`` entry, whose
                 own balance effect then offsets step 2 by the paid amount

Edits never patch effects incrementally: the old invoice is reverted in
full and the new one applied in full. Reverting appends ADJUSTMENT
("Void In" / "Void Out") stock entries instead of erasing history, and
leaves the cashbook to the caller, since cash entries are keyed by
invoice id rather than derived from line items.

Each public operation runs inside one unit of work.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from loguru import logger

from shopledger.core.config import settings
from shopledger.engine.cashbook import Cashbook, linked_cash_id
from shopledger.engine.party_ledger import PartyLedger
from shopledger.engine.stock_ledger import StockAlert, StockLedger, stock_alert
from shopledger.models import (
    CashTransaction,
    CashType,
    Invoice,
    InvoicePayment,
    PaymentStatus,
    StockMovementType,
    TransactionType,
)
from shopledger.models.base import money, new_id, qty
from shopledger.models.invoice import compute_totals
from shopledger.store.base import RecordStore

STOCK_MOVEMENT: dict[TransactionType, tuple[StockMovementType, int]] = {
    TransactionType.SALE: (StockMovementType.SALE, -1),
    TransactionType.PURCHASE: (StockMovementType.PURCHASE, 1),
    TransactionType.SALE_RETURN: (StockMovementType.RETURN_IN, 1),
    TransactionType.PURCHASE_RETURN: (StockMovementType.RETURN_OUT, -1),
}

# Direction of money for a payment against each invoice type
CASH_DIRECTION: dict[TransactionType, CashType] = {
    TransactionType.SALE: CashType.IN,
    TransactionType.PURCHASE: CashType.OUT,
    TransactionType.SALE_RETURN: CashType.OUT,
    TransactionType.PURCHASE_RETURN: CashType.IN,
}

CASH_CATEGORY: dict[TransactionType, str] = {
    TransactionType.SALE: "Sales",
    TransactionType.PURCHASE: "Purchase",
    TransactionType.SALE_RETURN: "Sale Return",
    TransactionType.PURCHASE_RETURN: "Purchase Return",
}

WALK_IN_NAME = "Walk-in Customer"
MULTI_PAYMENT_WARNING = "multi-payment invoice updated without cashbook reconciliation"


@dataclass
class InvoiceOutcome:
    invoice: Invoice
    warnings: list[str] = field(default_factory=list)
    alerts: list[StockAlert] = field(default_factory=list)


class InvoiceEngine:
    def __init__(
        self,
        store: RecordStore,
        stock: StockLedger,
        parties: PartyLedger,
        cashbook: Cashbook,
    ) -> None:
        self.store = store
        self.stock = stock
        self.parties = parties
        self.cashbook = cashbook

    # ── queries ──────────────────────────────────────────────────────────────

    def list(
        self,
        invoice_type: Optional[TransactionType] = None,
        party_id: Optional[str] = None,
    ) -> list[Invoice]:
        """Invoices newest first."""
        rows = [
            (i, inv)
            for i, inv in enumerate(self.store.invoices.all())
            if (invoice_type is None or inv.type == invoice_type)
            and (party_id is None or inv.party_id == party_id)
        ]
        rows.sort(key=lambda pair: (pair[1].date, pair[0]), reverse=True)
        return [inv for _, inv in rows]

    def get(self, invoice_id: str) -> Optional[Invoice]:
        return self.store.invoices.get(invoice_id)

    # ── effects ──────────────────────────────────────────────────────────────

    def apply_effects(self, invoice: Invoice) -> list[StockAlert]:
        movement, sign = STOCK_MOVEMENT[invoice.type]
        alerts: list[StockAlert] = []

        for item in invoice.items:
            product = self.store.products.get(item.product_id)
            if product is None:
                # Line kept for historical display only
                logger.debug(f"{invoice.id}: product {item.product_id} gone, stock effect skipped")
                continue
            self.stock.move(
                product,
                movement,
                qty(sign * item.quantity),
                note=f"{invoice.type.value} {invoice.id}",
                reference_id=invoice.id,
            )
            alert = stock_alert(product)
            if alert:
                alerts.append(alert)

        self.parties.apply_invoice(invoice)

        # Invoices saved before payment tracking carry no payment history
        if invoice.received_amount > 0 and not invoice.payments:
            invoice.payments = [
                InvoicePayment(
                    id=new_id("PAY"),
                    date=invoice.date,
                    amount=invoice.received_amount,
                    note="Initial payment",
                )
            ]
        return alerts

    def revert_effects(self, invoice: Invoice) -> list[StockAlert]:
        _, sign = STOCK_MOVEMENT[invoice.type]
        alerts: list[StockAlert] = []

        for item in invoice.items:
            product = self.store.products.get(item.product_id)
            if product is None:
                logger.debug(f"{invoice.id}: product {item.product_id} gone, void skipped")
                continue
            reversal = qty(-sign * item.quantity)
            label = "Void In" if reversal >= 0 else "Void Out"
            self.stock.move(
                product,
                StockMovementType.ADJUSTMENT,
                reversal,
                note=f"{label}: {invoice.type.value} {invoice.id}",
                reference_id=invoice.id,
            )
            alert = stock_alert(product)
            if alert:
                alerts.append(alert)

        self.parties.apply_invoice(invoice, reverse=True)
        return alerts

    def _sync_linked_cash(self, invoice: Invoice) -> None:
        """Make ``CASH-INV-<id>`` mirror the invoice's received amount."""
        tx_id = linked_cash_id(invoice.id)
        if invoice.received_amount <= 0:
            self.cashbook.delete(tx_id, allow_linked=True)
            return
        self.cashbook.record(
            CashTransaction(
                id=tx_id,
                date=invoice.date,
                type=CASH_DIRECTION[invoice.type],
                amount=invoice.received_amount,
                category=CASH_CATEGORY[invoice.type],
                description=f"Payment for {invoice.id}",
                party_id=invoice.party_id or None,
                party_name=invoice.party_name or None,
                linked_invoice_id=invoice.id,
            )
        )

    def _partial_payments(self, invoice_id: str) -> list[CashTransaction]:
        """Linked cash entries other than the upfront ``CASH-INV-<id>`` one."""
        upfront = linked_cash_id(invoice_id)
        return [t for t in self.cashbook.linked_to(invoice_id) if t.id != upfront]

    def _prepare(self, invoice: Invoice) -> Invoice:
        """Fill denormalized names, the walk-in fallback and derived totals."""
        if not invoice.party_id:
            invoice.party_id = settings.WALK_IN_PARTY_ID
            invoice.party_name = invoice.party_name or WALK_IN_NAME
        if not invoice.party_name:
            party = self.store.parties.get(invoice.party_id)
            invoice.party_name = party.name if party else WALK_IN_NAME
        for item in invoice.items:
            if not item.product_name:
                product = self.store.products.get(item.product_id)
                item.product_name = product.name if product else item.product_id
        return compute_totals(invoice)

    # ── lifecycle ────────────────────────────────────────────────────────────

    def create(self, invoice: Invoice) -> InvoiceOutcome:
        if invoice.id and self.store.invoices.get(invoice.id) is not None:
            logger.warning(f"Invoice {invoice.id} already exists, saving as an update")
            return self.update(invoice.id, invoice)

        with self.store.unit_of_work():
            if not invoice.id:
                invoice.id = new_id("INV")
            self._prepare(invoice)
            alerts = self.apply_effects(invoice)
            if invoice.received_amount > 0:
                self._sync_linked_cash(invoice)
            self.store.invoices.upsert(invoice)

        logger.info(
            f"Invoice created: {invoice.id} {invoice.type.value} {invoice.party_name} "
            f"total={invoice.total_amount} received={invoice.received_amount} "
            f"[{invoice.status.value}]"
        )
        return self._outcome(invoice, [], alerts)

    def update(self, invoice_id: str, new_invoice: Invoice) -> Optional[InvoiceOutcome]:
        warnings: list[str] = []
        with self.store.unit_of_work():
            old = self.store.invoices.get(invoice_id)
            if old is None:
                logger.info(f"Invoice update ignored, {invoice_id} not found")
                return None

            new_invoice.id = invoice_id
            if not new_invoice.payments:
                new_invoice.payments = [p.model_copy() for p in old.payments]
            self._prepare(new_invoice)

            self.revert_effects(old)

            # A lone payment made through add_payment has no CASH-INV entry to resync
            single_payment = len(new_invoice.payments) <= 1 and not self._partial_payments(invoice_id)
            if single_payment:
                if new_invoice.received_amount <= 0:
                    new_invoice.payments = []
                elif new_invoice.payments:
                    new_invoice.payments[0].amount = new_invoice.received_amount

            alerts = self.apply_effects(new_invoice)

            if single_payment:
                self._sync_linked_cash(new_invoice)
            else:
                # Partial payments are only reconciled through add_payment
                warnings.append(MULTI_PAYMENT_WARNING)
                logger.warning(
                    f"Invoice {invoice_id} has {len(new_invoice.payments)} payment(s) "
                    f"booked through add_payment; {MULTI_PAYMENT_WARNING}"
                )

            self.store.invoices.upsert(new_invoice)

        logger.info(
            f"Invoice updated: {invoice_id} total={new_invoice.total_amount} "
            f"received={new_invoice.received_amount} [{new_invoice.status.value}]"
        )
        return self._outcome(new_invoice, warnings, alerts)

    def delete(self, invoice_id: str) -> Optional[InvoiceOutcome]:
        with self.store.unit_of_work():
            invoice = self.store.invoices.get(invoice_id)
            if invoice is None:
                logger.info(f"Invoice delete ignored, {invoice_id} not found")
                return None

            alerts = self.revert_effects(invoice)
            self.cashbook.delete(linked_cash_id(invoice_id), allow_linked=True)
            for tx in self.cashbook.linked_to(invoice_id):
                self.cashbook.delete(tx.id, allow_linked=True)
            self.store.invoices.delete(invoice_id)

        logger.info(f"Invoice deleted: {invoice_id} {invoice.type.value}")
        return self._outcome(invoice, [], alerts)

    def add_payment(
        self,
        invoice_id: str,
        amount: float,
        date: Optional[datetime] = None,
        note: Optional[str] = None,
    ) -> Optional[InvoiceOutcome]:
        """
        Record one more payment against an invoice.

        Only the invoice's payment state and the cashbook change; stock and
        the party's invoice effect were booked in full at creation.
        """
        with self.store.unit_of_work():
            invoice = self.store.invoices.get(invoice_id)
            if invoice is None:
                logger.info(f"Payment ignored, invoice {invoice_id} not found")
                return None

            if invoice.received_amount > 0 and not invoice.payments:
                invoice.payments = [
                    InvoicePayment(
                        id=new_id("PAY"),
                        date=invoice.date,
                        amount=invoice.received_amount,
                        note="Initial payment",
                    )
                ]

            payment = InvoicePayment(
                id=new_id("PAY"),
                date=date or datetime.now(),
                amount=money(amount),
                note=note,
            )
            invoice.payments.append(payment)
            invoice.received_amount = money(invoice.received_amount + payment.amount)
            invoice.due_amount = money(max(0.0, invoice.total_amount - invoice.received_amount))
            invoice.status = PaymentStatus.PAID if invoice.due_amount == 0 else PaymentStatus.PARTIAL
            self.store.invoices.upsert(invoice)

            self.cashbook.record(
                CashTransaction(
                    id=new_id("CASH"),
                    date=payment.date,
                    type=CASH_DIRECTION[invoice.type],
                    amount=payment.amount,
                    category=CASH_CATEGORY[invoice.type],
                    description=note or f"Payment for {invoice.id}",
                    party_id=invoice.party_id or None,
                    party_name=invoice.party_name or None,
                    linked_invoice_id=invoice.id,
                )
            )

        logger.info(
            f"Payment {payment.id} of {payment.amount} on {invoice_id}: "
            f"due={invoice.due_amount} [{invoice.status.value}]"
        )
        return self._outcome(invoice, [], [])

    @staticmethod
    def _outcome(invoice: Invoice, warnings: list[str], alerts: list[StockAlert]) -> InvoiceOutcome:
        for alert in alerts:
            logger.warning(
                f"Stock {alert.level} for {alert.product_id} ({alert.product_name}): "
                f"{alert.stock} ≤ {alert.reorder_level}"
            )
        return InvoiceOutcome(invoice=invoice, warnings=warnings, alerts=alerts)
