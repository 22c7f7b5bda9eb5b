"""Balance transition tables for every financial document type.

Each table turns a lifecycle event into the list of signed balance
adjustments it implies.  Tables work on plain snapshots of the
balance-relevant fields and never touch the database, so the rules can be
exercised without persistence.  :func:`erp.services.ledger.post_adjustments`
is what actually writes the resulting adjustments.

Customer amounts are expressed in the customer ledger's own convention: a
positive balance means the customer is in credit with us.  Payments and
credit notes raise it, sales and debit notes lower it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Optional

ACCOUNT = "account"
SUPPLIER = "supplier"
CUSTOMER = "customer"

CREDIT = "credit"
DEBIT = "debit"

ZERO = Decimal("0")


@dataclass(frozen=True)
class Adjustment:
    """A signed change to one ledger.

    ``kind`` names the customer monthly bucket the movement belongs to and
    ``entries`` is the change to that bucket's document count.  Both are
    ignored for account and supplier ledgers.
    """

    ledger: str
    ledger_id: Optional[int]
    amount: Decimal
    kind: Optional[str] = None
    entries: int = 0

    def reversed(self) -> "Adjustment":
        return replace(self, amount=-self.amount, entries=-self.entries)


def reverse_all(adjustments: list[Adjustment]) -> list[Adjustment]:
    return [adjustment.reversed() for adjustment in adjustments]


@dataclass(frozen=True)
class PaymentState:
    approved: bool
    account_id: Optional[int]
    counterparty_id: Optional[int]
    amount_usd: Decimal


@dataclass(frozen=True)
class ChargeState:
    """Snapshot of a single-counterparty document (purchase, return, sale)."""

    effective: bool
    counterparty_id: Optional[int]
    total_usd: Decimal


@dataclass(frozen=True)
class NoteState:
    counterparty_id: Optional[int]
    note_type: str
    amount_usd: Decimal


@dataclass(frozen=True)
class TransferState:
    from_account_id: Optional[int]
    to_account_id: Optional[int]
    sent_amount: Decimal
    received_amount: Decimal


class PaymentTable:
    """Approval-gated payment that moves money between an account and a counterparty.

    Updates are resolved by the first matching case: approval granted,
    approval withdrawn, account changed, counterparty changed, amount changed.
    """

    def __init__(self, counterparty, account_sign, counterparty_sign, kind=None):
        self.counterparty = counterparty
        self.account_sign = account_sign
        self.counterparty_sign = counterparty_sign
        self.kind = kind

    def _account(self, account_id, amount):
        return Adjustment(ACCOUNT, account_id, self.account_sign * amount)

    def _counterparty(self, counterparty_id, amount, entries=0):
        return Adjustment(
            self.counterparty,
            counterparty_id,
            self.counterparty_sign * amount,
            kind=self.kind,
            entries=entries,
        )

    def created(self, state: PaymentState) -> list[Adjustment]:
        if not state.approved:
            return []
        return [
            self._account(state.account_id, state.amount_usd),
            self._counterparty(state.counterparty_id, state.amount_usd, entries=1),
        ]

    def deleted(self, state: PaymentState) -> list[Adjustment]:
        return reverse_all(self.created(state))

    def restored(self, state: PaymentState) -> list[Adjustment]:
        return self.created(state)

    def updated(self, old: PaymentState, new: PaymentState) -> list[Adjustment]:
        if not old.approved and new.approved:
            return self.created(new)
        if old.approved and not new.approved:
            return self.deleted(old)
        if not new.approved:
            return []
        if old.account_id != new.account_id:
            return [
                self._account(old.account_id, -old.amount_usd),
                self._account(new.account_id, new.amount_usd),
            ]
        if old.counterparty_id != new.counterparty_id:
            return [
                self._counterparty(old.counterparty_id, -old.amount_usd, entries=-1),
                self._counterparty(new.counterparty_id, new.amount_usd, entries=1),
            ]
        delta = new.amount_usd - old.amount_usd
        if delta:
            return [
                self._account(new.account_id, delta),
                self._counterparty(new.counterparty_id, delta),
            ]
        return []


class ChargeTable:
    """Document that charges a single ledger by its total.

    ``effective`` carries the approval state for purchases, sales and
    customer returns; purchase returns and account entries are always
    effective.
    """

    def __init__(self, counterparty, sign, kind=None):
        self.counterparty = counterparty
        self.sign = sign
        self.kind = kind

    def _charge(self, counterparty_id, amount, entries=0):
        return Adjustment(
            self.counterparty,
            counterparty_id,
            self.sign * amount,
            kind=self.kind,
            entries=entries,
        )

    def created(self, state: ChargeState) -> list[Adjustment]:
        if not state.effective:
            return []
        return [self._charge(state.counterparty_id, state.total_usd, entries=1)]

    def deleted(self, state: ChargeState) -> list[Adjustment]:
        return reverse_all(self.created(state))

    def restored(self, state: ChargeState) -> list[Adjustment]:
        return self.created(state)

    def updated(self, old: ChargeState, new: ChargeState) -> list[Adjustment]:
        if not old.effective and new.effective:
            return self.created(new)
        if old.effective and not new.effective:
            return self.deleted(old)
        if not new.effective:
            return []
        if old.counterparty_id != new.counterparty_id:
            return [
                self._charge(old.counterparty_id, -old.total_usd, entries=-1),
                self._charge(new.counterparty_id, new.total_usd, entries=1),
            ]
        delta = new.total_usd - old.total_usd
        if delta:
            return [self._charge(new.counterparty_id, delta)]
        return []


class NoteTable:
    """Credit/debit note, or manual account adjustment, against one ledger."""

    def __init__(self, counterparty, credit_sign, debit_sign):
        self.counterparty = counterparty
        self.signs = {CREDIT: credit_sign, DEBIT: debit_sign}

    def _kind(self, note_type):
        # Only the customer ledger keeps per-kind monthly buckets.
        return note_type if self.counterparty == CUSTOMER else None

    def _note(self, counterparty_id, sign_type, amount, kind_type, entries=0):
        return Adjustment(
            self.counterparty,
            counterparty_id,
            self.signs[sign_type] * amount,
            kind=self._kind(kind_type),
            entries=entries,
        )

    def created(self, state: NoteState) -> list[Adjustment]:
        return [
            self._note(state.counterparty_id, state.note_type, state.amount_usd, state.note_type, entries=1)
        ]

    def deleted(self, state: NoteState) -> list[Adjustment]:
        return reverse_all(self.created(state))

    def restored(self, state: NoteState) -> list[Adjustment]:
        return self.created(state)

    def updated(self, old: NoteState, new: NoteState) -> list[Adjustment]:
        if old.counterparty_id != new.counterparty_id:
            return [
                self._note(old.counterparty_id, old.note_type, -old.amount_usd, old.note_type, entries=-1),
                self._note(new.counterparty_id, new.note_type, new.amount_usd, new.note_type, entries=1),
            ]
        if old.note_type != new.note_type:
            # Both legs carry the new type's sign.
            return [
                self._note(old.counterparty_id, new.note_type, old.amount_usd, old.note_type, entries=-1),
                self._note(new.counterparty_id, new.note_type, new.amount_usd, new.note_type, entries=1),
            ]
        delta = new.amount_usd - old.amount_usd
        if delta:
            return [self._note(new.counterparty_id, new.note_type, delta, new.note_type)]
        return []


class TransferTable:
    """Money sent from one account and received on another."""

    def created(self, state: TransferState) -> list[Adjustment]:
        return [
            Adjustment(ACCOUNT, state.from_account_id, -state.sent_amount),
            Adjustment(ACCOUNT, state.to_account_id, state.received_amount),
        ]

    def deleted(self, state: TransferState) -> list[Adjustment]:
        return reverse_all(self.created(state))

    def restored(self, state: TransferState) -> list[Adjustment]:
        return self.created(state)

    def updated(self, old: TransferState, new: TransferState) -> list[Adjustment]:
        adjustments = []
        if old.from_account_id != new.from_account_id:
            adjustments.append(Adjustment(ACCOUNT, old.from_account_id, old.sent_amount))
            adjustments.append(Adjustment(ACCOUNT, new.from_account_id, -new.sent_amount))
        elif old.sent_amount != new.sent_amount:
            adjustments.append(
                Adjustment(ACCOUNT, new.from_account_id, -(new.sent_amount - old.sent_amount))
            )

        if old.to_account_id != new.to_account_id:
            adjustments.append(Adjustment(ACCOUNT, old.to_account_id, -old.received_amount))
            adjustments.append(Adjustment(ACCOUNT, new.to_account_id, new.received_amount))
        elif old.received_amount != new.received_amount:
            adjustments.append(
                Adjustment(ACCOUNT, new.to_account_id, new.received_amount - old.received_amount)
            )
        return adjustments


CUSTOMER_PAYMENT = PaymentTable(CUSTOMER, account_sign=1, counterparty_sign=1, kind="payment")
SUPPLIER_PAYMENT = PaymentTable(SUPPLIER, account_sign=-1, counterparty_sign=-1)
PURCHASE = ChargeTable(SUPPLIER, sign=1)
PURCHASE_RETURN = ChargeTable(SUPPLIER, sign=-1)
SALE = ChargeTable(CUSTOMER, sign=-1, kind="sale")
CUSTOMER_RETURN = ChargeTable(CUSTOMER, sign=1, kind="return")
INCOME_TRANSACTION = ChargeTable(ACCOUNT, sign=1)
EXPENSE_TRANSACTION = ChargeTable(ACCOUNT, sign=-1)
SUPPLIER_NOTE = NoteTable(SUPPLIER, credit_sign=-1, debit_sign=1)
CUSTOMER_NOTE = NoteTable(CUSTOMER, credit_sign=1, debit_sign=-1)
ACCOUNT_ADJUST = NoteTable(ACCOUNT, credit_sign=1, debit_sign=-1)
ACCOUNT_TRANSFER = TransferTable()
