from decimal import Decimal

from django.test import SimpleTestCase

from .. import transitions
from ..transitions import (
    ACCOUNT,
    CREDIT,
    CUSTOMER,
    DEBIT,
    SUPPLIER,
    Adjustment,
    ChargeState,
    NoteState,
    PaymentState,
    TransferState,
)


def net(adjustments, ledger, ledger_id):
    return sum(
        (a.amount for a in adjustments if a.ledger == ledger and a.ledger_id == ledger_id),
        Decimal("0"),
    )


class PaymentTableTests(SimpleTestCase):
    table = transitions.CUSTOMER_PAYMENT

    def state(self, approved=True, account_id=1, counterparty_id=10, amount="100"):
        return PaymentState(approved, account_id, counterparty_id, Decimal(amount))

    def test_pending_payment_is_balance_neutral(self):
        pending = self.state(approved=False)
        self.assertEqual(self.table.created(pending), [])
        self.assertEqual(self.table.deleted(pending), [])
        self.assertEqual(self.table.updated(pending, self.state(approved=False, amount="500")), [])

    def test_approved_customer_payment_credits_account_and_customer(self):
        adjustments = self.table.created(self.state())
        self.assertEqual(
            adjustments,
            [
                Adjustment(ACCOUNT, 1, Decimal("100")),
                Adjustment(CUSTOMER, 10, Decimal("100"), kind="payment", entries=1),
            ],
        )

    def test_supplier_payment_takes_money_out_and_reduces_debt(self):
        adjustments = transitions.SUPPLIER_PAYMENT.created(self.state())
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("-100"))
        self.assertEqual(net(adjustments, SUPPLIER, 10), Decimal("-100"))

    def test_create_then_delete_conserves_balances(self):
        state = self.state(amount="73.40")
        adjustments = self.table.created(state) + self.table.deleted(state)
        self.assertEqual(net(adjustments, ACCOUNT, 1), 0)
        self.assertEqual(net(adjustments, CUSTOMER, 10), 0)

    def test_approval_granted_applies_new_values(self):
        adjustments = self.table.updated(self.state(approved=False), self.state(amount="120"))
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("120"))

    def test_approval_withdrawn_reverses_old_values(self):
        adjustments = self.table.updated(self.state(amount="80"), self.state(approved=False, amount="95"))
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("-80"))
        self.assertEqual(net(adjustments, CUSTOMER, 10), Decimal("-80"))

    def test_amount_change_applies_only_the_delta(self):
        adjustments = self.table.updated(self.state(amount="100"), self.state(amount="150"))
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("50"))
        self.assertEqual(net(adjustments, CUSTOMER, 10), Decimal("50"))

    def test_account_change_moves_full_amount_and_leaves_counterparty(self):
        adjustments = self.table.updated(self.state(account_id=1), self.state(account_id=2))
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("-100"))
        self.assertEqual(net(adjustments, ACCOUNT, 2), Decimal("100"))
        self.assertFalse([a for a in adjustments if a.ledger == CUSTOMER])

    def test_account_change_wins_over_amount_change(self):
        adjustments = self.table.updated(
            self.state(account_id=1, amount="100"), self.state(account_id=2, amount="130")
        )
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("-100"))
        self.assertEqual(net(adjustments, ACCOUNT, 2), Decimal("130"))
        self.assertFalse([a for a in adjustments if a.ledger == CUSTOMER])

    def test_counterparty_change_moves_counterparty_only(self):
        adjustments = self.table.updated(self.state(counterparty_id=10), self.state(counterparty_id=11))
        self.assertEqual(net(adjustments, CUSTOMER, 10), Decimal("-100"))
        self.assertEqual(net(adjustments, CUSTOMER, 11), Decimal("100"))
        self.assertFalse([a for a in adjustments if a.ledger == ACCOUNT])


class ChargeTableTests(SimpleTestCase):
    def test_purchase_counts_once_effective(self):
        pending = ChargeState(False, 5, Decimal("500"))
        approved = ChargeState(True, 5, Decimal("500"))
        self.assertEqual(transitions.PURCHASE.created(pending), [])
        self.assertEqual(net(transitions.PURCHASE.updated(pending, approved), SUPPLIER, 5), Decimal("500"))
        self.assertEqual(net(transitions.PURCHASE.updated(approved, pending), SUPPLIER, 5), Decimal("-500"))

    def test_purchase_return_mirrors_purchase(self):
        state = ChargeState(True, 5, Decimal("200"))
        self.assertEqual(net(transitions.PURCHASE_RETURN.created(state), SUPPLIER, 5), Decimal("-200"))
        self.assertEqual(net(transitions.PURCHASE_RETURN.deleted(state), SUPPLIER, 5), Decimal("200"))
        self.assertEqual(
            transitions.PURCHASE_RETURN.restored(state), transitions.PURCHASE_RETURN.created(state)
        )

    def test_supplier_change_moves_old_and_new_totals(self):
        adjustments = transitions.PURCHASE.updated(
            ChargeState(True, 5, Decimal("500")), ChargeState(True, 6, Decimal("450"))
        )
        self.assertEqual(net(adjustments, SUPPLIER, 5), Decimal("-500"))
        self.assertEqual(net(adjustments, SUPPLIER, 6), Decimal("450"))

    def test_total_change_applies_delta(self):
        adjustments = transitions.PURCHASE_RETURN.updated(
            ChargeState(True, 5, Decimal("200")), ChargeState(True, 5, Decimal("260"))
        )
        self.assertEqual(adjustments, [Adjustment(SUPPLIER, 5, Decimal("-60"))])

    def test_sale_lowers_customer_balance_in_sale_bucket(self):
        adjustments = transitions.SALE.created(ChargeState(True, 3, Decimal("90")))
        self.assertEqual(adjustments, [Adjustment(CUSTOMER, 3, Decimal("-90"), kind="sale", entries=1)])

    def test_customer_return_credits_customer_in_return_bucket(self):
        adjustments = transitions.CUSTOMER_RETURN.created(ChargeState(True, 3, Decimal("40")))
        self.assertEqual(adjustments, [Adjustment(CUSTOMER, 3, Decimal("40"), kind="return", entries=1)])
        self.assertEqual(transitions.CUSTOMER_RETURN.created(ChargeState(False, 3, Decimal("40"))), [])

    def test_income_and_expense_move_one_account(self):
        income = transitions.INCOME_TRANSACTION
        expense = transitions.EXPENSE_TRANSACTION
        self.assertEqual(
            income.created(ChargeState(True, 1, Decimal("75"))),
            [Adjustment(ACCOUNT, 1, Decimal("75"), entries=1)],
        )
        self.assertEqual(net(expense.created(ChargeState(True, 1, Decimal("75"))), ACCOUNT, 1), Decimal("-75"))

        moved = expense.updated(ChargeState(True, 1, Decimal("75")), ChargeState(True, 2, Decimal("80")))
        self.assertEqual(net(moved, ACCOUNT, 1), Decimal("75"))
        self.assertEqual(net(moved, ACCOUNT, 2), Decimal("-80"))

        resized = income.updated(ChargeState(True, 1, Decimal("75")), ChargeState(True, 1, Decimal("60")))
        self.assertEqual(net(resized, ACCOUNT, 1), Decimal("-15"))


class NoteTableTests(SimpleTestCase):
    def test_supplier_credit_lowers_and_debit_raises(self):
        table = transitions.SUPPLIER_NOTE
        self.assertEqual(net(table.created(NoteState(4, CREDIT, Decimal("30"))), SUPPLIER, 4), Decimal("-30"))
        self.assertEqual(net(table.created(NoteState(4, DEBIT, Decimal("30"))), SUPPLIER, 4), Decimal("30"))

    def test_customer_notes_use_their_own_buckets(self):
        credit = transitions.CUSTOMER_NOTE.created(NoteState(4, CREDIT, Decimal("30")))
        debit = transitions.CUSTOMER_NOTE.created(NoteState(4, DEBIT, Decimal("30")))
        self.assertEqual(credit, [Adjustment(CUSTOMER, 4, Decimal("30"), kind=CREDIT, entries=1)])
        self.assertEqual(debit, [Adjustment(CUSTOMER, 4, Decimal("-30"), kind=DEBIT, entries=1)])

    def test_counterparty_change_uses_each_side_type(self):
        adjustments = transitions.SUPPLIER_NOTE.updated(
            NoteState(4, CREDIT, Decimal("30")), NoteState(5, DEBIT, Decimal("40"))
        )
        self.assertEqual(net(adjustments, SUPPLIER, 4), Decimal("30"))
        self.assertEqual(net(adjustments, SUPPLIER, 5), Decimal("40"))

    def test_type_change_applies_new_sign_twice(self):
        adjustments = transitions.SUPPLIER_NOTE.updated(
            NoteState(4, CREDIT, Decimal("30")), NoteState(4, DEBIT, Decimal("30"))
        )
        self.assertEqual(len(adjustments), 2)
        self.assertTrue(all(a.amount > 0 for a in adjustments))
        self.assertEqual(net(adjustments, SUPPLIER, 4), Decimal("60"))

    def test_amount_change_applies_delta_with_type_sign(self):
        adjustments = transitions.SUPPLIER_NOTE.updated(
            NoteState(4, CREDIT, Decimal("30")), NoteState(4, CREDIT, Decimal("45"))
        )
        self.assertEqual(adjustments, [Adjustment(SUPPLIER, 4, Decimal("-15"))])

    def test_account_adjustment_type_change_reverses_then_applies(self):
        table = transitions.ACCOUNT_ADJUST
        self.assertEqual(net(table.created(NoteState(1, CREDIT, Decimal("20"))), ACCOUNT, 1), Decimal("20"))
        self.assertEqual(net(table.created(NoteState(1, DEBIT, Decimal("20"))), ACCOUNT, 1), Decimal("-20"))

        adjustments = table.updated(NoteState(1, CREDIT, Decimal("20")), NoteState(1, DEBIT, Decimal("25")))
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("-45"))
        self.assertTrue(all(a.kind is None for a in adjustments))


class TransferTableTests(SimpleTestCase):
    table = transitions.ACCOUNT_TRANSFER

    def test_create_moves_sent_and_received_amounts(self):
        adjustments = self.table.created(TransferState(1, 2, Decimal("100"), Decimal("92")))
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("-100"))
        self.assertEqual(net(adjustments, ACCOUNT, 2), Decimal("92"))

    def test_sides_update_independently(self):
        adjustments = self.table.updated(
            TransferState(1, 2, Decimal("100"), Decimal("100")),
            TransferState(1, 3, Decimal("120"), Decimal("100")),
        )
        self.assertEqual(net(adjustments, ACCOUNT, 1), Decimal("-20"))
        self.assertEqual(net(adjustments, ACCOUNT, 2), Decimal("-100"))
        self.assertEqual(net(adjustments, ACCOUNT, 3), Decimal("100"))

    def test_unchanged_transfer_produces_nothing(self):
        state = TransferState(1, 2, Decimal("10"), Decimal("10"))
        self.assertEqual(self.table.updated(state, state), [])
