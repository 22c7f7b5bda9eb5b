from decimal import Decimal

from django.test import TestCase

from ..models import Account, CustomerBalanceMonthly
from ..services import add_balance, post_adjustments, remove_balance
from ..transitions import ACCOUNT, CUSTOMER, SUPPLIER, Adjustment
from . import balance_of, create_ledgers


class BalancePrimitiveTests(TestCase):
    def setUp(self):
        self.account, self.customer, self.supplier = create_ledgers()

    def test_add_and_remove_adjust_stored_balance(self):
        self.assertTrue(add_balance(ACCOUNT, self.account.pk, Decimal("40.00")))
        self.assertTrue(remove_balance(ACCOUNT, self.account.pk, "15.50"))
        self.assertEqual(balance_of(self.account), Decimal("24.50"))

    def test_amounts_are_rounded_to_cents(self):
        add_balance(SUPPLIER, self.supplier.pk, "10.005")
        self.assertEqual(balance_of(self.supplier), Decimal("10.01"))

    def test_missing_ledger_is_skipped(self):
        self.assertFalse(add_balance(ACCOUNT, None, Decimal("10")))
        self.assertFalse(add_balance(ACCOUNT, 987654, Decimal("10")))
        self.assertFalse(remove_balance(SUPPLIER, 987654, Decimal("10")))
        self.assertEqual(Account.objects.get(pk=self.account.pk).current_balance, Decimal("0"))

    def test_customer_movements_land_in_monthly_bucket(self):
        add_balance(CUSTOMER, self.customer.pk, Decimal("25"), kind="payment", entries=1)
        row = CustomerBalanceMonthly.objects.get(customer=self.customer)
        self.assertEqual(row.total_payment, 1)
        self.assertEqual(row.total_payment_amount, Decimal("25.00"))
        self.assertEqual(self.customer.current_balance, Decimal("25.00"))

    def test_customer_movement_without_bucket_moves_balance(self):
        self.assertTrue(add_balance(CUSTOMER, self.customer.pk, Decimal("10")))
        self.assertTrue(remove_balance(CUSTOMER, self.customer.pk, Decimal("3")))
        self.assertEqual(self.customer.current_balance, Decimal("7.00"))
        self.assertFalse(add_balance(CUSTOMER, 987654, Decimal("10")))

    def test_post_adjustments_counts_applied_rows(self):
        applied = post_adjustments(
            [
                Adjustment(ACCOUNT, self.account.pk, Decimal("5")),
                Adjustment(SUPPLIER, self.supplier.pk, Decimal("-5")),
                Adjustment(SUPPLIER, None, Decimal("5")),
                Adjustment(ACCOUNT, self.account.pk, Decimal("0")),
            ],
            entry_id=1,
        )
        self.assertEqual(applied, 2)
        self.assertEqual(balance_of(self.account), Decimal("5.00"))
        self.assertEqual(balance_of(self.supplier), Decimal("-5.00"))
