from datetime import date
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from django.utils import timezone

from ..models import Customer, CustomerBalanceMonthly
from ..services import customer_balance


class CustomerBalanceTests(TestCase):
    def setUp(self):
        self.customer = Customer.objects.create(name="Alice")
        self.today = timezone.localdate()

    def closed_month(self, closing, year=2020, month=1):
        return CustomerBalanceMonthly.objects.create(
            customer=self.customer,
            year=year,
            month=month,
            total_payment=1,
            total_payment_amount=closing,
            transaction_total=closing,
            closing_balance=closing,
        )

    def test_new_customer_is_balanced(self):
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        self.assertEqual(self.customer.balance_status, Customer.BALANCE_BALANCED)

    def test_balance_is_latest_closing_plus_open_month(self):
        self.closed_month(Decimal("200.00"))
        customer_balance.update_monthly_total(self.customer.pk, "sale", Decimal("-50"), entries=1)
        self.assertEqual(self.customer.current_balance, Decimal("150.00"))
        self.assertEqual(self.customer.balance_status, Customer.BALANCE_CREDIT)

    def test_non_positive_closing_months_are_ignored(self):
        self.closed_month(Decimal("-80.00"), month=2)
        self.closed_month(Decimal("30.00"), month=1)
        self.assertEqual(customer_balance.latest_closing_balance(self.customer.pk), Decimal("30.00"))

    def test_buckets_follow_their_signs(self):
        update = customer_balance.update_monthly_total
        update(self.customer.pk, "payment", Decimal("100"), entries=1)
        update(self.customer.pk, "sale", Decimal("-70"), entries=1)
        update(self.customer.pk, "debit", Decimal("-10"), entries=1)
        update(self.customer.pk, "credit", Decimal("5"), entries=1)
        row = CustomerBalanceMonthly.objects.get(customer=self.customer)
        self.assertEqual(row.total_sale_amount, Decimal("70.00"))
        self.assertEqual(row.total_debit_amount, Decimal("10.00"))
        self.assertEqual(row.transaction_total, Decimal("25.00"))
        self.assertEqual(customer_balance.calculate_transaction_total(row), row.transaction_total)
        self.assertEqual(row.last_updated_by, "credit")

    def test_unknown_bucket_is_rejected(self):
        with self.assertRaises(ValueError):
            customer_balance.update_monthly_total(self.customer.pk, "refund", Decimal("1"))

    def test_missing_customer_is_skipped(self):
        self.assertFalse(customer_balance.update_monthly_total(987654, "payment", Decimal("1")))
        self.assertFalse(CustomerBalanceMonthly.objects.exists())

    def test_movements_are_recorded_in_the_given_month(self):
        customer_balance.update_monthly_total(
            self.customer.pk, "payment", Decimal("10"), entries=1, today=date(2021, 3, 15)
        )
        self.assertTrue(
            CustomerBalanceMonthly.objects.filter(customer=self.customer, year=2021, month=3).exists()
        )
        self.assertEqual(customer_balance.current_transaction_total(self.customer.pk), Decimal("0.00"))

    def test_end_of_month_carries_previous_closing(self):
        self.closed_month(Decimal("200.00"))
        customer_balance.update_monthly_total(
            self.customer.pk, "payment", Decimal("50"), entries=1, today=date(2021, 3, 15)
        )

        row = customer_balance.end_of_month_calculation(self.customer.pk)

        self.assertEqual((row.year, row.month), (2021, 3))
        self.assertEqual(row.closing_balance, Decimal("250.00"))
        self.assertEqual(self.customer.current_balance, Decimal("250.00"))
        self.assertIsNone(customer_balance.end_of_month_calculation(self.customer.pk))

    def test_open_past_months_close_oldest_first(self):
        update = customer_balance.update_monthly_total
        update(self.customer.pk, "payment", Decimal("30"), entries=1, today=date(2021, 1, 10))
        update(self.customer.pk, "credit", Decimal("20"), entries=1, today=date(2021, 2, 10))

        row = customer_balance.end_of_month_calculation(self.customer.pk)

        self.assertEqual((row.year, row.month), (2021, 2))
        self.assertEqual(row.closing_balance, Decimal("50.00"))
        january = CustomerBalanceMonthly.objects.get(customer=self.customer, year=2021, month=1)
        self.assertEqual(january.closing_balance, Decimal("30.00"))

    def test_current_month_stays_open(self):
        update = customer_balance.update_monthly_total
        update(self.customer.pk, "payment", Decimal("100"), entries=1)

        self.assertIsNone(customer_balance.end_of_month_calculation(self.customer.pk))

        update(self.customer.pk, "payment", Decimal("40"), entries=1)
        self.assertEqual(self.customer.current_balance, Decimal("140.00"))

    def test_add_balance_without_bucket_books_manual_credit_or_debit(self):
        update = customer_balance.update_monthly_total
        self.assertTrue(update(self.customer.pk, None, Decimal("10")))
        self.assertTrue(update(self.customer.pk, None, Decimal("-4")))
        row = CustomerBalanceMonthly.objects.get(customer=self.customer)
        self.assertEqual(row.total_credit_amount, Decimal("10.00"))
        self.assertEqual(row.total_debit_amount, Decimal("4.00"))
        self.assertEqual(self.customer.current_balance, Decimal("6.00"))

    def test_missing_customer_is_skipped_before_bucket_check(self):
        self.assertFalse(customer_balance.update_monthly_total(987654, None, Decimal("1")))
        self.assertFalse(customer_balance.update_monthly_total(None, "refund", Decimal("1")))

    def test_credit_limit(self):
        self.customer.credit_limit = Decimal("100")
        self.customer.save()
        customer_balance.update_monthly_total(self.customer.pk, "sale", Decimal("-150"), entries=1)
        self.assertEqual(self.customer.balance_status, Customer.BALANCE_DEBIT)
        self.assertTrue(self.customer.is_over_credit_limit())

    def test_close_command_reports_closed_customers(self):
        other = Customer.objects.create(name="Bob")
        customer_balance.update_monthly_total(
            self.customer.pk, "payment", Decimal("20"), entries=1, today=date(2021, 6, 1)
        )
        out = StringIO()

        call_command("close_customer_balances", stdout=out)

        self.assertIn("Closed 1 customer balance(s).", out.getvalue())
        self.assertFalse(other.monthly_balances.exists())
        self.assertEqual(
            CustomerBalanceMonthly.objects.get(customer=self.customer).closing_balance, Decimal("20.00")
        )
