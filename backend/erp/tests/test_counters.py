from django.test import TestCase, override_settings

from ..models import Setting
from ..services import counters


class SettingCounterTests(TestCase):
    def test_increment_creates_row_at_default(self):
        self.assertEqual(Setting.increment_value("receipts", "next", default=10), 11)
        self.assertEqual(Setting.increment_value("receipts", "next"), 12)
        self.assertEqual(Setting.objects.get(group_name="receipts", key_name="next").value, "12")

    def test_missing_row_without_default_is_rejected(self):
        with self.assertRaises(ValueError):
            Setting.increment_value("receipts", "missing")

    def test_non_numeric_setting_is_rejected(self):
        Setting.objects.create(group_name="company", key_name="name", value="Acme")
        with self.assertRaises(ValueError):
            Setting.increment_value("company", "name")


class ReserveNextCodeTests(TestCase):
    def test_sequence_is_gap_free_and_increasing(self):
        values = [counters.reserve_next_value("customer_payments") for _ in range(5)]
        self.assertEqual(values, [1001, 1002, 1003, 1004, 1005])

    def test_groups_are_independent(self):
        counters.reserve_next_value("customer_payments")
        self.assertEqual(counters.reserve_next_value("supplier_payments"), 1001)

    @override_settings(ERP_CODE_STARTS={"sales": 41}, ERP_CODE_PAD=4)
    def test_codes_are_padded_from_configured_start(self):
        self.assertEqual(counters.reserve_next_code("sales"), "0042")

    def test_explicit_default_wins(self):
        self.assertEqual(counters.reserve_next_code("purchases", default=0), "000001")
