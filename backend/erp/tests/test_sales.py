from decimal import Decimal

from django.test import TestCase

from ..exceptions import InventoryError
from ..models import CustomerBalanceMonthly, Sale, SaleItem
from ..services import documents, inventory
from . import create_item, create_ledgers, create_user, default_warehouse


class SaleTests(TestCase):
    def setUp(self):
        self.user = create_user()
        _, self.customer, _ = create_ledgers()
        self.warehouse = default_warehouse()
        self.item = create_item()
        inventory.add(self.item.pk, self.warehouse.pk, Decimal("10"))

    def sell(self, quantity="2", unit_price="50", approved=True, **extra):
        data = {
            "customer": self.customer,
            "warehouse": self.warehouse,
            "items": [{"item": self.item, "quantity": Decimal(quantity), "unit_price": Decimal(unit_price)}],
        }
        if approved:
            data["approved_by"] = self.user
        data.update(extra)
        return documents.create_document(Sale, data, user=self.user)

    def stock(self):
        return inventory.get_quantity(self.item.pk, self.warehouse.pk)

    def test_approved_sale_takes_stock_and_lowers_customer_balance(self):
        sale = self.sell()
        self.assertEqual(sale.number, "INV-001001")
        self.assertEqual(sale.total_usd, Decimal("100.00"))
        self.assertEqual(self.stock(), Decimal("8"))
        self.assertEqual(self.customer.current_balance, Decimal("-100.00"))
        row = CustomerBalanceMonthly.objects.get(customer=self.customer)
        self.assertEqual((row.total_sale, row.total_sale_amount), (1, Decimal("100.00")))
        self.assertEqual(row.updated_by_entry_id, sale.pk)

    def test_pending_sale_does_not_touch_balance(self):
        sale = self.sell(approved=False)
        self.assertEqual(self.stock(), Decimal("8"))
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        documents.approve_document(Sale, sale.pk, self.user)
        self.assertEqual(self.customer.current_balance, Decimal("-100.00"))

    def test_discounts(self):
        sale = documents.create_document(
            Sale,
            {
                "customer": self.customer,
                "warehouse": self.warehouse,
                "items": [
                    {
                        "item": self.item,
                        "quantity": Decimal("2"),
                        "unit_price": Decimal("50"),
                        "discount_type": SaleItem.DISCOUNT_PERCENT,
                        "discount": Decimal("10"),
                    }
                ],
            },
        )
        self.assertEqual(sale.total, Decimal("90.00"))

    def test_quantity_change_adjusts_stock_by_delta(self):
        sale = self.sell()
        line = sale.lines()[0]
        documents.update_document(
            Sale,
            sale.pk,
            {"items": [{"id": line.pk, "item": self.item, "quantity": Decimal("5"), "unit_price": Decimal("50")}]},
        )
        self.assertEqual(self.stock(), Decimal("5"))
        self.assertEqual(self.customer.current_balance, Decimal("-250.00"))

    def test_delete_returns_stock_and_balance(self):
        sale = self.sell()
        documents.delete_document(Sale, sale.pk)
        self.assertEqual(self.stock(), Decimal("10"))
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
        self.assertTrue(SaleItem.all_objects.filter(document_id=sale.pk, deleted_at__isnull=False).exists())

        documents.restore_document(Sale, sale.pk)
        self.assertEqual(self.stock(), Decimal("8"))
        self.assertEqual(self.customer.current_balance, Decimal("-100.00"))

    def test_line_removed_earlier_stays_removed_on_restore(self):
        other = create_item("W-2", "Gadget")
        inventory.add(other.pk, self.warehouse.pk, Decimal("4"))
        sale = documents.create_document(
            Sale,
            {
                "customer": self.customer,
                "warehouse": self.warehouse,
                "items": [
                    {"item": self.item, "quantity": Decimal("1"), "unit_price": Decimal("10")},
                    {"item": other, "quantity": Decimal("1"), "unit_price": Decimal("10")},
                ],
            },
        )
        keep = next(line for line in sale.lines() if line.item_id == self.item.pk)
        documents.update_document(
            Sale,
            sale.pk,
            {"items": [{"id": keep.pk, "item": self.item, "quantity": Decimal("1"), "unit_price": Decimal("10")}]},
        )

        documents.delete_document(Sale, sale.pk)
        documents.restore_document(Sale, sale.pk)

        self.assertEqual(inventory.get_quantity(other.pk, self.warehouse.pk), Decimal("4"))
        self.assertEqual(self.stock(), Decimal("9"))

    def test_insufficient_stock_rolls_back(self):
        with self.assertRaises(InventoryError) as ctx:
            self.sell(quantity="11")
        self.assertIn("Insufficient inventory", ctx.exception.message)
        self.assertFalse(Sale.all_objects.exists())
        self.assertEqual(self.stock(), Decimal("10"))
        self.assertEqual(self.customer.current_balance, Decimal("0.00"))
