from decimal import Decimal

from django.test import TestCase

from ..models import Currency, ItemPriceHistory, Purchase, PurchaseReturn
from ..services import documents, inventory, pricing
from . import balance_of, create_item, create_ledgers, create_user, default_warehouse


class PurchaseLedgerTests(TestCase):
    def setUp(self):
        self.user = create_user()
        _, _, self.supplier = create_ledgers()
        self.warehouse = default_warehouse()
        self.item = create_item()

    def purchase(self, quantity="5", unit_price="100", approved=True, **extra):
        data = {
            "supplier": self.supplier,
            "warehouse": self.warehouse,
            "items": [{"item": self.item, "quantity": Decimal(quantity), "unit_price": Decimal(unit_price)}],
        }
        if approved:
            data["approved_by"] = self.user
        data.update(extra)
        return documents.create_document(Purchase, data, user=self.user)

    def stock(self):
        return inventory.get_quantity(self.item.pk, self.warehouse.pk)

    def test_purchase_then_return_then_delete_return(self):
        self.purchase()
        self.assertEqual(balance_of(self.supplier), Decimal("500.00"))

        purchase_return = documents.create_document(
            PurchaseReturn,
            {
                "supplier": self.supplier,
                "warehouse": self.warehouse,
                "items": [{"item": self.item, "quantity": Decimal("2"), "unit_price": Decimal("100")}],
            },
        )
        self.assertEqual(purchase_return.final_total_usd, Decimal("200.00"))
        self.assertEqual(balance_of(self.supplier), Decimal("300.00"))

        documents.delete_document(PurchaseReturn, purchase_return.pk)
        self.assertEqual(balance_of(self.supplier), Decimal("500.00"))

    def test_lines_move_stock_and_set_price(self):
        purchase = self.purchase(quantity="4", unit_price="25")
        self.assertEqual(purchase.total, Decimal("100.00"))
        self.assertEqual(self.stock(), Decimal("4"))
        self.assertEqual(pricing.current_price(self.item.pk), Decimal("25.00"))
        history = ItemPriceHistory.objects.get(source_type=Purchase.PRICE_SOURCE, source_id=purchase.pk)
        self.assertEqual(history.previous_price_usd, Decimal("0"))

    def test_fees_and_tax_are_part_of_final_total(self):
        purchase = self.purchase(quantity="1", unit_price="100", fees=Decimal("10"), tax=Decimal("5"))
        self.assertEqual(purchase.final_total_usd, Decimal("115.00"))
        self.assertEqual(balance_of(self.supplier), Decimal("115.00"))

    def test_foreign_currency_totals(self):
        lira = Currency.objects.create(code="TRY", calculation_type="divide")
        lira.set_active_rate(Decimal("40"))
        purchase = self.purchase(quantity="2", unit_price="400", currency=lira)
        self.assertEqual(purchase.total, Decimal("800.00"))
        self.assertEqual(purchase.final_total_usd, Decimal("20.00"))
        self.assertEqual(pricing.current_price(self.item.pk), Decimal("10.00"))

    def test_pending_purchase_moves_stock_but_not_balance(self):
        purchase = self.purchase(approved=False)
        self.assertEqual(self.stock(), Decimal("5"))
        self.assertEqual(balance_of(self.supplier), Decimal("0"))

        documents.approve_document(Purchase, purchase.pk, self.user)
        self.assertEqual(balance_of(self.supplier), Decimal("500.00"))

    def test_editing_lines_applies_quantity_and_total_deltas(self):
        purchase = self.purchase()
        line = purchase.lines()[0]

        documents.update_document(
            Purchase,
            purchase.pk,
            {"items": [{"id": line.pk, "item": self.item, "quantity": Decimal("3"), "unit_price": Decimal("100")}]},
        )

        self.assertEqual(self.stock(), Decimal("3"))
        self.assertEqual(balance_of(self.supplier), Decimal("300.00"))

    def test_removing_a_line_returns_its_stock(self):
        other = create_item("W-2", "Gadget")
        purchase = documents.create_document(
            Purchase,
            {
                "supplier": self.supplier,
                "warehouse": self.warehouse,
                "approved_by": self.user,
                "items": [
                    {"item": self.item, "quantity": Decimal("1"), "unit_price": Decimal("10")},
                    {"item": other, "quantity": Decimal("2"), "unit_price": Decimal("10")},
                ],
            },
        )
        keep = next(line for line in purchase.lines() if line.item_id == self.item.pk)

        documents.update_document(
            Purchase,
            purchase.pk,
            {"items": [{"id": keep.pk, "item": self.item, "quantity": Decimal("1"), "unit_price": Decimal("10")}]},
        )

        self.assertEqual(inventory.get_quantity(other.pk, self.warehouse.pk), Decimal("0"))
        self.assertEqual(balance_of(self.supplier), Decimal("10.00"))

    def test_delete_and_restore_purchase(self):
        purchase = self.purchase()
        documents.delete_document(Purchase, purchase.pk)
        self.assertEqual(self.stock(), Decimal("0"))
        self.assertEqual(balance_of(self.supplier), Decimal("0.00"))
        self.assertEqual(pricing.current_price(self.item.pk), Decimal("0.00"))

        documents.restore_document(Purchase, purchase.pk)
        self.assertEqual(self.stock(), Decimal("5"))
        self.assertEqual(balance_of(self.supplier), Decimal("500.00"))
        self.assertEqual(pricing.current_price(self.item.pk), Decimal("100.00"))

    def test_removed_line_gives_back_its_price(self):
        other = create_item("W-2", "Gadget")
        self.purchase(unit_price="50")
        purchase = documents.create_document(
            Purchase,
            {
                "supplier": self.supplier,
                "warehouse": self.warehouse,
                "approved_by": self.user,
                "items": [
                    {"item": self.item, "quantity": Decimal("1"), "unit_price": Decimal("80")},
                    {"item": other, "quantity": Decimal("1"), "unit_price": Decimal("30")},
                ],
            },
        )
        self.assertEqual(pricing.current_price(self.item.pk), Decimal("80.00"))
        keep = next(line for line in purchase.lines() if line.item_id == other.pk)

        documents.update_document(
            Purchase,
            purchase.pk,
            {"items": [{"id": keep.pk, "item": other, "quantity": Decimal("1"), "unit_price": Decimal("30")}]},
        )

        self.assertEqual(pricing.current_price(self.item.pk), Decimal("50.00"))
        self.assertFalse(
            ItemPriceHistory.objects.filter(source_id=purchase.pk, item=self.item).exists()
        )

        documents.delete_document(Purchase, purchase.pk)
        documents.restore_document(Purchase, purchase.pk)
        self.assertEqual(pricing.current_price(other.pk), Decimal("30.00"))
        self.assertEqual(pricing.current_price(self.item.pk), Decimal("50.00"))

    def test_switching_currency_reprices_lines(self):
        euro = Currency.objects.create(code="EUR", name="Euro")
        euro.set_active_rate(Decimal("2"))
        pound = Currency.objects.create(code="LBP", name="Lebanese Pound")
        pound.set_active_rate(Decimal("0.5"))
        purchase = self.purchase(currency=euro)
        self.assertEqual(balance_of(self.supplier), Decimal("1000.00"))

        purchase = documents.update_document(Purchase, purchase.pk, {"currency": pound})

        self.assertEqual(purchase.currency_rate, Decimal("0.5"))
        self.assertEqual(purchase.final_total_usd, Decimal("250.00"))
        self.assertEqual(balance_of(self.supplier), Decimal("250.00"))
