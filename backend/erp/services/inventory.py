"""Stock movements for items held in warehouses."""

from __future__ import annotations

import logging
from decimal import Decimal

from django.apps import apps
from django.db import transaction

from ..exceptions import InventoryError

logger = logging.getLogger(__name__)


def _positive(quantity) -> Decimal:
    quantity = Decimal(str(quantity))
    if quantity <= 0:
        raise InventoryError("Quantity must be greater than zero.", details={"quantity": str(quantity)})
    return quantity


def _locked_row(item_id, warehouse_id):
    item_model = apps.get_model("erp", "Item")
    warehouse_model = apps.get_model("erp", "Warehouse")
    if not item_model.objects.filter(pk=item_id).exists():
        raise InventoryError(f"Item #{item_id} does not exist.", details={"item_id": item_id})
    if not warehouse_model.objects.filter(pk=warehouse_id).exists():
        raise InventoryError(
            f"Warehouse #{warehouse_id} does not exist.", details={"warehouse_id": warehouse_id}
        )
    inventory_model = apps.get_model("erp", "Inventory")
    inventory_model.objects.get_or_create(item_id=item_id, warehouse_id=warehouse_id)
    return inventory_model.objects.select_for_update().get(item_id=item_id, warehouse_id=warehouse_id)


def get_quantity(item_id, warehouse_id) -> Decimal:
    inventory_model = apps.get_model("erp", "Inventory")
    quantity = (
        inventory_model.objects.filter(item_id=item_id, warehouse_id=warehouse_id)
        .values_list("quantity", flat=True)
        .first()
    )
    return quantity if quantity is not None else Decimal("0")


def add(item_id, warehouse_id, quantity):
    """Increase stock of ``item_id`` in ``warehouse_id``."""

    quantity = _positive(quantity)
    with transaction.atomic():
        row = _locked_row(item_id, warehouse_id)
        row.quantity = row.quantity + quantity
        row.save(update_fields=["quantity"])
    return row


def subtract(item_id, warehouse_id, quantity):
    """Decrease stock, refusing to go below zero."""

    quantity = _positive(quantity)
    with transaction.atomic():
        row = _locked_row(item_id, warehouse_id)
        if row.quantity < quantity:
            raise InventoryError(
                f"Insufficient inventory. Available: {row.quantity}, Required: {quantity}",
                details={"item_id": item_id, "warehouse_id": warehouse_id},
            )
        row.quantity = row.quantity - quantity
        row.save(update_fields=["quantity"])
    return row


def adjust(item_id, warehouse_id, delta):
    """Apply a signed quantity change; zero is a no-op."""

    delta = Decimal(str(delta or 0))
    if delta > 0:
        return add(item_id, warehouse_id, delta)
    if delta < 0:
        return subtract(item_id, warehouse_id, -delta)
    return None
