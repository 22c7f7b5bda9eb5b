"""Item price history written by stock documents.

Each document line that sets a price leaves one history row pointing at its
source document.  Removing a document reverts the item to the price it had
before the row was written; restoring the document brings the row back.
"""

from __future__ import annotations

import logging
from decimal import Decimal

from django.apps import apps
from django.db import transaction
from django.utils import timezone

logger = logging.getLogger(__name__)


def _models():
    return apps.get_model("erp", "ItemPrice"), apps.get_model("erp", "ItemPriceHistory")


def current_price(item_id) -> Decimal | None:
    price_model, _ = _models()
    return price_model.objects.filter(item_id=item_id).values_list("price_usd", flat=True).first()


def _latest_alive(history_model, item_id):
    return (
        history_model.objects.filter(item_id=item_id)
        .order_by("-effective_date", "-id")
        .first()
    )


def record_price(item_id, price_usd, effective_date, source_type, source_id, note="", source_line_id=None):
    """Set the item's current price and write a history row for ``source``."""

    price_model, history_model = _models()
    with transaction.atomic():
        price, created = price_model.objects.select_for_update().get_or_create(
            item_id=item_id,
            defaults={"price_usd": price_usd, "effective_date": effective_date},
        )
        previous = Decimal("0") if created else price.price_usd
        if not created:
            price.price_usd = price_usd
            price.effective_date = effective_date
            price.save(update_fields=["price_usd", "effective_date"])
        return history_model.objects.create(
            item_id=item_id,
            price_usd=price_usd,
            previous_price_usd=previous,
            effective_date=effective_date,
            source_type=source_type,
            source_id=source_id,
            source_line_id=source_line_id,
            note=note,
        )


def revert_source(source_type, source_id, source_line_id=None, deleted_at=None) -> int:
    """Soft-delete the history rows of a source and roll item prices back.

    ``source_line_id`` narrows the revert to the row written by one line.
    Rows are stamped with ``deleted_at`` so a later restore can pick out
    exactly the rows removed together.
    """

    price_model, history_model = _models()
    deleted_at = deleted_at or timezone.now()
    reverted = 0
    with transaction.atomic():
        rows = history_model.objects.filter(source_type=source_type, source_id=source_id)
        if source_line_id is not None:
            rows = rows.filter(source_line_id=source_line_id)
        for row in rows.order_by("-effective_date", "-id"):
            latest = _latest_alive(history_model, row.item_id)
            if latest is not None and latest.pk == row.pk:
                price_model.objects.filter(item_id=row.item_id).update(price_usd=row.previous_price_usd)
            row.deleted_at = deleted_at
            row.save(update_fields=["deleted_at"])
            reverted += 1
    logger.debug("Reverted %s price history rows for %s #%s", reverted, source_type, source_id)
    return reverted


def restore_source(source_type, source_id, deleted_at=None) -> int:
    """Bring back the history rows of a source and reapply their prices.

    With ``deleted_at`` only the rows removed at that moment come back.
    """

    price_model, history_model = _models()
    restored = 0
    with transaction.atomic():
        rows = history_model.all_objects.filter(
            source_type=source_type, source_id=source_id, deleted_at__isnull=False
        )
        if deleted_at is not None:
            rows = rows.filter(deleted_at=deleted_at)
        for row in rows.order_by("effective_date", "id"):
            row.deleted_at = None
            row.save(update_fields=["deleted_at"])
            latest = _latest_alive(history_model, row.item_id)
            if latest is not None and latest.pk == row.pk:
                price_model.objects.filter(item_id=row.item_id).update(price_usd=row.price_usd)
            restored += 1
    return restored
