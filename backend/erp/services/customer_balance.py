"""Monthly aggregates behind the computed customer balance.

A customer's balance is never stored on the customer row.  Every movement is
recorded in the current month's :class:`~erp.models.CustomerBalanceMonthly`
row, and the balance is read back as the latest positive closing balance plus
the running total of the open month.

``transaction_total = (payment + credit + return) - (sale + debit)`` so a
positive figure means the customer is in credit.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from django.apps import apps
from django.db import transaction
from django.db.models import F, Q
from django.utils import timezone

logger = logging.getLogger(__name__)

# Sign of each bucket in transaction_total.
BUCKET_SIGNS = {
    "payment": 1,
    "credit": 1,
    "return": 1,
    "sale": -1,
    "debit": -1,
}


def default_bucket(amount: Decimal) -> str:
    return "credit" if amount >= 0 else "debit"


def _monthly_model():
    return apps.get_model("erp", "CustomerBalanceMonthly")


def latest_closing_balance(customer_id: int) -> Decimal:
    row = (
        _monthly_model()
        .objects.filter(customer_id=customer_id, transaction_total__gt=0, closing_balance__gt=0)
        .order_by("-year", "-month")
        .values_list("closing_balance", flat=True)
        .first()
    )
    return row if row is not None else Decimal("0.00")


def current_transaction_total(customer_id: int, today: Optional[date] = None) -> Decimal:
    today = today or timezone.localdate()
    row = (
        _monthly_model()
        .objects.filter(
            customer_id=customer_id,
            closing_balance=0,
            year=today.year,
            month=today.month,
        )
        .values_list("transaction_total", flat=True)
        .first()
    )
    return row if row is not None else Decimal("0.00")


def current_balance(customer_id: int) -> Decimal:
    return latest_closing_balance(customer_id) + current_transaction_total(customer_id)


def update_monthly_total(
    customer_id: int,
    kind: Optional[str],
    amount: Decimal,
    entry_id: Optional[int] = None,
    entries: int = 0,
    today: Optional[date] = None,
) -> bool:
    """Record a signed balance movement of ``amount`` in the ``kind`` bucket.

    ``amount`` is the change to the customer's balance; the bucket itself
    moves by ``amount`` times the bucket's sign so that ``transaction_total``
    changes by exactly ``amount``.  Without a ``kind`` the movement is booked
    as a manual credit (positive) or debit (negative).  Returns ``False`` when
    the customer does not exist.
    """

    customer_model = apps.get_model("erp", "Customer")
    if not customer_id or not customer_model.objects.filter(pk=customer_id).exists():
        logger.warning("Skipped %s movement of %s: customer #%s not found", kind, amount, customer_id)
        return False

    if kind is None:
        kind = default_bucket(amount)
    if kind not in BUCKET_SIGNS:
        raise ValueError(f"Unknown customer balance bucket: {kind!r}")

    today = today or timezone.localdate()
    monthly = _monthly_model()
    with transaction.atomic():
        row, _ = monthly.objects.get_or_create(
            customer_id=customer_id,
            year=today.year,
            month=today.month,
            defaults={"last_updated_by": kind, "updated_by_entry_id": entry_id},
        )
        monthly.objects.filter(pk=row.pk).update(
            **{
                f"total_{kind}": F(f"total_{kind}") + entries,
                f"total_{kind}_amount": F(f"total_{kind}_amount") + amount * BUCKET_SIGNS[kind],
                "transaction_total": F("transaction_total") + amount,
                "last_updated_by": kind,
                "updated_by_entry_id": entry_id,
            }
        )
    return True


def calculate_transaction_total(row) -> Decimal:
    return (row.total_payment_amount + row.total_credit_amount + row.total_return_amount) - (
        row.total_sale_amount + row.total_debit_amount
    )


def end_of_month_calculation(customer_id: int, today: Optional[date] = None):
    """Close the customer's open months before the current one, oldest first.

    Each closing balance is the previous positive closing balance plus the
    month's transaction total.  The current month keeps collecting movements
    and is never closed.  Returns the last closed row, or ``None`` when there
    is nothing to close.
    """

    today = today or timezone.localdate()
    closed = None
    with transaction.atomic():
        rows = list(
            _monthly_model()
            .objects.select_for_update()
            .filter(customer_id=customer_id, closing_balance=0)
            .filter(Q(year__lt=today.year) | Q(year=today.year, month__lt=today.month))
            .order_by("year", "month")
        )
        for row in rows:
            row.transaction_total = calculate_transaction_total(row)
            row.closing_balance = latest_closing_balance(customer_id) + row.transaction_total
            row.save(update_fields=["transaction_total", "closing_balance", "updated_at"])
            logger.info(
                "Closed %s-%02d for customer #%s at %s", row.year, row.month, customer_id, row.closing_balance
            )
            closed = row
    return closed
