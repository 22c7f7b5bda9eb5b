"""Balance adjustment primitives.

Stored balances (accounts and suppliers) are changed with a single
``UPDATE ... SET current_balance = current_balance + delta`` statement so
concurrent documents touching the same row never lose an update.  Customer
balances are computed on read; their movements are routed to the monthly
aggregate kept by :mod:`erp.services.customer_balance`.

A missing ledger row is tolerated: the adjustment is skipped and ``False`` is
returned.  Callers are expected to run inside the transaction that writes the
triggering document.
"""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from django.apps import apps
from django.db import transaction
from django.db.models import F

from ..transitions import ACCOUNT, CUSTOMER, SUPPLIER, Adjustment
from . import customer_balance

logger = logging.getLogger(__name__)

__all__ = [
    "add_balance",
    "post_adjustments",
    "remove_balance",
]

MONEY_QUANTIZER = Decimal("0.01")

STORED_LEDGERS = {
    ACCOUNT: "Account",
    SUPPLIER: "Supplier",
}


def _to_decimal(amount: Optional[Decimal | int | float | str]) -> Decimal:
    """Normalise *amount* to a Decimal with the project's rounding rules."""

    if amount in (None, "", 0):
        return Decimal("0.00")
    if isinstance(amount, Decimal):
        value = amount
    else:
        value = Decimal(str(amount))
    return value.quantize(MONEY_QUANTIZER, rounding=ROUND_HALF_UP)


def _adjust_balance(
    ledger: str,
    ledger_id: Optional[int],
    delta: Decimal,
    *,
    kind: Optional[str] = None,
    entry_id: Optional[int] = None,
    entries: int = 0,
) -> bool:
    if not ledger_id:
        return False

    if ledger == CUSTOMER:
        if not delta and not entries:
            return False
        return customer_balance.update_monthly_total(
            ledger_id, kind, delta, entry_id=entry_id, entries=entries
        )

    if not delta:
        return False

    model = apps.get_model("erp", STORED_LEDGERS[ledger])
    with transaction.atomic():
        updated = model.objects.filter(pk=ledger_id).update(
            current_balance=F("current_balance") + delta
        )
    if not updated:
        logger.warning("Skipped %s adjustment of %s: %s #%s not found", ledger, delta, ledger, ledger_id)
        return False
    logger.debug("Adjusted %s #%s by %s", ledger, ledger_id, delta)
    return True


def add_balance(
    ledger: str,
    ledger_id: Optional[int],
    amount: Decimal | int | float | str,
    **options,
) -> bool:
    """Increase the balance of ``ledger`` #``ledger_id`` by ``amount``."""

    return _adjust_balance(ledger, ledger_id, _to_decimal(amount), **options)


def remove_balance(
    ledger: str,
    ledger_id: Optional[int],
    amount: Decimal | int | float | str,
    **options,
) -> bool:
    """Decrease the balance of ``ledger`` #``ledger_id`` by ``amount``."""

    return _adjust_balance(ledger, ledger_id, -_to_decimal(amount), **options)


def post_adjustments(adjustments: Iterable[Adjustment], entry_id: Optional[int] = None) -> int:
    """Apply every adjustment in order and return how many changed a ledger."""

    applied = 0
    with transaction.atomic():
        for adjustment in adjustments:
            if add_balance(
                adjustment.ledger,
                adjustment.ledger_id,
                adjustment.amount,
                kind=adjustment.kind,
                entry_id=entry_id,
                entries=adjustment.entries,
            ):
                applied += 1
    return applied
