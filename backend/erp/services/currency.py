"""Currency conversion helpers used by every financial document."""
from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Sequence

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

MULTIPLY = "multiply"
DIVIDE = "divide"


def _coerce_decimal(value: Any, fallback: Decimal) -> Decimal:
    """Return ``value`` as :class:`~decimal.Decimal` or ``fallback`` if invalid."""

    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError):
        return fallback


def to_decimal(value: Any, default: Any = "0") -> Decimal:
    """Normalise ``value`` into :class:`~decimal.Decimal` with a fallback."""

    default_decimal = default if isinstance(default, Decimal) else _coerce_decimal(default, Decimal("0"))
    if value in (None, ""):
        return default_decimal
    return _coerce_decimal(value, default_decimal)


def normalise_currency(value: Optional[str], *fallbacks: Optional[str], default: str = "USD") -> str:
    """Return an upper-cased ISO currency code using provided fallbacks."""

    candidates: Sequence[Optional[str]] = (value,) + fallbacks + (default,)
    for candidate in candidates:
        if not candidate:
            continue
        code = str(candidate).strip().upper()
        if code:
            return code
    raise ValueError("Unable to determine currency code")


def money(value: Any) -> Decimal:
    return to_decimal(value).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def resolve_rate(currency, manual_rate: Any = None) -> Decimal:
    """Return the rate to record on a document.

    A positive ``manual_rate`` wins; otherwise the currency's active rate is
    used, defaulting to 1 when there is no currency or no active rate.
    """

    if manual_rate not in (None, ""):
        manual = to_decimal(manual_rate)
        if manual > 0:
            return manual
    if currency is None:
        return Decimal("1")
    return currency.active_rate


def to_usd(amount: Any, rate: Any, calculation_type: str = MULTIPLY) -> Decimal:
    """Convert a native ``amount`` to the base currency at ``rate``.

    A zero rate leaves the amount unchanged.
    """

    amount_decimal = to_decimal(amount)
    rate_decimal = to_decimal(rate, default="1")
    if rate_decimal == 0:
        logger.error("Currency rate is zero; returning %s unconverted", amount_decimal)
        return amount_decimal.quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    if calculation_type == DIVIDE:
        converted = amount_decimal / rate_decimal
    else:
        converted = amount_decimal * rate_decimal
    return converted.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def from_usd(amount_usd: Any, rate: Any, calculation_type: str = MULTIPLY) -> Decimal:
    """Inverse of :func:`to_usd`."""

    inverse = DIVIDE if calculation_type == MULTIPLY else MULTIPLY
    return to_usd(amount_usd, rate, inverse)


def document_to_usd(document, amount: Any) -> Decimal:
    """Convert ``amount`` using the rate already recorded on ``document``."""

    currency = getattr(document, "currency", None)
    calculation_type = currency.calculation_type if currency is not None else MULTIPLY
    return to_usd(amount, document.currency_rate, calculation_type)
