"""Exchange-rate feed used to refresh the active rate of each currency."""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

import logging
import requests
from django.conf import settings
from django.core.cache import cache

from .services.currency import DIVIDE

logger = logging.getLogger(__name__)

CACHE_TIMEOUT = 3600
RATE_QUANTIZER = Decimal("0.000001")


class ExchangeRateUnavailable(RuntimeError):
    """The feed could not provide a rate for the requested pair."""


def _as_decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError) as conversion_error:
        raise ValueError(f"Invalid exchange rate value received: {value}") from conversion_error


def _extract_rate(data: Mapping[str, Any], from_currency: str, to_currency: str) -> Decimal:
    """Find the pair's rate in a feed payload.

    ``/latest`` style feeds return ``rates``, currencylayer style feeds return
    ``quotes`` keyed by the concatenated pair, and ``/convert`` returns
    ``info.rate`` or ``result``.
    """

    rates = data.get("rates")
    if isinstance(rates, Mapping) and to_currency in rates:
        return _as_decimal(rates[to_currency])

    quotes = data.get("quotes")
    if isinstance(quotes, Mapping) and f"{from_currency}{to_currency}" in quotes:
        return _as_decimal(quotes[f"{from_currency}{to_currency}"])

    info = data.get("info")
    if isinstance(info, Mapping) and "rate" in info:
        return _as_decimal(info["rate"])

    for key in ("result", "rate"):
        if key in data:
            return _as_decimal(data[key])

    raise ValueError("Exchange rate data missing requested currency")


def fetch_exchange_rate(from_currency: str, to_currency: str) -> Decimal:
    """Return how many ``to_currency`` units one ``from_currency`` unit buys.

    Successful lookups are cached for an hour.
    """

    from_currency = from_currency.upper()
    to_currency = to_currency.upper()
    if from_currency == to_currency:
        return Decimal("1")

    cache_key = f"exchange_rate_{from_currency}_{to_currency}"
    cached_rate = cache.get(cache_key)
    if cached_rate is not None:
        return Decimal(str(cached_rate))

    api_url = settings.EXCHANGE_RATE_API_URL
    params = {"base": from_currency, "symbols": to_currency}
    if settings.EXCHANGE_RATE_API_KEY:
        params["access_key"] = settings.EXCHANGE_RATE_API_KEY

    try:
        response = requests.get(api_url, params=params, timeout=10)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, Mapping):
            raise ValueError("Exchange rate response is not a JSON object")
        if data.get("success") is False:
            error_detail = data.get("error") or data.get("message")
            if isinstance(error_detail, Mapping):
                error_detail = error_detail.get("info", str(error_detail))
            raise ValueError(f"Exchange rate API returned error: {error_detail}")
        rate = _extract_rate(data, from_currency, to_currency)
    except (requests.exceptions.RequestException, ValueError) as exc:
        logger.exception(
            "Failed to fetch exchange rate from %s for %s -> %s", api_url, from_currency, to_currency
        )
        raise ExchangeRateUnavailable(
            f"Unable to fetch exchange rate for {from_currency} to {to_currency}"
        ) from exc

    cache.set(cache_key, rate, timeout=CACHE_TIMEOUT)
    return rate


def refresh_currency_rate(currency, base_currency: Optional[str] = None):
    """Fetch the current rate for ``currency`` and make it the active rate.

    ``multiply`` currencies store the base-currency value of one unit,
    ``divide`` currencies store how many units buy one base-currency unit.
    """

    base_code = (base_currency or settings.ERP_BASE_CURRENCY).upper()
    if currency.code == base_code:
        return currency.set_active_rate(Decimal("1"))

    if currency.calculation_type == DIVIDE:
        rate = fetch_exchange_rate(base_code, currency.code)
    else:
        rate = fetch_exchange_rate(currency.code, base_code)
    rate = rate.quantize(RATE_QUANTIZER, rounding=ROUND_HALF_UP)
    if rate <= 0:
        raise ExchangeRateUnavailable(f"Exchange rate for {currency.code} must be positive, got {rate}")
    logger.info("Refreshed %s rate against %s: %s", currency.code, base_code, rate)
    return currency.set_active_rate(rate)
