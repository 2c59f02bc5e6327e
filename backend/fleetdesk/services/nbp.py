"""NBP (National Bank of Poland) exchange-rate client.

Reads table A mid rates from the public NBP API. NBP publishes no rates on
weekends and holidays; a 404 for a specific day falls back to the closest
earlier table (or the latest one) and attaches a warning naming its effective
date. Rates found for a given day are cached in memory for an hour.
"""

import logging
import time
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal

import requests

from backend.fleetdesk.core.settings import get_settings
from backend.fleetdesk.services.invoice_math import BASE_CURRENCY, ExchangeRate

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ("EUR", "USD", "GBP", "CHF", "CZK", "DKK", "NOK", "SEK", "HUF", "UAH")
RATE_CACHE_TTL_SECONDS = 60 * 60
MAX_DAYS_BACK = 7


class NbpServiceError(Exception):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnsupportedCurrencyError(ValueError):
    pass


class FutureRateDateError(ValueError):
    pass


def default_rate_date(sale_date: date | None, issue_date: date | None, today: date) -> date:
    """Rate date for a foreign-currency invoice: the day before the sale (or issue) date."""
    base = sale_date or issue_date or today
    return base - timedelta(days=1)


def _rates_url(currency: str, suffix: str = "") -> str:
    base = get_settings().nbp_api_url.rstrip("/")
    return f"{base}/exchangerates/rates/a/{currency.lower()}/{suffix}"


def _get(url: str) -> requests.Response:
    settings = get_settings()
    try:
        return requests.get(url, headers={"Accept": "application/json"}, timeout=settings.nbp_timeout_seconds)
    except requests.RequestException as exc:
        logger.error("NBP request to %s failed: %s", url, exc)
        raise NbpServiceError("Could not reach the NBP exchange rate service") from exc


def _parse_rate(payload: dict) -> ExchangeRate:
    rate = payload["rates"][0]
    return ExchangeRate(
        currency=payload["code"],
        rate=Decimal(str(rate["mid"])),
        effective_date=date.fromisoformat(rate["effectiveDate"]),
        table=rate["no"],
    )


@dataclass
class _CachedRate:
    rate: ExchangeRate
    stored_at: float

    def is_expired(self) -> bool:
        return time.monotonic() - self.stored_at > RATE_CACHE_TTL_SECONDS


# (currency, day) -> rate published that day; only found rates are cached
_rate_cache: dict[tuple[str, date], _CachedRate] = {}


def clear_rate_cache() -> None:
    _rate_cache.clear()


def _validated_currency(currency: str) -> str:
    code = (currency or "").upper()
    if code == BASE_CURRENCY:
        raise UnsupportedCurrencyError("PLN does not need conversion")
    if code not in SUPPORTED_CURRENCIES:
        raise UnsupportedCurrencyError(f"Unsupported currency. Supported: {', '.join(SUPPORTED_CURRENCIES)}")
    return code


def _check_not_future(on_date: date | None, today: date | None) -> None:
    if on_date is not None and today is not None and on_date > today:
        raise FutureRateDateError("Cannot fetch an exchange rate for a future date")


def fetch_rate_for_day(currency: str, on_date: date) -> ExchangeRate | None:
    """Rate from the table published on ``on_date``, or None when NBP published none that day."""
    key = (currency, on_date)
    cached = _rate_cache.get(key)
    if cached is not None and not cached.is_expired():
        return cached.rate

    url = _rates_url(currency, f"{on_date.isoformat()}/")
    response = _get(url)
    if response.status_code == 404:
        return None
    if not response.ok:
        logger.warning("NBP returned HTTP %s for %s", response.status_code, url)
        raise NbpServiceError("Error while fetching the NBP exchange rate", status_code=502)

    exchange_rate = _parse_rate(response.json())
    _rate_cache[key] = _CachedRate(rate=exchange_rate, stored_at=time.monotonic())
    return exchange_rate


def find_last_available_rate(
    currency: str, on_date: date, max_days_back: int = MAX_DAYS_BACK, today: date | None = None
) -> ExchangeRate | None:
    """Walk back from ``on_date`` one day at a time to the last published rate.

    At most ``max_days_back`` days are tried, ``on_date`` included. Returns None
    when none of them has a table.
    """
    code = _validated_currency(currency)
    _check_not_future(on_date, today)
    for offset in range(max_days_back):
        day = on_date - timedelta(days=offset)
        exchange_rate = fetch_rate_for_day(code, day)
        if exchange_rate is not None:
            if offset:
                logger.info("No NBP %s rate for %s, using the table from %s", code, on_date, day)
            return exchange_rate
    return None


def fetch_exchange_rate(currency: str, on_date: date | None = None, today: date | None = None) -> ExchangeRate:
    """Rate for ``on_date``, or the latest published rate when no date is given.

    A day without a table resolves to the closest earlier table within a week,
    then to the latest table overall; either way the result carries a warning.
    """
    code = _validated_currency(currency)
    _check_not_future(on_date, today)

    if on_date is None:
        url = _rates_url(code)
        response = _get(url)
        if not response.ok:
            logger.warning("NBP returned HTTP %s for %s", response.status_code, url)
            raise NbpServiceError("Error while fetching the NBP exchange rate", status_code=502)
        return _parse_rate(response.json())

    exchange_rate = fetch_rate_for_day(code, on_date)
    if exchange_rate is not None:
        return exchange_rate

    exchange_rate = find_last_available_rate(code, on_date - timedelta(days=1))
    if exchange_rate is None:
        logger.info("No NBP %s rate in the week before %s, falling back to the last published rate", code, on_date)
        fallback = _get(_rates_url(code, "last/1/"))
        if not fallback.ok:
            raise NbpServiceError(
                "No rate found for the requested date. NBP does not publish rates on weekends and holidays.",
                status_code=404,
            )
        exchange_rate = _parse_rate(fallback.json())

    warning = (
        f"No rate published for {on_date.isoformat()}. "
        f"Showing the last available rate from {exchange_rate.effective_date.isoformat()}."
    )
    return replace(exchange_rate, warning=warning)
