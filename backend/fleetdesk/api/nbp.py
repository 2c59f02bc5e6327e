"""NBP exchange rate lookup for foreign-currency invoices."""

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.fleetdesk.core.security import get_current_user
from backend.fleetdesk.core.time import utc_today
from backend.fleetdesk.models.user import User
from backend.fleetdesk.schemas.exchange_rate import ExchangeRateRead
from backend.fleetdesk.services.nbp import (
    MAX_DAYS_BACK,
    FutureRateDateError,
    NbpServiceError,
    UnsupportedCurrencyError,
    default_rate_date,
    fetch_exchange_rate,
    find_last_available_rate,
)

router = APIRouter(prefix="/api/nbp", tags=["nbp"])


def _rate_response(exchange_rate) -> dict:
    return {
        "currency": exchange_rate.currency,
        "rate": exchange_rate.rate,
        "date": exchange_rate.effective_date,
        "table": exchange_rate.table,
        "warning": exchange_rate.warning,
    }


@router.get("/exchange-rate", response_model=ExchangeRateRead)
def get_exchange_rate(
    currency: str,
    rate_date: date | None = Query(default=None, alias="date"),
    sale_date: date | None = None,
    issue_date: date | None = None,
    current_user: User = Depends(get_current_user),
):
    today = utc_today()
    if rate_date is None and (sale_date or issue_date):
        rate_date = default_rate_date(sale_date, issue_date, today)
    try:
        exchange_rate = fetch_exchange_rate(currency, rate_date, today=today)
    except (UnsupportedCurrencyError, FutureRateDateError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except NbpServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    return _rate_response(exchange_rate)


@router.get("/rates", response_model=ExchangeRateRead)
def get_rate_for_date(
    currency: str,
    rate_date: date = Query(alias="date"),
    find_previous: bool = False,
    current_user: User = Depends(get_current_user),
):
    """Rate published on ``date``; with ``find_previous`` the last table within a week before it."""
    max_days_back = MAX_DAYS_BACK if find_previous else 1
    try:
        exchange_rate = find_last_available_rate(currency, rate_date, max_days_back=max_days_back, today=utc_today())
    except (UnsupportedCurrencyError, FutureRateDateError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except NbpServiceError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message)
    if exchange_rate is None:
        raise HTTPException(
            status_code=404,
            detail="No exchange rate available for this date. NBP does not publish rates on weekends and holidays.",
        )
    return _rate_response(exchange_rate)
