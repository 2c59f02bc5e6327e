"""Invoice monetary computations using Decimal math.

Line and invoice totals are summed without intermediate rounding; amounts are
rounded half-up to two decimals only when displayed or persisted
(:func:`round_money`). A VAT rate of ``-1`` marks an exempt ("zw.") line: it
carries no tax but keeps its ``-1`` value for storage and display.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, NamedTuple, Optional, Sequence

logger = logging.getLogger(__name__)

VAT_EXEMPT = -1
VAT_RATES = (23, 8, 5, 0, VAT_EXEMPT)
BASE_CURRENCY = "PLN"

_CENT = Decimal("0.01")
_HUNDRED = Decimal("100")
_ZERO = Decimal("0")


@dataclass(frozen=True)
class LineItem:
    quantity: Decimal
    unit_price_net: Decimal
    vat_rate: int
    description: str = ""
    unit: str = "szt."


@dataclass(frozen=True)
class ExchangeRate:
    """NBP mid rate: PLN per one unit of ``currency``."""

    currency: str
    rate: Decimal
    effective_date: Optional[date] = None
    table: Optional[str] = None
    warning: Optional[str] = None


class LineTotals(NamedTuple):
    net_amount: Decimal
    vat_amount: Decimal
    gross_amount: Decimal


class InvoiceTotals(NamedTuple):
    total_net: Decimal
    total_vat: Decimal
    total_gross: Decimal


def to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Decimal | float | int) -> Decimal:
    return to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


def is_exempt(vat_rate: int) -> bool:
    return int(vat_rate) == VAT_EXEMPT


def compute_line_totals(item) -> LineTotals:
    net_amount = to_decimal(item.quantity) * to_decimal(item.unit_price_net)
    vat_rate = int(item.vat_rate)
    if vat_rate >= 0:
        vat_amount = net_amount * Decimal(vat_rate) / _HUNDRED
    else:
        vat_amount = _ZERO
    return LineTotals(net_amount, vat_amount, net_amount + vat_amount)


def compute_invoice_totals(items: Iterable) -> InvoiceTotals:
    total_net = _ZERO
    total_vat = _ZERO
    total_gross = _ZERO
    for item in items:
        line = compute_line_totals(item)
        total_net += line.net_amount
        total_vat += line.vat_amount
        total_gross += line.gross_amount
    return InvoiceTotals(total_net, total_vat, total_gross)


def to_pln(total_gross_native: Decimal, exchange_rate: ExchangeRate) -> Decimal:
    return to_decimal(total_gross_native) * to_decimal(exchange_rate.rate)


def to_native(pln_amount: Decimal, exchange_rate: ExchangeRate) -> Decimal:
    return to_decimal(pln_amount) / to_decimal(exchange_rate.rate)


def rescale_to_target_pln(
    items: Sequence[LineItem], target_pln_amount: Decimal, exchange_rate: ExchangeRate
) -> List[LineItem]:
    """Scale every unit price so the invoice gross lands on ``target_pln_amount``.

    Each new price is rounded on its own, so the recomputed total may drift
    from the target by a few cents on multi-line invoices. When the current
    gross total is zero or the rate is not positive no ratio exists and the
    items come back unchanged.
    """
    rate = to_decimal(exchange_rate.rate)
    current_total = compute_invoice_totals(items).total_gross
    if rate <= 0 or current_total == 0:
        logger.debug("Skipping rescale: rate=%s current_total=%s", rate, current_total)
        return list(items)

    ratio = to_native(target_pln_amount, exchange_rate) / current_total
    return [replace(item, unit_price_net=round_money(to_decimal(item.unit_price_net) * ratio)) for item in items]
