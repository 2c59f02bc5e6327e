"""Invoice-related service helpers."""

from datetime import date
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from backend.fleetdesk.models.invoice import Invoice
from backend.fleetdesk.models.invoice_item import InvoiceItem
from backend.fleetdesk.models.order import Order
from backend.fleetdesk.schemas.exchange_rate import ExchangeRateIn
from backend.fleetdesk.schemas.invoice import InvoiceAmountsIn, InvoiceCalculation, InvoiceCreate
from backend.fleetdesk.schemas.invoice_item import InvoiceItemCalculated, InvoiceItemCreate
from backend.fleetdesk.services.invoice_math import (
    BASE_CURRENCY,
    ExchangeRate,
    LineItem,
    compute_invoice_totals,
    compute_line_totals,
    rescale_to_target_pln,
    round_money,
    to_pln,
)


class UnknownOrdersError(ValueError):
    pass


def generate_invoice_number(db: Session, tenant_id: int, issue_date: date) -> str:
    """Next FV/YYYY/MM/NNNN number in the tenant's sequence for the issue month."""
    prefix = f"FV/{issue_date.year}/{issue_date.month:02d}/"
    last_invoice = (
        db.query(Invoice)
        .filter(Invoice.tenant_id == tenant_id, Invoice.invoice_number.startswith(prefix))
        .order_by(Invoice.invoice_number.desc())
        .first()
    )
    sequence = 1
    if last_invoice:
        sequence = int(last_invoice.invoice_number.split("/")[3]) + 1
    return f"{prefix}{sequence:04d}"


def _line_items(items: Sequence[InvoiceItemCreate]) -> List[LineItem]:
    return [
        LineItem(
            quantity=item.quantity,
            unit_price_net=item.unit_price_net,
            vat_rate=item.vat_rate,
            description=item.description,
            unit=item.unit,
        )
        for item in items
    ]


def _exchange_rate(currency: str, rate_in) -> Optional[ExchangeRate]:
    if currency == BASE_CURRENCY or rate_in is None:
        return None
    return ExchangeRate(currency=currency, rate=rate_in.rate, effective_date=rate_in.date, table=rate_in.table)


def calculate_invoice(payload: InvoiceAmountsIn) -> InvoiceCalculation:
    """Line and invoice totals for a draft, rescaled to the PLN target when one is given."""
    exchange_rate = _exchange_rate(payload.currency, payload.exchange_rate)
    lines = _line_items(payload.items)
    if exchange_rate is not None and payload.target_amount_in_pln is not None:
        lines = rescale_to_target_pln(lines, payload.target_amount_in_pln, exchange_rate)

    calculated = []
    for line in lines:
        totals = compute_line_totals(line)
        calculated.append(
            InvoiceItemCalculated(
                description=line.description,
                quantity=line.quantity,
                unit=line.unit,
                unit_price_net=line.unit_price_net,
                vat_rate=line.vat_rate,
                net_amount=round_money(totals.net_amount),
                vat_amount=round_money(totals.vat_amount),
                gross_amount=round_money(totals.gross_amount),
            )
        )

    invoice_totals = compute_invoice_totals(lines)
    amount_in_pln = None
    if exchange_rate is not None:
        if payload.target_amount_in_pln is not None:
            amount_in_pln = round_money(payload.target_amount_in_pln)
        else:
            amount_in_pln = round_money(to_pln(invoice_totals.total_gross, exchange_rate))

    return InvoiceCalculation(
        currency=payload.currency,
        items=calculated,
        net_amount=round_money(invoice_totals.total_net),
        vat_amount=round_money(invoice_totals.total_vat),
        gross_amount=round_money(invoice_totals.total_gross),
        amount_in_pln=amount_in_pln,
    )


def _build_items(calculation: InvoiceCalculation) -> List[InvoiceItem]:
    return [
        InvoiceItem(
            position=index,
            description=item.description,
            quantity=item.quantity,
            unit=item.unit,
            unit_price_net=item.unit_price_net,
            vat_rate=item.vat_rate,
            net_amount=item.net_amount,
            vat_amount=item.vat_amount,
            gross_amount=item.gross_amount,
        )
        for index, item in enumerate(calculation.items)
    ]


def _apply_totals(invoice: Invoice, calculation: InvoiceCalculation) -> None:
    invoice.net_amount = calculation.net_amount
    invoice.vat_amount = calculation.vat_amount
    invoice.gross_amount = calculation.gross_amount
    invoice.amount_in_pln = calculation.amount_in_pln


def create_invoice(db: Session, *, tenant_id: int, user_id: Optional[int], payload: InvoiceCreate) -> Invoice:
    orders: List[Order] = []
    if payload.order_ids:
        orders = db.query(Order).filter(Order.tenant_id == tenant_id, Order.id.in_(payload.order_ids)).all()
        if len(orders) != len(set(payload.order_ids)):
            raise UnknownOrdersError("One or more orders were not found")

    calculation = calculate_invoice(payload)
    is_foreign = payload.currency != BASE_CURRENCY and payload.exchange_rate is not None

    invoice = Invoice(
        tenant_id=tenant_id,
        contractor_id=payload.contractor_id,
        invoice_number=generate_invoice_number(db, tenant_id, payload.issue_date),
        type=payload.type,
        status="DRAFT",
        issue_date=payload.issue_date,
        sale_date=payload.sale_date,
        due_date=payload.due_date,
        payment_method=payload.payment_method,
        bank_account=payload.bank_account,
        currency=payload.currency,
        exchange_rate=payload.exchange_rate.rate if is_foreign else None,
        exchange_rate_date=payload.exchange_rate.date if is_foreign else None,
        exchange_rate_table=payload.exchange_rate.table if is_foreign else None,
        notes=payload.notes,
        created_by_id=user_id,
    )
    _apply_totals(invoice, calculation)
    invoice.items = _build_items(calculation)
    invoice.orders = orders
    db.add(invoice)
    db.flush()
    return invoice


def replace_items(invoice: Invoice, items: Sequence[InvoiceItemCreate]) -> None:
    """Swap the line items of a draft and recompute its totals with the stored exchange rate."""
    exchange_rate = None
    if invoice.exchange_rate is not None:
        exchange_rate = ExchangeRateIn(
            rate=Decimal(str(invoice.exchange_rate)),
            date=invoice.exchange_rate_date,
            table=invoice.exchange_rate_table,
        )
    calculation = calculate_invoice(
        InvoiceAmountsIn(currency=invoice.currency, exchange_rate=exchange_rate, items=list(items))
    )
    invoice.items = _build_items(calculation)
    _apply_totals(invoice, calculation)
