"""Invoice schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backend.fleetdesk.schemas.exchange_rate import ExchangeRateIn
from backend.fleetdesk.schemas.invoice_item import InvoiceItemCalculated, InvoiceItemCreate, InvoiceItemRead

InvoiceType = Literal["SINGLE", "COLLECTIVE", "PROFORMA", "CORRECTION"]
InvoiceStatus = Literal["DRAFT", "ISSUED", "SENT", "PAID", "OVERDUE", "CANCELLED"]
PaymentMethod = Literal["TRANSFER", "CASH", "CARD"]


class InvoiceAmountsIn(BaseModel):
    currency: str = Field(default="PLN", min_length=3, max_length=3)
    exchange_rate: Optional[ExchangeRateIn] = None
    target_amount_in_pln: Optional[Decimal] = Field(default=None, gt=0)
    items: List[InvoiceItemCreate] = Field(min_length=1)

    @model_validator(mode="after")
    def check_currency(self):
        self.currency = self.currency.upper()
        if self.target_amount_in_pln is not None and self.exchange_rate is None:
            raise ValueError("exchange_rate is required when target_amount_in_pln is given")
        if self.exchange_rate is not None and self.currency == "PLN":
            raise ValueError("exchange_rate applies only to foreign-currency invoices")
        return self


class InvoiceCreate(InvoiceAmountsIn):
    type: InvoiceType = "SINGLE"
    contractor_id: int
    issue_date: date
    sale_date: Optional[date] = None
    due_date: date
    payment_method: PaymentMethod = "TRANSFER"
    bank_account: Optional[str] = None
    notes: Optional[str] = None
    order_ids: List[int] = Field(default_factory=list)


class InvoiceUpdate(BaseModel):
    status: Optional[InvoiceStatus] = None
    due_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    bank_account: Optional[str] = None
    notes: Optional[str] = None
    items: Optional[List[InvoiceItemCreate]] = Field(default=None, min_length=1)


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    contractor_id: int
    invoice_number: str
    type: str
    status: str
    issue_date: date
    sale_date: Optional[date] = None
    due_date: date
    payment_method: str
    bank_account: Optional[str] = None
    currency: str
    net_amount: Decimal
    vat_amount: Decimal
    gross_amount: Decimal
    exchange_rate: Optional[Decimal] = None
    exchange_rate_date: Optional[date] = None
    exchange_rate_table: Optional[str] = None
    amount_in_pln: Optional[Decimal] = None
    notes: Optional[str] = None
    items: List[InvoiceItemRead] = []
    order_ids: List[int] = []
    created_at: datetime
    updated_at: datetime


class InvoiceCalculation(BaseModel):
    currency: str
    items: List[InvoiceItemCalculated]
    net_amount: Decimal
    vat_amount: Decimal
    gross_amount: Decimal
    amount_in_pln: Optional[Decimal] = None
