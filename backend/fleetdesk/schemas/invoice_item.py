"""Invoice item schemas."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# -1 is the "zw." (exempt) sentinel
VatRate = Literal[23, 8, 5, 0, -1]


class InvoiceItemBase(BaseModel):
    description: str = Field(min_length=1, max_length=500)
    quantity: Decimal = Field(default=Decimal("1"), gt=0, max_digits=12, decimal_places=3)
    unit: str = "szt."
    unit_price_net: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    vat_rate: VatRate = 23


class InvoiceItemCreate(InvoiceItemBase):
    pass


class InvoiceItemRead(InvoiceItemBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    position: int
    net_amount: Decimal
    vat_amount: Decimal
    gross_amount: Decimal


class InvoiceItemCalculated(InvoiceItemBase):
    net_amount: Decimal
    vat_amount: Decimal
    gross_amount: Decimal
