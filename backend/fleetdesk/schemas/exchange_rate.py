"""Exchange rate schemas."""

import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class ExchangeRateIn(BaseModel):
    rate: Decimal = Field(gt=0)
    date: Optional[datetime.date] = None
    table: Optional[str] = None


class ExchangeRateRead(BaseModel):
    currency: str
    rate: Decimal
    date: datetime.date
    table: str
    warning: Optional[str] = None
