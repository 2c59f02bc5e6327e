"""Order schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

OrderType = Literal["OWN", "FORWARDING"]
OrderStatus = Literal["PLANNED", "IN_PROGRESS", "COMPLETED", "CANCELLED"]


class OrderPayload(BaseModel):
    """Route, cargo and price fields shared by orders and recurring templates."""

    type: OrderType = "OWN"
    contractor_id: Optional[int] = None
    origin: str = Field(min_length=1)
    origin_city: Optional[str] = None
    origin_postal_code: Optional[str] = None
    origin_country: str = "PL"
    destination: str = Field(min_length=1)
    destination_city: Optional[str] = None
    destination_postal_code: Optional[str] = None
    destination_country: str = "PL"
    distance_km: Optional[Decimal] = None
    loading_time_from: Optional[str] = None
    loading_time_to: Optional[str] = None
    unloading_time_from: Optional[str] = None
    unloading_time_to: Optional[str] = None
    cargo_description: Optional[str] = None
    cargo_weight: Optional[Decimal] = None
    cargo_volume: Optional[Decimal] = None
    cargo_pallets: Optional[int] = None
    requires_adr: bool = False
    price_net: Optional[Decimal] = None
    currency: str = "PLN"
    notes: Optional[str] = None
    internal_notes: Optional[str] = None


class OrderRead(OrderPayload):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    order_number: str
    status: str
    loading_date: Optional[date] = None
    unloading_date: Optional[date] = None
    recurring_order_id: Optional[int] = None
    invoice_id: Optional[int] = None
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
