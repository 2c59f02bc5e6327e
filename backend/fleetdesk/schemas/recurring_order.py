"""Recurring order template schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backend.fleetdesk.schemas.order import OrderRead, OrderPayload, OrderType

Frequency = Literal["DAILY", "WEEKLY", "BIWEEKLY", "MONTHLY"]


def schedule_configuration_error(
    frequency: str,
    day_of_week: Optional[int],
    day_of_month: Optional[int],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> Optional[str]:
    """Describe what is wrong with a frequency/anchor combination, or return None when valid."""
    if frequency in ("WEEKLY", "BIWEEKLY") and day_of_week is None:
        return "day_of_week is required for WEEKLY/BIWEEKLY frequency"
    if frequency == "MONTHLY" and day_of_month is None:
        return "day_of_month is required for MONTHLY frequency"
    if start_date is not None and end_date is not None and end_date < start_date:
        return "end_date must not be before start_date"
    return None


class RecurringOrderBase(OrderPayload):
    name: str = Field(min_length=1, max_length=255)
    frequency: Frequency
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=28)
    start_date: date
    end_date: Optional[date] = None
    is_active: bool = True


class RecurringOrderCreate(RecurringOrderBase):
    @model_validator(mode="after")
    def check_schedule(self):
        error = schedule_configuration_error(
            self.frequency, self.day_of_week, self.day_of_month, self.start_date, self.end_date
        )
        if error:
            raise ValueError(error)
        return self


class RecurringOrderUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    frequency: Optional[Frequency] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    day_of_month: Optional[int] = Field(default=None, ge=1, le=28)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None

    type: Optional[OrderType] = None
    contractor_id: Optional[int] = None
    origin: Optional[str] = Field(default=None, min_length=1)
    origin_city: Optional[str] = None
    origin_postal_code: Optional[str] = None
    origin_country: Optional[str] = None
    destination: Optional[str] = Field(default=None, min_length=1)
    destination_city: Optional[str] = None
    destination_postal_code: Optional[str] = None
    destination_country: Optional[str] = None
    distance_km: Optional[Decimal] = None
    loading_time_from: Optional[str] = None
    loading_time_to: Optional[str] = None
    unloading_time_from: Optional[str] = None
    unloading_time_to: Optional[str] = None
    cargo_description: Optional[str] = None
    cargo_weight: Optional[Decimal] = None
    cargo_volume: Optional[Decimal] = None
    cargo_pallets: Optional[int] = None
    requires_adr: Optional[bool] = None
    price_net: Optional[Decimal] = None
    currency: Optional[str] = None
    notes: Optional[str] = None
    internal_notes: Optional[str] = None


class RecurringOrderRead(RecurringOrderBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: int
    next_generation_date: Optional[date] = None
    last_generated_at: Optional[datetime] = None
    last_occurrence_date: Optional[date] = None
    generated_count: int
    created_by_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime


class GenerateOrderRequest(BaseModel):
    loading_date: Optional[date] = None
    unloading_date: Optional[date] = None


class GeneratedTemplateState(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    generated_count: int
    last_generated_at: Optional[datetime] = None
    last_occurrence_date: Optional[date] = None
    next_generation_date: Optional[date] = None


class GenerateOrderResponse(BaseModel):
    order: OrderRead
    template: GeneratedTemplateState
    message: str


class GenerateDueResponse(BaseModel):
    reference_date: date
    generated: list[OrderRead]
