"""Recurring order template: a schedule plus the order payload it materializes."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from backend.fleetdesk.db.base_class import Base
from backend.fleetdesk.models.order_payload import OrderPayloadMixin


class RecurringOrder(OrderPayloadMixin, Base):
    __tablename__ = "recurring_orders"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)

    frequency = Column(String(20), nullable=False)
    # 0 = Sunday ... 6 = Saturday
    day_of_week = Column(Integer, nullable=True)
    day_of_month = Column(Integer, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    next_generation_date = Column(Date, nullable=True, index=True)
    last_generated_at = Column(DateTime(timezone=True), nullable=True)
    # latest loading date materialized, which can run ahead of last_generated_at
    last_occurrence_date = Column(Date, nullable=True)
    generated_count = Column(Integer, nullable=False, default=0)

    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    contractor = relationship("Contractor")
    orders = relationship("Order", back_populates="recurring_order")
