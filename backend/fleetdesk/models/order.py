"""Transport order model."""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.fleetdesk.db.base_class import Base
from backend.fleetdesk.models.order_payload import OrderPayloadMixin


class Order(OrderPayloadMixin, Base):
    __tablename__ = "orders"
    __table_args__ = (UniqueConstraint("tenant_id", "order_number", name="uq_orders_tenant_number"),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    order_number = Column(String(50), nullable=False)
    status = Column(String(20), nullable=False, default="PLANNED")

    loading_date = Column(Date, nullable=True)
    unloading_date = Column(Date, nullable=True)

    recurring_order_id = Column(Integer, ForeignKey("recurring_orders.id", ondelete="SET NULL"), nullable=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="SET NULL"), nullable=True, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    contractor = relationship("Contractor")
    recurring_order = relationship("RecurringOrder", back_populates="orders")
    invoice = relationship("Invoice", back_populates="orders")
