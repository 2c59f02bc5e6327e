"""Contractor model: clients and carriers referenced by orders and invoices."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, func

from backend.fleetdesk.db.base_class import Base


class Contractor(Base):
    __tablename__ = "contractors"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    short_name = Column(String(100), nullable=True)
    nip = Column(String(20), nullable=True)
    payment_days = Column(Integer, nullable=False, default=14)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
