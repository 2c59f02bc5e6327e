"""Invoice model for billing."""

from datetime import datetime, timezone

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.fleetdesk.db.base_class import Base


class Invoice(Base):
    __tablename__ = "invoices"
    __table_args__ = (UniqueConstraint("tenant_id", "invoice_number", name="uq_invoices_tenant_number"),)

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    invoice_number = Column(String(50), nullable=False)

    type = Column(String(20), default="SINGLE", nullable=False)
    status = Column(String(20), default="DRAFT", nullable=False)
    issue_date = Column(Date, nullable=False)
    sale_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=False)
    payment_method = Column(String(20), default="TRANSFER", nullable=False)
    bank_account = Column(String(64), nullable=True)

    currency = Column(String(3), default="PLN", nullable=False)
    net_amount = Column(Numeric(12, 2), default=0.00, nullable=False)
    vat_amount = Column(Numeric(12, 2), default=0.00, nullable=False)
    gross_amount = Column(Numeric(12, 2), default=0.00, nullable=False)

    # Set only for foreign-currency invoices
    exchange_rate = Column(Numeric(12, 6), nullable=True)
    exchange_rate_date = Column(Date, nullable=True)
    exchange_rate_table = Column(String(50), nullable=True)
    amount_in_pln = Column(Numeric(12, 2), nullable=True)

    notes = Column(Text, nullable=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc), nullable=False)

    contractor = relationship("Contractor")
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan", order_by="InvoiceItem.position")
    orders = relationship("Order", back_populates="invoice")

    @property
    def order_ids(self) -> list[int]:
        return [order.id for order in self.orders]
