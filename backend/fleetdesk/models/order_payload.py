"""Route, cargo and price columns shared by orders and recurring order templates."""

from sqlalchemy import Boolean, Column, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import declared_attr

# Columns copied verbatim from a recurring template into each generated order.
ORDER_PAYLOAD_FIELDS = (
    "type",
    "contractor_id",
    "origin",
    "origin_city",
    "origin_postal_code",
    "origin_country",
    "destination",
    "destination_city",
    "destination_postal_code",
    "destination_country",
    "distance_km",
    "loading_time_from",
    "loading_time_to",
    "unloading_time_from",
    "unloading_time_to",
    "cargo_description",
    "cargo_weight",
    "cargo_volume",
    "cargo_pallets",
    "requires_adr",
    "price_net",
    "currency",
    "notes",
    "internal_notes",
)


class OrderPayloadMixin:
    type = Column(String(20), nullable=False, default="OWN")

    @declared_attr
    def contractor_id(cls):
        return Column(Integer, ForeignKey("contractors.id"), nullable=True, index=True)

    origin = Column(String(500), nullable=False)
    origin_city = Column(String(100), nullable=True)
    origin_postal_code = Column(String(20), nullable=True)
    origin_country = Column(String(2), nullable=False, default="PL")
    destination = Column(String(500), nullable=False)
    destination_city = Column(String(100), nullable=True)
    destination_postal_code = Column(String(20), nullable=True)
    destination_country = Column(String(2), nullable=False, default="PL")
    distance_km = Column(Numeric(10, 2), nullable=True)

    loading_time_from = Column(String(5), nullable=True)
    loading_time_to = Column(String(5), nullable=True)
    unloading_time_from = Column(String(5), nullable=True)
    unloading_time_to = Column(String(5), nullable=True)

    cargo_description = Column(Text, nullable=True)
    cargo_weight = Column(Numeric(10, 2), nullable=True)
    cargo_volume = Column(Numeric(10, 2), nullable=True)
    cargo_pallets = Column(Integer, nullable=True)
    requires_adr = Column(Boolean, nullable=False, default=False)

    price_net = Column(Numeric(12, 2), nullable=True)
    currency = Column(String(3), nullable=False, default="PLN")

    notes = Column(Text, nullable=True)
    internal_notes = Column(Text, nullable=True)


def copy_order_payload(source) -> dict:
    return {field: getattr(source, field) for field in ORDER_PAYLOAD_FIELDS}
