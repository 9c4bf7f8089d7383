"""Local catalog product — the record the storefront sells."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Float, Integer, String, Text, UniqueConstraint

from ..database import UTCDateTime
from .base import Base


class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True)
    name = Column(String(500), nullable=False)
    description = Column(Text, default="")
    price = Column(Float, nullable=False, default=0)
    image = Column(String(1000), default="")
    category = Column(String(255), default="General")
    in_stock = Column(Boolean, nullable=False, default=True)

    # "local" or the code of the supplier it was imported from
    source = Column(String(50), nullable=False, default="local", index=True)
    external_id = Column(String(255))
    sku = Column(String(255))
    supplier_price = Column(Float)
    shipping_cost = Column(Float)
    processing_time = Column(Integer)
    stock_quantity = Column(Integer, default=0)
    last_synced_at = Column(UTCDateTime)
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        UniqueConstraint("source", "external_id", name="uq_product_source_external"),
    )

    @property
    def is_dropshipped(self) -> bool:
        return self.source != "local" and bool(self.external_id)
