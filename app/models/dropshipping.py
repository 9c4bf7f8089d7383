"""Dropshipping models — supplier configuration and the append-only sync log."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, Index, Integer, String, Text

from ..database import UTCDateTime
from ..utils.encrypted_type import EncryptedText
from .base import Base


class DropshippingSupplier(Base):
    """One configured external catalog source, keyed by its stable code."""

    __tablename__ = "dropshipping_suppliers"
    id = Column(Integer, primary_key=True)
    code = Column(String(50), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=False)
    base_url = Column(String(500))
    api_key = Column(EncryptedText)
    api_email = Column(String(255))
    active = Column(Boolean, nullable=False, default=False)
    sync_status = Column(String(20), nullable=False, default="idle")  # idle | syncing | error
    last_sync_at = Column(UTCDateTime)
    error_message = Column(String(1000))
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )


class ProductSyncLog(Base):
    """Immutable record of one search/import/update/scheduled_sync attempt."""

    __tablename__ = "product_sync_logs"
    id = Column(Integer, primary_key=True)
    # Supplier row id as a string, or "scheduled" for batch entries
    supplier_id = Column(String(50), nullable=False)
    action = Column(String(20), nullable=False)  # sync | import | update | scheduled_sync
    product_id = Column(Integer)
    external_id = Column(String(255))
    status = Column(String(20), nullable=False)  # success | failed
    items_processed = Column(Integer, nullable=False, default=0)
    items_failed = Column(Integer, nullable=False, default=0)
    error_message = Column(Text)
    created_at = Column(UTCDateTime, default=lambda: datetime.now(timezone.utc))

    __table_args__ = (
        Index("ix_sync_log_supplier_time", "supplier_id", "created_at"),
    )
