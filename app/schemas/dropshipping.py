"""
schemas/dropshipping.py — Pydantic models for dropshipping endpoints

Business Rules:
- Supplier credentials are write-only: responses carry masked values
- Search paging is bounded (page_size 1..100)
- Import needs a supported source code and a non-empty external id

Called by: routers/dropshipping.py
Depends on: pydantic, utils/encrypted_type.py (mask_value)
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..utils.encrypted_type import mask_value


class SupplierUpdate(BaseModel):
    api_key: str | None = None
    api_email: str | None = None
    active: bool | None = None


class SupplierOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    name: str
    base_url: str | None = None
    api_key: str = ""
    api_email: str | None = None
    active: bool
    sync_status: str
    last_sync_at: datetime | None = None
    error_message: str | None = None

    @field_validator("api_key", mode="before")
    @classmethod
    def _mask_key(cls, v):
        return mask_value(v)


class ImportRequest(BaseModel):
    source: str = Field(min_length=1, max_length=50)
    external_id: str = Field(min_length=1, max_length=255)

    @field_validator("source", "external_id")
    @classmethod
    def _strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v


class ProductOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None = None
    price: float
    image: str | None = None
    category: str | None = None
    in_stock: bool
    source: str
    external_id: str | None = None
    sku: str | None = None
    supplier_price: float | None = None
    shipping_cost: float | None = None
    processing_time: int | None = None
    stock_quantity: int | None = None
    last_synced_at: datetime | None = None


class SyncLogOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    supplier_id: str
    action: str
    product_id: int | None = None
    external_id: str | None = None
    status: str
    items_processed: int
    items_failed: int
    error_message: str | None = None
    created_at: datetime | None = None


class BulkSyncResult(BaseModel):
    synced: int
    failed: int


class SchedulerStatus(BaseModel):
    state: str
    interval_hours: float
