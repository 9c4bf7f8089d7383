"""
routers/dropshipping.py — Supplier admin, catalog search/import, stock sync

Thin mapping from HTTP to DropshippingService. Typed errors raised by the
service are turned into structured JSON by the handler in main.py.

Business Rules:
- Supplier search and import are rate limited per client IP
- Updating a supplier rebuilds the live client registry before returning
- sync-all returns the aggregate {synced, failed}; per-product failures
  are in the sync log, not in the response status

Called by: main.py (router mount)
Depends on: services/dropshipping_service.py, services/sync_log_service.py, schemas/dropshipping.py
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..dependencies import get_dropshipping_service, get_scheduler
from ..rate_limit import IMPORT_LIMIT, SEARCH_LIMIT, limiter
from ..scheduler import DropshippingScheduler
from ..schemas.dropshipping import (
    BulkSyncResult,
    ImportRequest,
    ProductOut,
    SchedulerStatus,
    SupplierOut,
    SupplierUpdate,
    SyncLogOut,
)
from ..services.dropshipping_service import DropshippingService

router = APIRouter(prefix="/api/dropshipping", tags=["dropshipping"])


# ── Suppliers ─────────────────────────────────────────────────────────


@router.get("/suppliers", response_model=list[SupplierOut])
async def list_suppliers(
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    return service.list_suppliers(db)


@router.post("/suppliers/init", response_model=list[SupplierOut])
async def init_suppliers(
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    return service.init_suppliers(db)


@router.patch("/suppliers/{supplier_id}", response_model=SupplierOut)
async def update_supplier(
    supplier_id: int,
    body: SupplierUpdate,
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    return service.update_supplier(
        db, supplier_id, api_key=body.api_key, api_email=body.api_email, active=body.active
    )


# ── Catalog ───────────────────────────────────────────────────────────


@router.get("/search")
@limiter.limit(SEARCH_LIMIT)
async def search_products(
    request: Request,
    source: str,
    keyword: str | None = None,
    category: str | None = None,
    page_num: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    return await service.search(
        db, source, keyword=keyword, category=category, page_num=page_num, page_size=page_size
    )


@router.get("/categories")
async def list_categories(
    source: str,
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    return await service.get_categories(db, source)


@router.post("/import", response_model=ProductOut)
@limiter.limit(IMPORT_LIMIT)
async def import_product(
    request: Request,
    body: ImportRequest,
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    return await service.import_product(db, body.source, body.external_id)


# ── Sync ──────────────────────────────────────────────────────────────


@router.post("/products/{product_id}/sync", response_model=ProductOut)
async def sync_product(
    product_id: int,
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    return await service.sync_product_stock(db, product_id)


@router.post("/sync-all", response_model=BulkSyncResult)
async def sync_all(
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    return await service.bulk_sync_all(db)


@router.get("/logs", response_model=list[SyncLogOut])
async def list_logs(
    limit: int = Query(50, ge=1, le=500),
    supplier_id: str | None = None,
    db: Session = Depends(get_db),
    service: DropshippingService = Depends(get_dropshipping_service),
):
    if supplier_id:
        return service.sync_logs.by_supplier(db, supplier_id, limit=limit)
    return service.sync_logs.recent(db, limit=limit)


@router.get("/scheduler", response_model=SchedulerStatus)
async def scheduler_status(scheduler: DropshippingScheduler = Depends(get_scheduler)):
    return SchedulerStatus(
        state=scheduler.state,
        interval_hours=scheduler.interval.total_seconds() / 3600,
    )
