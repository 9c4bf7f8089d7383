"""
dropshipping_service.py — Search, import and stock sync against external suppliers

The orchestrator behind every dropshipping entry point (admin routes, the
manual "sync all" button, the 12-hour scheduler). Owns supplier status
transitions and writes the audit trail through SyncLogStore.

Business Rules:
- Only active suppliers can be used; anything else is SupplierNotConfigured
- search flips the supplier to "syncing" and always resolves it to "idle"
  or "error" before returning, including when the call is cancelled
- (source, external_id) identifies an imported product: importing it again
  returns the existing row without claiming or creating anything
- The product row is created last, so a failed import leaves nothing behind
- One sync-log row per attempt; errors are logged then re-raised
- bulk_sync_all runs products one at a time and counts failures instead of
  raising; the caller logs the batch outcome

Called by: routers/dropshipping.py, scheduler.py, main.py
Depends on: services/supplier_registry.py, services/sync_log_service.py, models
"""

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import (
    DropshippingError,
    NotDropshippingProduct,
    SupplierNotConfigured,
    UpstreamRequestFailed,
)
from ..models import DropshippingSupplier, Product
from ..utils import utcnow
from .supplier_registry import SupplierRegistry
from .sync_log_service import SyncLogStore

log = logging.getLogger(__name__)

KNOWN_SUPPLIERS = (
    {"code": "cj", "name": "CJ Dropshipping", "base_url": settings.cj_base_url},
    {"code": "autods", "name": "AutoDS", "base_url": "https://api.autods.com"},
    {"code": "zendrop", "name": "Zendrop", "base_url": "https://app.zendrop.com"},
)


def _error_message(e: BaseException) -> str:
    if isinstance(e, DropshippingError):
        return e.message
    return str(e) or type(e).__name__


def result_count(results) -> int:
    """Number of products in a raw search result (paged dict or plain list)."""
    if isinstance(results, dict):
        return len(results.get("list") or [])
    if isinstance(results, list):
        return len(results)
    return 0


class DropshippingService:
    def __init__(self, registry: SupplierRegistry, sync_logs: SyncLogStore | None = None):
        self.registry = registry
        self.sync_logs = sync_logs or SyncLogStore()

    # ── Helpers ─────────────────────────────────────────────────────

    def _get_supplier(self, db: Session, code: str) -> DropshippingSupplier:
        supplier = db.query(DropshippingSupplier).filter_by(code=code).first()
        if not supplier or not supplier.active:
            raise SupplierNotConfigured(f"Supplier {code} not configured or inactive")
        return supplier

    def _client(self, db: Session, supplier: DropshippingSupplier):
        client = self.registry.ensure(db, supplier.code)
        if client is None:
            raise SupplierNotConfigured(f"Supplier {supplier.code} is missing API credentials")
        return client

    def _set_status(self, db: Session, supplier: DropshippingSupplier, **fields) -> None:
        for key, value in fields.items():
            setattr(supplier, key, value)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            log.error(f"Could not update status of supplier {supplier.code}: {e}")

    @staticmethod
    def _find_imported(db: Session, source: str, external_id: str) -> Product | None:
        return db.query(Product).filter_by(source=source, external_id=external_id).first()

    # ── Supplier administration ─────────────────────────────────────

    def init_suppliers(self, db: Session) -> list[DropshippingSupplier]:
        """Create the row for every known supplier code that does not exist yet."""
        existing = {s.code for s in db.query(DropshippingSupplier).all()}
        created = 0
        for spec in KNOWN_SUPPLIERS:
            if spec["code"] in existing:
                continue
            db.add(DropshippingSupplier(active=False, sync_status="idle", **spec))
            created += 1
        if created:
            db.commit()
            log.info(f"Provisioned {created} dropshipping supplier(s)")
        return self.list_suppliers(db)

    def list_suppliers(self, db: Session) -> list[DropshippingSupplier]:
        return db.query(DropshippingSupplier).order_by(DropshippingSupplier.id).all()

    def update_supplier(
        self,
        db: Session,
        supplier_id: int,
        api_key: str | None = None,
        api_email: str | None = None,
        active: bool | None = None,
    ) -> DropshippingSupplier:
        supplier = db.get(DropshippingSupplier, supplier_id)
        if not supplier:
            raise SupplierNotConfigured(f"Supplier {supplier_id} not found")
        if api_key is not None:
            supplier.api_key = api_key or None
        if api_email is not None:
            supplier.api_email = api_email or None
        if active is not None:
            supplier.active = active
        db.commit()
        log.info(f"Supplier {supplier.code} updated (active={supplier.active})")

        # New credentials must be live before the next operation
        self.registry.initialize(db)
        return supplier

    # ── Catalog browsing ────────────────────────────────────────────

    async def search(
        self,
        db: Session,
        source: str,
        keyword: str | None = None,
        category: str | None = None,
        page_num: int = 1,
        page_size: int = 20,
    ):
        supplier = self._get_supplier(db, source)
        self._set_status(db, supplier, sync_status="syncing")

        try:
            client = self._client(db, supplier)
            results = await client.search_products(
                keyword=keyword, category_id=category, page_num=page_num, page_size=page_size
            )
            self._set_status(
                db, supplier, sync_status="idle", last_sync_at=utcnow(), error_message=None
            )
        except Exception as e:
            msg = _error_message(e)
            log.warning(f"Search on {source} failed: {msg}")
            self._set_status(db, supplier, sync_status="error", error_message=msg)
            self.sync_logs.record(
                db, supplier_id=supplier.id, action="sync", status="failed", error_message=msg
            )
            raise
        finally:
            if supplier.sync_status == "syncing":
                # Cancelled mid-flight
                log.warning(f"Search on {source} cancelled")
                self._set_status(db, supplier, sync_status="error", error_message="Search cancelled")
                self.sync_logs.record(
                    db,
                    supplier_id=supplier.id,
                    action="sync",
                    status="failed",
                    error_message="Search cancelled",
                )

        self.sync_logs.record(
            db,
            supplier_id=supplier.id,
            action="sync",
            status="success",
            items_processed=result_count(results),
        )
        return results

    async def get_categories(self, db: Session, source: str) -> list:
        supplier = self._get_supplier(db, source)
        return await self._client(db, supplier).get_categories()

    # ── Import ──────────────────────────────────────────────────────

    async def import_product(self, db: Session, source: str, external_id: str) -> Product:
        supplier = self._get_supplier(db, source)

        existing = self._find_imported(db, source, external_id)
        if existing:
            log.info(f"{source}:{external_id} already imported as product {existing.id}")
            return existing

        try:
            client = self._client(db, supplier)
            details = await client.get_product_details(external_id)
            await client.add_to_supplier_account(external_id)
            try:
                draft = client.import_transform(details)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise UpstreamRequestFailed(
                    f"{source} product {external_id} has an unreadable payload: {e}"
                ) from e
            draft["source"] = supplier.code
            draft["external_id"] = external_id
            draft["in_stock"] = bool(draft.get("in_stock")) and (draft.get("stock_quantity") or 0) > 0

            product = Product(**draft)
            db.add(product)
            try:
                db.commit()
            except IntegrityError:
                # Imported concurrently; the first row wins
                db.rollback()
                existing = self._find_imported(db, source, external_id)
                if existing:
                    return existing
                raise
            db.refresh(product)
        except Exception as e:
            db.rollback()
            msg = _error_message(e)
            log.warning(f"Import of {source}:{external_id} failed: {msg}")
            self.sync_logs.record(
                db,
                supplier_id=supplier.id,
                action="import",
                external_id=external_id,
                status="failed",
                items_failed=1,
                error_message=msg,
            )
            raise

        self.sync_logs.record(
            db,
            supplier_id=supplier.id,
            action="import",
            product_id=product.id,
            external_id=external_id,
            status="success",
            items_processed=1,
        )
        log.info(f"Imported {source}:{external_id} as product {product.id}")
        return product

    # ── Stock & price sync ──────────────────────────────────────────

    async def sync_product_stock(self, db: Session, product_id: int) -> Product:
        product = db.get(Product, product_id)
        if product is None or not product.is_dropshipped:
            raise NotDropshippingProduct(
                f"Product {product_id} not found or not a dropshipping product"
            )
        supplier = self._get_supplier(db, product.source)
        external_id = product.external_id

        try:
            client = self._client(db, supplier)
            details = await client.get_product_details(external_id)
            fields = client.stock_fields(details)

            if fields["stock_quantity"] is not None:
                product.stock_quantity = fields["stock_quantity"]
            price = fields["supplier_price"] or 0
            if price > 0:
                product.supplier_price = price
            product.in_stock = price > 0 and (product.stock_quantity or 0) > 0
            product.last_synced_at = utcnow()
            db.commit()
        except Exception as e:
            db.rollback()
            msg = _error_message(e)
            self.sync_logs.record(
                db,
                supplier_id=supplier.id,
                action="update",
                product_id=product_id,
                external_id=external_id,
                status="failed",
                items_failed=1,
                error_message=msg,
            )
            raise

        self.sync_logs.record(
            db,
            supplier_id=supplier.id,
            action="update",
            product_id=product_id,
            external_id=external_id,
            status="success",
            items_processed=1,
        )
        return product

    async def bulk_sync_all(self, db: Session) -> dict:
        """Refresh every imported product. One failure never stops the batch."""
        product_ids = [
            pid
            for (pid,) in db.query(Product.id)
            .filter(
                Product.source.in_(self.registry.supported_codes()),
                Product.external_id.isnot(None),
            )
            .order_by(Product.id)
            .all()
        ]

        synced = failed = 0
        for product_id in product_ids:
            try:
                await self.sync_product_stock(db, product_id)
                synced += 1
            except Exception as e:
                failed += 1
                log.warning(f"Failed to sync product {product_id}: {_error_message(e)}")

        log.info(f"Bulk sync: {synced} synced, {failed} failed")
        return {"synced": synced, "failed": failed}
