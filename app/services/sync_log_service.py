"""
sync_log_service.py — Append-only audit trail for dropshipping operations

Every search, import, stock update and scheduled batch writes exactly one
ProductSyncLog row. Rows are inserted in their own commit and never updated
or deleted, so concurrent writers (admin requests and the scheduler) cannot
overwrite each other.

Business Rules:
- A failed log write is a secondary error: logged, never raised, so it can
  not mask the outcome of the operation being audited
- Reads are newest-first

Called by: services/dropshipping_service.py, scheduler.py, routers/dropshipping.py
Depends on: models (ProductSyncLog)
"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models import ProductSyncLog

log = logging.getLogger(__name__)

ACTIONS = ("sync", "import", "update", "scheduled_sync")
STATUSES = ("success", "failed")


class SyncLogStore:
    def record(
        self,
        db: Session,
        *,
        supplier_id,
        action: str,
        status: str,
        items_processed: int = 0,
        items_failed: int = 0,
        product_id: int | None = None,
        external_id: str | None = None,
        error_message: str | None = None,
    ) -> ProductSyncLog | None:
        if action not in ACTIONS:
            raise ValueError(f"Unknown sync log action: {action}")
        if status not in STATUSES:
            raise ValueError(f"Unknown sync log status: {status}")

        entry = ProductSyncLog(
            supplier_id=str(supplier_id),
            action=action,
            status=status,
            items_processed=items_processed,
            items_failed=items_failed,
            product_id=product_id,
            external_id=external_id,
            error_message=error_message[:1000] if error_message else None,
        )
        try:
            db.add(entry)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            log.error(f"Sync log write failed ({action}/{status} for supplier {supplier_id}): {e}")
            return None
        return entry

    def recent(self, db: Session, limit: int = 50) -> list[ProductSyncLog]:
        return (
            db.query(ProductSyncLog)
            .order_by(ProductSyncLog.created_at.desc(), ProductSyncLog.id.desc())
            .limit(limit)
            .all()
        )

    def by_supplier(self, db: Session, supplier_id, limit: int | None = None) -> list[ProductSyncLog]:
        q = (
            db.query(ProductSyncLog)
            .filter(ProductSyncLog.supplier_id == str(supplier_id))
            .order_by(ProductSyncLog.created_at.desc(), ProductSyncLog.id.desc())
        )
        if limit:
            q = q.limit(limit)
        return q.all()
