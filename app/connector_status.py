"""Supplier startup visibility — log which suppliers are usable."""

from loguru import logger
from sqlalchemy.orm import Session

from .models import DropshippingSupplier
from .services.supplier_registry import SupplierRegistry


def log_supplier_status(db: Session, registry: SupplierRegistry) -> dict[str, bool]:
    """Log enabled/disabled status for every provisioned supplier.

    Returns dict mapping supplier code to enabled (True/False).
    """
    live = set(registry.codes())
    status = {s.code: s.code in live for s in db.query(DropshippingSupplier).all()}

    enabled = {k for k, v in status.items() if v}
    disabled = {k for k, v in status.items() if not v}

    if enabled:
        logger.info("Suppliers enabled: {}", ", ".join(sorted(enabled)))
    if disabled:
        logger.warning("Suppliers disabled (inactive or missing credentials): {}", ", ".join(sorted(disabled)))

    return status
