"""
supplier_registry.py — Live supplier clients, one per active supplier code

Built from the dropshipping_suppliers table on startup, after every
credential/active change, and lazily the first time an operation asks for a
supplier that has no client yet (process restart recovery).

Business Rules:
- Only active suppliers with every required credential get a client;
  the rest are skipped with a warning
- A rebuild swaps the whole map at once, so readers never see a half-built
  registry and the last rebuild wins
- Concurrent first-use calls share a single rebuild

Called by: services/dropshipping_service.py, main.py (lifespan)
Depends on: connectors/, models (DropshippingSupplier)
"""

import logging
import threading

from sqlalchemy.orm import Session

from ..connectors import AutoDSClient, CJDropshippingClient, SupplierClient, ZendropClient
from ..models import DropshippingSupplier

log = logging.getLogger(__name__)


def _build_cj(supplier: DropshippingSupplier) -> SupplierClient:
    return CJDropshippingClient(supplier.api_key, supplier.api_email, base_url=supplier.base_url)


def _build_autods(supplier: DropshippingSupplier) -> SupplierClient:
    return AutoDSClient(supplier.api_key)


def _build_zendrop(supplier: DropshippingSupplier) -> SupplierClient:
    return ZendropClient(supplier.api_key)


# code -> (factory, required credential attributes)
CLIENT_VARIANTS = {
    "cj": (_build_cj, ("api_key", "api_email")),
    # Stubs never reach a real API, so they need no credentials
    "autods": (_build_autods, ()),
    "zendrop": (_build_zendrop, ()),
}

SUPPORTED_CODES = tuple(CLIENT_VARIANTS)


class SupplierRegistry:
    def __init__(self, variants: dict | None = None):
        self._variants = variants if variants is not None else CLIENT_VARIANTS
        self._clients: dict[str, SupplierClient] = {}
        self._lock = threading.Lock()

    def initialize(self, db: Session) -> dict[str, SupplierClient]:
        """Rebuild clients for every active, fully-credentialed supplier."""
        with self._lock:
            return self._build(db)

    def _build(self, db: Session) -> dict[str, SupplierClient]:
        suppliers = db.query(DropshippingSupplier).filter(DropshippingSupplier.active.is_(True)).all()

        clients: dict[str, SupplierClient] = {}
        for supplier in suppliers:
            variant = self._variants.get(supplier.code)
            if not variant:
                log.warning(f"Supplier '{supplier.code}' has no client implementation — skipped")
                continue
            factory, required = variant
            missing = [attr for attr in required if not getattr(supplier, attr)]
            if missing:
                log.warning(f"Supplier '{supplier.code}' missing {', '.join(missing)} — skipped")
                continue
            clients[supplier.code] = factory(supplier)
            log.info(f"Supplier client ready: {supplier.code} ({type(clients[supplier.code]).__name__})")

        self._clients = clients
        return clients

    def get(self, code: str) -> SupplierClient | None:
        return self._clients.get(code)

    def ensure(self, db: Session, code: str) -> SupplierClient | None:
        """Return the client for code, rebuilding the registry if it is missing."""
        client = self._clients.get(code)
        if client is not None:
            return client
        with self._lock:
            # Another caller may have rebuilt while we waited
            if code not in self._clients:
                self._build(db)
            return self._clients.get(code)

    def codes(self) -> list[str]:
        return sorted(self._clients)

    def supported_codes(self) -> tuple[str, ...]:
        return tuple(self._variants)
