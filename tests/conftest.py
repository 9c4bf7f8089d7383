"""
conftest.py — Shared Test Fixtures for DropSync

Provides an in-memory SQLite database, a FastAPI TestClient wired to the
test session, seeded supplier rows and a scriptable fake supplier client.

Business Rules:
- All tests run against an isolated in-memory DB (fresh schema per test)
- No test talks to a real supplier: app.http_client.http is patched
- Rate limiting is switched off for router tests

Called by: all test files via pytest autodiscovery
Depends on: app.models (Base), app.database (get_db), app.dependencies
"""

import os
os.environ["TESTING"] = "1"  # Must be set before importing app modules
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.connectors.base import SupplierClient
from app.exceptions import UpstreamRequestFailed
from app.models import Base, DropshippingSupplier, Product
from app.services.dropshipping_service import DropshippingService
from app.services.supplier_registry import CLIENT_VARIANTS, SupplierRegistry

# ── In-memory SQLite engine ──────────────────────────────────────────

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def session_factory():
    """Sessionmaker for code that opens its own sessions (the scheduler)."""
    return TestSessionLocal


@pytest.fixture(autouse=True)
def db_session():
    """Create all tables, yield a session, then tear down."""
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


# ── Fake supplier client ─────────────────────────────────────────────


class FakeSupplierClient(SupplierClient):
    """Scriptable supplier: products dict in, call counters out.

    failing_ids raise UpstreamRequestFailed from get_product_details.
    """

    code = "cj"
    display_name = "Fake CJ"

    def __init__(self, products: dict | None = None, failing_ids=(), search_result=None):
        super().__init__()
        self.products = products or {}
        self.failing_ids = set(failing_ids)
        self.search_result = search_result if search_result is not None else {"list": []}
        self.search_error: Exception | None = None
        self.detail_calls: list[str] = []
        self.claim_calls: list[str] = []
        self.on_details = None

    async def search_products(self, keyword=None, category_id=None, page_num=1, page_size=20):
        if self.search_error:
            raise self.search_error
        return self.search_result

    async def get_product_details(self, external_id):
        self.detail_calls.append(external_id)
        if self.on_details:
            self.on_details(external_id)
        if external_id in self.failing_ids or external_id not in self.products:
            raise UpstreamRequestFailed(f"CJ product details failed: no product {external_id}")
        return self.products[external_id]

    async def add_to_supplier_account(self, external_id):
        self.claim_calls.append(external_id)
        return True

    def import_transform(self, raw):
        price = float(raw.get("sellPrice") or 0)
        return {
            "name": raw.get("name") or "Imported Product",
            "price": price,
            "source": self.code,
            "external_id": raw.get("pid", ""),
            "supplier_price": price,
            "stock_quantity": raw.get("stock", 100),
            "in_stock": price > 0,
        }

    def stock_fields(self, raw):
        return {"stock_quantity": raw.get("stock"), "supplier_price": raw.get("sellPrice")}


@pytest.fixture()
def fake_client() -> FakeSupplierClient:
    return FakeSupplierClient()


@pytest.fixture()
def registry(fake_client) -> SupplierRegistry:
    """Registry whose "cj" variant hands out fake_client; stubs are real."""
    variants = dict(CLIENT_VARIANTS)
    variants["cj"] = (lambda supplier: fake_client, ("api_key", "api_email"))
    return SupplierRegistry(variants=variants)


@pytest.fixture()
def service(registry) -> DropshippingService:
    return DropshippingService(registry)


# ── Seed data ────────────────────────────────────────────────────────


def _supplier(db: Session, code: str, name: str, **kw) -> DropshippingSupplier:
    s = DropshippingSupplier(code=code, name=name, base_url=f"https://{code}.example.com", **kw)
    db.add(s)
    db.commit()
    db.refresh(s)
    return s


@pytest.fixture()
def cj_supplier(db_session: Session) -> DropshippingSupplier:
    """CJ configured with credentials and active."""
    return _supplier(
        db_session, "cj", "CJ Dropshipping",
        api_key="cj-key-1234", api_email="ops@shop.test", active=True,
    )


@pytest.fixture()
def stub_suppliers(db_session: Session) -> dict[str, DropshippingSupplier]:
    return {
        "autods": _supplier(db_session, "autods", "AutoDS", api_key="ads-key", active=True),
        "zendrop": _supplier(db_session, "zendrop", "Zendrop", api_key="zd-key", active=True),
    }


@pytest.fixture()
def imported_products(db_session: Session, cj_supplier) -> list[Product]:
    """Three CJ products already imported plus one local product."""
    products = [
        Product(name=f"Item {i}", price=10.0 + i, source="cj", external_id=f"P{i}",
                supplier_price=5.0, stock_quantity=10, in_stock=True)
        for i in range(1, 4)
    ]
    products.append(Product(name="Local mug", price=8.0, source="local"))
    db_session.add_all(products)
    db_session.commit()
    for p in products:
        db_session.refresh(p)
    return products


# ── API client ───────────────────────────────────────────────────────


@pytest.fixture()
def client(db_session: Session, service: DropshippingService) -> TestClient:
    """FastAPI TestClient using the test DB and the fake-backed service."""
    from app.database import get_db
    from app.dependencies import get_dropshipping_service
    from app.main import app
    from app.rate_limit import limiter

    def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db
    app.dependency_overrides[get_dropshipping_service] = lambda: service
    limiter.enabled = False

    with TestClient(app) as c:
        yield c

    limiter.enabled = True
    app.dependency_overrides.clear()
