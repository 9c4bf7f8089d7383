"""
test_supplier_registry.py — Tests for the live supplier client registry

Covers: which suppliers get a client, credential and code validation,
wholesale rebuilds, lazy first-use rebuild and its single-flight lock.

Called by: pytest
Depends on: app/services/supplier_registry.py
"""

import threading
import time

from app.connectors import AutoDSClient, CJDropshippingClient, ZendropClient
from app.models import DropshippingSupplier
from app.services.supplier_registry import CLIENT_VARIANTS, SUPPORTED_CODES, SupplierRegistry


def _add(db, code, **kw):
    s = DropshippingSupplier(code=code, name=code.upper(), base_url=f"https://{code}.test", **kw)
    db.add(s)
    db.commit()
    return s


def test_supported_codes():
    assert SUPPORTED_CODES == ("cj", "autods", "zendrop")


def test_initialize_builds_real_clients(db_session):
    _add(db_session, "cj", api_key="k", api_email="e@x.test", active=True)
    _add(db_session, "autods", active=True)
    _add(db_session, "zendrop", active=True)

    clients = SupplierRegistry().initialize(db_session)

    assert isinstance(clients["cj"], CJDropshippingClient)
    assert clients["cj"].base_url == "https://cj.test"
    assert isinstance(clients["autods"], AutoDSClient)
    assert isinstance(clients["zendrop"], ZendropClient)


def test_inactive_and_uncredentialed_skipped(db_session):
    _add(db_session, "cj", api_key="k", active=True)  # no email
    _add(db_session, "autods", active=False)

    registry = SupplierRegistry()
    assert registry.initialize(db_session) == {}
    assert registry.get("cj") is None
    assert registry.codes() == []


def test_unknown_code_skipped(db_session):
    _add(db_session, "aliexpress", api_key="k", active=True)
    assert SupplierRegistry().initialize(db_session) == {}


def test_rebuild_replaces_whole_map(db_session):
    cj = _add(db_session, "cj", api_key="k", api_email="e@x.test", active=True)
    _add(db_session, "zendrop", active=True)
    registry = SupplierRegistry()
    registry.initialize(db_session)
    before = registry.get("cj")

    cj.active = False
    db_session.commit()
    registry.initialize(db_session)

    assert registry.codes() == ["zendrop"]
    assert registry.get("cj") is None
    assert before is not None


def test_ensure_builds_lazily(db_session):
    _add(db_session, "autods", active=True)
    registry = SupplierRegistry()

    client = registry.ensure(db_session, "autods")

    assert isinstance(client, AutoDSClient)
    assert registry.ensure(db_session, "autods") is client


def test_ensure_missing_returns_none(db_session):
    assert SupplierRegistry().ensure(db_session, "cj") is None


def test_concurrent_ensure_builds_once(db_session):
    _add(db_session, "autods", active=True)
    builds = []

    def slow_factory(supplier):
        builds.append(supplier.code)
        time.sleep(0.05)
        return AutoDSClient()

    registry = SupplierRegistry(variants={"autods": (slow_factory, ())})
    results = []
    threads = [
        threading.Thread(target=lambda: results.append(registry.ensure(db_session, "autods")))
        for _ in range(4)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert builds == ["autods"]
    assert len({id(r) for r in results}) == 1


def test_variants_declare_credentials():
    assert CLIENT_VARIANTS["cj"][1] == ("api_key", "api_email")
    assert CLIENT_VARIANTS["autods"][1] == ()
