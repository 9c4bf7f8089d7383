"""
test_stub_suppliers.py — AutoDS and Zendrop placeholder clients

Search must answer empty; anything that would import must refuse with
UnsupportedSupplier and a human-readable reason.
"""

import pytest

from app.connectors import AutoDSClient, ZendropClient
from app.exceptions import UnsupportedSupplier


@pytest.mark.parametrize("cls", [AutoDSClient, ZendropClient])
@pytest.mark.asyncio
async def test_search_returns_empty(cls):
    assert await cls("key").search_products(keyword="lamp") == []


@pytest.mark.parametrize("cls", [AutoDSClient, ZendropClient])
@pytest.mark.asyncio
async def test_details_and_claim_unsupported(cls):
    client = cls()
    with pytest.raises(UnsupportedSupplier):
        await client.get_product_details("X1")
    with pytest.raises(UnsupportedSupplier):
        await client.add_to_supplier_account("X1")
    with pytest.raises(UnsupportedSupplier):
        client.import_transform({"pid": "X1"})


@pytest.mark.asyncio
async def test_categories_default_empty():
    assert await ZendropClient().get_categories() == []


def test_reasons_name_the_supplier():
    assert "AutoDS" in AutoDSClient.reason
    assert "Zendrop" in ZendropClient.reason
    assert UnsupportedSupplier(AutoDSClient.reason).status_code == 501


def test_codes():
    assert AutoDSClient.code == "autods"
    assert ZendropClient.code == "zendrop"
