"""Placeholder suppliers — same interface, no real catalog access.

Search answers with an empty result so the admin UI stays usable; anything
that would import or claim a product raises UnsupportedSupplier.
"""

import logging

from ..exceptions import UnsupportedSupplier
from .base import SupplierClient

log = logging.getLogger(__name__)


class StubSupplierClient(SupplierClient):
    reason = "Supplier integration is not available"

    def __init__(self, api_key: str | None = None, timeout: float = 20.0):
        super().__init__(timeout=timeout)
        self.api_key = api_key

    async def search_products(self, keyword=None, category_id=None, page_num=1, page_size=20):
        log.info(f"{self.display_name} (stub): search '{keyword or ''}' -> no results")
        return []

    async def get_product_details(self, external_id: str) -> dict:
        raise UnsupportedSupplier(self.reason)

    async def add_to_supplier_account(self, external_id: str) -> bool:
        raise UnsupportedSupplier(self.reason)

    def import_transform(self, raw: dict) -> dict:
        raise UnsupportedSupplier(self.reason)


class AutoDSClient(StubSupplierClient):
    code = "autods"
    display_name = "AutoDS"
    reason = "AutoDS import requires API approval - contact AutoDS for API access"


class ZendropClient(StubSupplierClient):
    code = "zendrop"
    display_name = "Zendrop"
    reason = "Zendrop does not provide a public API - use the Shopify/WooCommerce storefront integration"
