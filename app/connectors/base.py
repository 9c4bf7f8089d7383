"""Supplier client interface shared by every dropshipping supplier."""

import logging
from abc import ABC, abstractmethod

log = logging.getLogger(__name__)

DEFAULT_SHIPPING_COST = 5.0
SHIPPING_COST_PER_WEIGHT_UNIT = 0.5
DEFAULT_PROCESSING_DAYS = 3
DEFAULT_STOCK_QUANTITY = 100


def estimate_shipping_cost(weight: float | None) -> float:
    """Deterministic shipping estimate from package weight."""
    if not weight or weight <= 0:
        return DEFAULT_SHIPPING_COST
    return round(weight * SHIPPING_COST_PER_WEIGHT_UNIT, 2)


class SupplierClient(ABC):
    """One live client per configured supplier.

    search_products returns the supplier's native result shape untouched so
    the admin UI can browse it. import_transform maps one raw product to a
    dict of Product column values (the local product draft).
    """

    code: str = ""
    display_name: str = ""

    def __init__(self, timeout: float = 20.0):
        self.timeout = timeout

    @abstractmethod
    async def search_products(
        self,
        keyword: str | None = None,
        category_id: str | None = None,
        page_num: int = 1,
        page_size: int = 20,
    ):
        pass

    @abstractmethod
    async def get_product_details(self, external_id: str) -> dict:
        pass

    @abstractmethod
    async def add_to_supplier_account(self, external_id: str) -> bool:
        pass

    @abstractmethod
    def import_transform(self, raw: dict) -> dict:
        pass

    async def get_categories(self) -> list:
        return []

    def stock_fields(self, raw: dict) -> dict:
        """Current stock and cost from a detail payload. None means unknown."""
        return {"stock_quantity": None, "supplier_price": None}
