"""Database models — re-exports all models.

Import from here:  from app.models import Product, DropshippingSupplier, ...
Or from submodules: from app.models.product import Product
"""

from .base import Base  # noqa: F401

# Dropshipping: suppliers & sync audit log
from .dropshipping import DropshippingSupplier, ProductSyncLog  # noqa: F401

# Local catalog
from .product import Product  # noqa: F401
