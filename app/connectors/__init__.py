"""Dropshipping supplier clients."""

from .base import SupplierClient  # noqa: F401
from .cj import CJDropshippingClient  # noqa: F401
from .stubs import AutoDSClient, ZendropClient  # noqa: F401
