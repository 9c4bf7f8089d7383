"""Dropshipping error taxonomy.

Every error carries an HTTP status so the router layer can turn it into a
structured response without branching on type. None of these are fatal to
the process.
"""


class DropshippingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SupplierNotConfigured(DropshippingError):
    """Unknown supplier code, inactive supplier, or missing credentials."""
    status_code = 404


class AuthenticationFailed(DropshippingError):
    """The supplier rejected (or never answered) the token exchange."""
    status_code = 502


class UnsupportedSupplier(DropshippingError):
    """The supplier variant cannot perform the requested operation."""
    status_code = 501


class NotDropshippingProduct(DropshippingError):
    status_code = 404


class UpstreamRequestFailed(DropshippingError):
    """Transport, HTTP status or payload error from a supplier call."""
    status_code = 502
