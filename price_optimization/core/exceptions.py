"""Error taxonomy for pricing requests, catalog lookups and ledger writes."""


class PricingError(Exception):
    """Base class for all pricing errors."""
    status_code = 500


class InvalidInput(PricingError, ValueError):
    """Request or context is structurally invalid or out of domain."""
    status_code = 400


class NotFound(PricingError, LookupError):
    """Product id unknown to the catalog."""
    status_code = 404

    def __init__(self, product_id: str):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class DuplicateKey(PricingError):
    """A decision with the same (product_id, timestamp) already exists."""
    status_code = 409

    def __init__(self, product_id: str, timestamp):
        super().__init__(f"Decision already recorded for {product_id} at {timestamp.isoformat()}")
        self.product_id = product_id
        self.timestamp = timestamp


class ConflictError(PricingError):
    """Ledger collision persisted after a retry with an advanced timestamp."""
    status_code = 409


class OracleUnavailable(PricingError):
    """Confidence oracle failed; callers fall back to the deterministic score."""
