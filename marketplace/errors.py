"""
Cart Errors

Centralized error messages and exception types.
"""

ERROR_NO_PROVIDER = "use_cart must be used within a CartProvider"
ERROR_ITEM_NOT_FOUND = "Cart item not found"
ERROR_STORAGE_NOT_CONFIGURED = "UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set"
ERROR_BRIDGE_NOT_STARTED = "Persistence bridge is not running"


class CartProviderError(RuntimeError):
    """Cart accessed outside of an active CartProvider scope."""

    def __init__(self, message: str = ERROR_NO_PROVIDER):
        super().__init__(message)


class CartItemNotFoundError(LookupError):
    """No line item with the requested product id."""

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"{ERROR_ITEM_NOT_FOUND}: {product_id}")
