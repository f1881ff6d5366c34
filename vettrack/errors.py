"""
Cart Errors

Exception types and centralized error messages for the cart and checkout.
"""

# Cart errors
ERROR_CART_NOT_READY = "Cart has not been hydrated from storage yet"
ERROR_INVALID_QUANTITY = "quantity must be a positive integer"

# Checkout errors
ERROR_EMPTY_CART = "Cart is empty"
ERROR_ORDER_FAILED = "Failed to create order"


class CartNotReadyError(RuntimeError):
    """Raised when the cart is mutated before hydration has completed."""

    def __init__(self, message: str = ERROR_CART_NOT_READY):
        super().__init__(message)


class CheckoutError(Exception):
    """Raised when an order could not be submitted for the current cart."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
