"""
VetTrack Storefront Cart

This package contains the storefront cart components:
- cart: cart models, durable storage backends and the cart store
- notifications: toast sinks for user-facing messages
- checkout: order submission for the current cart
- i18n: toast texts

Note: Imports are lazy so that importing the package does not pull in
the HTTP and Redis clients.
"""

__all__ = [
    "get_cart_store",
    "get_storage",
    "submit_order",
]


def __getattr__(name):
    """Lazy attribute access."""
    if name == "get_cart_store":
        from vettrack.cart import get_cart_store
        return get_cart_store
    elif name == "get_storage":
        from vettrack.cart.storage import get_storage
        return get_storage
    elif name == "submit_order":
        from vettrack.checkout import submit_order
        return submit_order
    raise AttributeError(f"module 'vettrack' has no attribute '{name}'")
