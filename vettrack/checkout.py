"""
Checkout - submit the current cart as an order

The cart store never talks to the network. Checkout builds the
POST /api/orders payload from the cart, sends it, and clears the cart
only after the server accepted the order.
"""

import os
from typing import List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from vettrack.cart.store import CartStore
from vettrack.errors import CheckoutError, ERROR_EMPTY_CART, ERROR_ORDER_FAILED
from vettrack.i18n import get_text
from vettrack.logging import get_logger
from vettrack.notifications import ToastVariant, build_toast

logger = get_logger(__name__)

# Environment variables
VETTRACK_API_URL = os.environ.get("VETTRACK_API_URL", "http://localhost:5000")
CHECKOUT_TIMEOUT = float(os.environ.get("CHECKOUT_TIMEOUT", "15"))

ORDERS_PATH = "/api/orders"


# ==================== ORDER MODELS ====================

class OrderItemRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    quantity: int


class CreateOrderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[OrderItemRequest]
    shipping_address: str = Field(alias="shippingAddress")

    def to_payload(self) -> dict:
        """JSON body in the server's camelCase shape."""
        return self.model_dump(by_alias=True)


def build_order_request(store: CartStore, shipping_address: Optional[str] = None) -> CreateOrderRequest:
    """Build the order payload from the cart lines."""
    lines = store.items
    if not lines:
        raise CheckoutError(ERROR_EMPTY_CART)

    return CreateOrderRequest(
        items=[
            OrderItemRequest(product_id=line.product_id, quantity=line.quantity)
            for line in lines
        ],
        shipping_address=shipping_address or get_text("checkout.default_address", store.lang),
    )


def _error_message(response: httpx.Response) -> str:
    """Pull the server's {"message": ...} out of an error response."""
    try:
        data = response.json()
    except ValueError:
        return f"{ERROR_ORDER_FAILED} ({response.status_code})"
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"{ERROR_ORDER_FAILED} ({response.status_code})"


async def submit_order(
    store: CartStore,
    shipping_address: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
    base_url: str = VETTRACK_API_URL,
    headers: Optional[dict] = None,
) -> dict:
    """
    Submit the cart as an order and clear it on success.

    Args:
        store: Hydrated cart store
        shipping_address: Free-form address; falls back to the default label
        client: Optional shared AsyncClient (must carry the session auth)
        base_url: API base URL when no client is given
        headers: Extra headers (e.g. session cookie) for this request

    Returns:
        The created order as returned by the server, or {} when the
        server accepted the order without a JSON body

    Raises:
        CheckoutError: empty cart, transport failure or non-2xx response.
            The cart is left untouched in every failure case.
    """
    order = build_order_request(store, shipping_address)

    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(base_url=base_url, timeout=CHECKOUT_TIMEOUT)

    try:
        response = await client.post(ORDERS_PATH, json=order.to_payload(), headers=headers)
    except httpx.HTTPError as e:
        logger.exception("Order submission failed")
        store.notify(build_toast(
            "checkout.failed", store.lang, ToastVariant.DESTRUCTIVE, error=ERROR_ORDER_FAILED,
        ))
        raise CheckoutError(f"{ERROR_ORDER_FAILED}: {e}") from e
    finally:
        if own_client:
            await client.aclose()

    if not response.is_success:
        message = _error_message(response)
        logger.warning(f"Order rejected with status {response.status_code}: {message}")
        store.notify(build_toast(
            "checkout.failed", store.lang, ToastVariant.DESTRUCTIVE, error=message,
        ))
        raise CheckoutError(message, status_code=response.status_code)

    # The order exists from here on; clear before touching the body
    store.clear_cart()
    store.notify(build_toast("checkout.created", store.lang))
    logger.info(f"Order created with {len(order.items)} item(s)")

    try:
        created = response.json()
    except ValueError:
        logger.warning(f"Order created but response body is not JSON (status {response.status_code})")
        return {}
    return created if isinstance(created, dict) else {}
