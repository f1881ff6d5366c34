"""Tests for order submission"""
import json
import pytest
import httpx

from vettrack.checkout import ORDERS_PATH, build_order_request, submit_order
from vettrack.errors import CheckoutError


def make_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://vettrack.test")


@pytest.fixture
def filled_store(store, sample_product, second_product):
    """Cart with p1 x2 and p2 x1"""
    store.add_to_cart(sample_product, 2)
    store.add_to_cart(second_product, 1)
    return store


def test_build_order_request_payload(filled_store):
    """Test the camelCase body the orders endpoint expects"""
    order = build_order_request(filled_store, "Ada Lovelace")

    assert order.to_payload() == {
        "items": [
            {"productId": "p1", "quantity": 2},
            {"productId": "p2", "quantity": 1},
        ],
        "shippingAddress": "Ada Lovelace",
    }


def test_build_order_request_default_address(filled_store):
    """Test the fallback address label"""
    order = build_order_request(filled_store)

    assert order.shipping_address == "Default Address"


def test_build_order_request_empty_cart(store):
    """Test an empty cart is never submitted"""
    with pytest.raises(CheckoutError):
        build_order_request(store)


@pytest.mark.asyncio
async def test_submit_order_success_clears_cart(filled_store, sink, storage):
    """Test a created order clears the cart"""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"id": "order-123", "status": "PENDING"})

    async with make_client(handler) as client:
        created = await submit_order(filled_store, "Ada Lovelace", client=client)

    assert created["id"] == "order-123"
    assert requests[0].method == "POST"
    assert requests[0].url.path == ORDERS_PATH
    assert json.loads(requests[0].content)["items"][0] == {"productId": "p1", "quantity": 2}
    assert filled_store.get_total_items() == 0
    assert storage.get(filled_store.storage_key) == "[]"
    assert sink.last.title == "Order Created"


@pytest.mark.asyncio
async def test_submit_order_rejected_keeps_cart(filled_store, sink):
    """Test a 4xx leaves the cart untouched and shows the server message"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "Items are required"})

    async with make_client(handler) as client:
        with pytest.raises(CheckoutError) as exc_info:
            await submit_order(filled_store, client=client)

    assert exc_info.value.status_code == 400
    assert filled_store.get_total_items() == 3
    assert sink.last.is_error
    assert sink.last.description == "Items are required"


@pytest.mark.asyncio
async def test_submit_order_server_error_without_json(filled_store, sink):
    """Test a non-JSON error body"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    async with make_client(handler) as client:
        with pytest.raises(CheckoutError) as exc_info:
            await submit_order(filled_store, client=client)

    assert exc_info.value.status_code == 502
    assert "502" in sink.last.description
    assert filled_store.get_total_items() == 3


@pytest.mark.asyncio
async def test_submit_order_transport_error_keeps_cart(filled_store, sink):
    """Test a network failure leaves the cart untouched"""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with make_client(handler) as client:
        with pytest.raises(CheckoutError):
            await submit_order(filled_store, client=client)

    assert filled_store.get_item_quantity("p1") == 2
    assert sink.last.title == "Order Error"


@pytest.mark.asyncio
async def test_submit_order_empty_cart_makes_no_request(store):
    """Test nothing is sent for an empty cart"""
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={})

    async with make_client(handler) as client:
        with pytest.raises(CheckoutError):
            await submit_order(store, client=client)

    assert requests == []


@pytest.mark.asyncio
async def test_submit_order_accepted_without_json_body(filled_store, sink, storage):
    """Test an accepted order with an empty body still clears the cart"""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, text="")

    async with make_client(handler) as client:
        created = await submit_order(filled_store, client=client)

    assert created == {}
    assert filled_store.get_total_items() == 0
    assert storage.get(filled_store.storage_key) == "[]"
    assert sink.last.title == "Order Created"
