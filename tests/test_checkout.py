"""Tests for the checkout flow"""

from decimal import Decimal

import pytest

from mobile_order.checkout import CheckoutService
from mobile_order.errors import CheckoutUnavailable, NetworkFailure, OrderCreationFailed
from mobile_order.orders.history import OrderHistoryTracker
from mobile_order.orders.service import OrderService
from mobile_order.remote_config.gateway import RemoteConfigGateway
from mobile_order.remote_config.sources import StaticRemoteConfigSource
from mobile_order.schemas.cart import Customer
from mobile_order.schemas.order import OrderStatus
from mobile_order.uploads import BaseUploader


class RecordingUploader(BaseUploader):
    def __init__(self):
        self.uploads = []

    async def upload(self, payload: bytes, destination: str) -> str:
        self.uploads.append((payload, destination))
        return f"https://cdn.test/{destination}.png"


@pytest.fixture
def uploader():
    return RecordingUploader()


@pytest.fixture
def config_values():
    return {}


@pytest.fixture
def checkout(api, identity, store, bus, cart, uploader, config_values):
    orders = OrderService(api, identity)
    history = OrderHistoryTracker(orders, identity, store, bus)
    gateway = RemoteConfigGateway(StaticRemoteConfigSource(config_values))
    return CheckoutService(cart, orders, history, gateway, uploader=uploader)


@pytest.fixture
def filled_cart(cart, make_line):
    cart.add_item(make_line(menu_id="3", size="Medium", quantity=2, total_price="9.00"))
    cart.set_customer(Customer(name="Ann"))
    return cart


@pytest.mark.asyncio
async def test_successful_order_clears_cart(checkout, filled_cart, backend):
    """Test submission success: order recorded, cart emptied"""
    backend.route("POST", "/api/orders", json_body={"data": {"id": "77", "status": "pending"}})

    order = await checkout.place_order("cash")

    assert order.id == "77"
    assert order.total == Decimal("9.00")
    assert order.status == OrderStatus.PENDING
    assert filled_cart.items == []
    assert filled_cart.customer is None
    assert [tracked.id for tracked in checkout.history.orders] == ["77"]


@pytest.mark.asyncio
async def test_failed_order_preserves_cart(checkout, filled_cart, backend):
    """Test submission failure: error raised, cart untouched"""
    backend.route("POST", "/api/orders", status_code=500, json_body={"detail": "boom"})
    items_before = filled_cart.items

    with pytest.raises(NetworkFailure):
        await checkout.place_order("cash")

    assert filled_cart.items == items_before
    assert len(filled_cart.items) == 1
    assert checkout.history.orders == []


@pytest.mark.asyncio
async def test_missing_order_id_preserves_cart(checkout, filled_cart, backend):
    backend.route("POST", "/api/orders", json_body={"success": True})

    with pytest.raises(OrderCreationFailed):
        await checkout.place_order("qr")

    assert len(filled_cart.items) == 1


@pytest.mark.asyncio
async def test_slip_is_uploaded_and_attached(checkout, filled_cart, backend, uploader):
    """Test the payment slip URL is sent as attachment_url"""
    backend.route("POST", "/api/orders", json_body={"id": "80"})

    order = await checkout.place_order("qr", slip=b"\x89PNG")

    assert len(uploader.uploads) == 1
    assert uploader.uploads[0][1].startswith("payment-slips/")
    assert backend.last_json()["attachment_url"] == order.payment_slip_url
    assert order.payment_slip_url.startswith("https://cdn.test/payment-slips/")


@pytest.mark.asyncio
async def test_checkout_disabled_is_refused(checkout, filled_cart, backend, config_values):
    """Test the remote kill switch blocks checkout before any request"""
    config_values["is_disable_checkout"] = True
    checkout.remote_config.source.values = config_values

    with pytest.raises(CheckoutUnavailable):
        await checkout.place_order("cash")

    assert backend.requests == []
    assert len(filled_cart.items) == 1


@pytest.mark.asyncio
async def test_closed_merchant_is_refused(checkout, filled_cart, backend):
    checkout.remote_config.source.values = {"is_close": "true", "close_message": "Closed today"}

    with pytest.raises(CheckoutUnavailable, match="Closed today"):
        await checkout.place_order("cash")

    assert backend.requests == []


@pytest.mark.asyncio
async def test_empty_cart_is_refused(checkout, backend):
    with pytest.raises(CheckoutUnavailable):
        await checkout.place_order("cash")

    assert backend.requests == []
