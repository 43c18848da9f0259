"""Tests for the order history tracker and status polling"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional

import pytest
from pydantic import ValidationError

from mobile_order.errors import NetworkFailure
from mobile_order.orders.history import OrderHistoryTracker
from mobile_order.orders.poller import StatusPoller
from mobile_order.orders.service import OrderService
from mobile_order.schemas.cart import Customer
from mobile_order.schemas.order import Order, OrderStatus, OrderStatusSnapshot
from mobile_order.storage import ORDER_HISTORY_KEY

NOW = datetime(2024, 1, 15, 18, 0, tzinfo=timezone.utc)


def make_order(order_id: str, status: OrderStatus = OrderStatus.PENDING) -> Order:
    return Order(
        id=order_id,
        user_id="user-1",
        items=[],
        customer=Customer(name="Ann"),
        subtotal=Decimal("9.00"),
        total=Decimal("9.00"),
        status=status,
        estimated_pickup_time=NOW + timedelta(minutes=15),
        created_at=NOW,
    )


class StubOrderService:
    """Order service double with scripted responses"""

    def __init__(self):
        self.history: Optional[List[Order]] = None
        self.statuses: Dict[str, Optional[OrderStatusSnapshot]] = {}
        self.status_errors: Dict[str, Exception] = {}
        self.history_calls = 0
        self.status_calls: List[str] = []
        self.history_gate: Optional[asyncio.Event] = None
        self.history_error: Optional[Exception] = None

    async def get_orders_for_customer(self, user_id: str) -> List[Order]:
        self.history_calls += 1
        if self.history_gate is not None:
            await self.history_gate.wait()
        if self.history_error is not None:
            raise self.history_error
        if self.history is None:
            raise NetworkFailure("backend unreachable")
        return list(self.history)

    async def get_status(self, order_id: str) -> Optional[OrderStatusSnapshot]:
        self.status_calls.append(order_id)
        if order_id in self.status_errors:
            raise self.status_errors[order_id]
        return self.statuses.get(order_id)


@pytest.fixture
def service():
    return StubOrderService()


@pytest.fixture
def tracker(service, identity, store, bus):
    return OrderHistoryTracker(service, identity, store, bus, limit=10)


@pytest.mark.asyncio
async def test_load_replaces_cache_with_server_orders(tracker, service, store):
    """Test that server truth replaces the local cache and is persisted"""
    tracker.add(make_order("old"))
    service.history = [make_order("1"), make_order("2")]

    await tracker.load()

    assert [order.id for order in tracker.orders] == ["1", "2"]
    assert [raw["id"] for raw in store.load(ORDER_HISTORY_KEY)] == ["1", "2"]
    assert tracker.is_loading is False


@pytest.mark.asyncio
async def test_load_falls_back_to_persisted_cache(service, identity, store, bus):
    """Test stale cache is used when the backend is unreachable"""
    first = OrderHistoryTracker(service, identity, store, bus)
    first.add(make_order("cached", OrderStatus.PREPARING))

    second = OrderHistoryTracker(service, identity, store, bus)
    await second.load()

    assert [order.id for order in second.orders] == ["cached"]
    assert second.orders[0].status == OrderStatus.PREPARING
    assert second.is_loading is False


@pytest.mark.asyncio
async def test_load_with_nothing_cached_is_empty(tracker):
    await tracker.load()

    assert tracker.orders == []
    assert tracker.is_loading is False


@pytest.mark.asyncio
async def test_corrupt_cache_is_ignored(tracker, session_factory):
    from mobile_order.models.local_state import LocalState

    with session_factory() as session:
        session.add(LocalState(key=ORDER_HISTORY_KEY, value="[{broken"))
        session.commit()

    await tracker.load()

    assert tracker.orders == []


def test_history_is_capped(tracker):
    """Test that only the most recent orders are kept"""
    for index in range(12):
        tracker.add(make_order(str(index)))

    ids = [order.id for order in tracker.orders]
    assert len(ids) == 10
    assert ids[0] == "11"
    assert ids[-1] == "2"
    assert tracker.get_recent(3) == tracker.orders[:3]


def test_update_status_persists(tracker, store):
    tracker.add(make_order("1"))
    eta = NOW + timedelta(minutes=5)

    tracker.update_status("1", OrderStatus.READY, eta)

    assert tracker.orders[0].status == OrderStatus.READY
    assert tracker.orders[0].estimated_pickup_time == eta
    assert store.load(ORDER_HISTORY_KEY)[0]["status"] == "ready"


@pytest.mark.asyncio
async def test_status_poll_failure_keeps_cached_order(tracker, service):
    """Test that a null status poll leaves the exposed list unchanged"""
    tracker.add(make_order("1", OrderStatus.PREPARING))
    before = tracker.orders
    service.statuses["1"] = None

    await tracker.refresh()

    assert tracker.orders == before
    assert service.status_calls == ["1"]


@pytest.mark.asyncio
async def test_refresh_updates_active_orders_only(tracker, service):
    """Test terminal orders are not polled and sibling failures are isolated"""
    tracker.add(make_order("done", OrderStatus.COMPLETED))
    tracker.add(make_order("broken", OrderStatus.PENDING))
    tracker.add(make_order("live", OrderStatus.PENDING))
    service.statuses["live"] = OrderStatusSnapshot(
        id="live",
        status=OrderStatus.READY,
        estimated_pickup_time=NOW,
    )
    service.status_errors["broken"] = RuntimeError("unexpected")

    await tracker.refresh()

    statuses = {order.id: order.status for order in tracker.orders}
    assert statuses == {
        "live": OrderStatus.READY,
        "broken": OrderStatus.PENDING,
        "done": OrderStatus.COMPLETED,
    }
    assert "done" not in service.status_calls


@pytest.mark.asyncio
async def test_overlapping_refreshes_are_coalesced(tracker, service):
    """Test that concurrent refresh calls share one in-flight run"""
    service.history = [make_order("1")]
    service.history_gate = asyncio.Event()

    first = asyncio.ensure_future(tracker.refresh())
    second = asyncio.ensure_future(tracker.refresh())
    await asyncio.sleep(0.01)
    assert tracker.is_loading is True

    service.history_gate.set()
    await asyncio.gather(first, second)

    assert service.history_calls == 1
    assert tracker.is_loading is False


@pytest.mark.asyncio
async def test_results_after_close_are_ignored(tracker, service):
    tracker.add(make_order("1"))
    tracker.close()
    service.statuses["1"] = OrderStatusSnapshot(id="1", status=OrderStatus.READY, estimated_pickup_time=NOW)

    await tracker.refresh_statuses()

    assert tracker.orders[0].status == OrderStatus.PENDING


@pytest.mark.asyncio
async def test_changes_are_published(tracker, bus):
    seen = []
    bus.orders_changed.subscribe(seen.append)

    tracker.add(make_order("1"))
    tracker.update_status("1", OrderStatus.CONFIRMED)

    assert len(seen) == 2
    assert seen[-1][0].status == OrderStatus.CONFIRMED


@pytest.mark.asyncio
async def test_poller_refreshes_on_visibility(tracker, service):
    """Test a foreground event triggers an immediate refresh"""
    poller = StatusPoller(tracker, interval=3600)

    await poller.on_visibility_change(False)
    assert service.history_calls == 0

    await poller.on_visibility_change(True)
    assert service.history_calls == 1


@pytest.mark.asyncio
async def test_poller_refreshes_on_interval(tracker, service):
    """Test the timer keeps refreshing until stopped"""
    poller = StatusPoller(tracker, interval=0.01)

    poller.start()
    assert poller.running
    await asyncio.sleep(0.05)
    await poller.stop()

    calls = service.history_calls
    assert calls >= 2
    assert not poller.running

    await asyncio.sleep(0.03)
    assert service.history_calls == calls


@pytest.mark.asyncio
async def test_odd_server_values_are_coerced(api, backend, identity, store, bus):
    """Test numeric and mistyped fields in server history still load"""
    cached = OrderHistoryTracker(OrderService(api, identity), identity, store, bus)
    cached.add(make_order("c1", OrderStatus.PREPARING))
    customer_id = identity.get_or_create_customer_id()
    backend.route("GET", f"/api/orders/customer/{customer_id}", json_body=[
        {"id": 5, "user_id": 42, "customer_info": {"name": "Ann", "phone": 812345678}},
        {
            "id": 6,
            "customer_info": "Bob",
            "items": [{"menu_id": 3, "name": "Latte", "customizations": {"size": 16, "extras": "shot"}}],
        },
        {"id": 7, "customer_info": {"name": "Cy"}, "customizations": ["not", "a", "dict"]},
    ])
    tracker = OrderHistoryTracker(OrderService(api, identity), identity, store, bus)

    await tracker.load()

    assert [order.id for order in tracker.orders] == ["5", "6", "7"]
    first, second, _ = tracker.orders
    assert first.customer.phone == "812345678"
    assert first.user_id == "42"
    assert second.customer.name == "Unknown Customer"
    assert second.items[0].size.name == "16"
    assert second.items[0].add_ons == []


@pytest.mark.asyncio
async def test_unparseable_history_falls_back_to_cache(service, identity, store, bus):
    """Test a history response that fails validation is treated like a failed fetch"""
    first = OrderHistoryTracker(service, identity, store, bus)
    first.add(make_order("c1", OrderStatus.PREPARING))
    with pytest.raises(ValidationError) as exc_info:
        Order.model_validate({"id": "broken"})
    service.history_error = exc_info.value

    second = OrderHistoryTracker(service, identity, store, bus)
    await second.load()

    assert [order.id for order in second.orders] == ["c1"]
    assert second.is_loading is False
