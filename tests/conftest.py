"""Test configuration and fixtures"""

import json
from decimal import Decimal
from typing import Callable, List

import httpx
import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from mobile_order.api.client import ApiClient
from mobile_order.cart import CartEngine
from mobile_order.database import create_session_factory
from mobile_order.events import EventBus
from mobile_order.identity import IdentityStore
from mobile_order.schemas.cart import CartLineItem
from mobile_order.schemas.menu import AddOn, MilkOption, SizeOption
from mobile_order.storage import LocalStore


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite://"

TEST_API_URL = "http://test"


@pytest.fixture
def session_factory():
    """Create test database"""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    factory = create_session_factory(engine)
    yield factory
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return LocalStore(session_factory)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def identity(store):
    return IdentityStore(store)


@pytest.fixture
def cart(store, bus):
    return CartEngine(store, bus)


class RecordingBackend:
    """httpx mock transport handler that records requests and replays routes"""

    def __init__(self):
        self.routes = {}
        self.requests: List[httpx.Request] = []

    def route(self, method: str, path: str, status_code: int = 200, json_body=None):
        self.routes[(method, path)] = (status_code, json_body)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status_code, body = self.routes.get(
            (request.method, request.url.path),
            (404, {"detail": "Not Found"}),
        )
        return httpx.Response(status_code, json=body)

    def last_json(self):
        return json.loads(self.requests[-1].content)


@pytest.fixture
def backend():
    return RecordingBackend()


@pytest.fixture
async def api(backend):
    """API client wired to the recording backend"""
    client = ApiClient(
        base_url=TEST_API_URL,
        locale_provider=lambda: "en",
        transport=httpx.MockTransport(backend),
    )
    yield client
    await client.aclose()


@pytest.fixture
def make_line() -> Callable[..., CartLineItem]:
    """Factory for cart line items"""

    def _make_line(
        menu_id: str = "3",
        size: str = "Medium",
        milk: str = "Oat Milk",
        sweetness: str = "50%",
        temperature: str = "Iced",
        add_ons: List[AddOn] = None,
        quantity: int = 1,
        total_price: str = "4.50",
    ) -> CartLineItem:
        return CartLineItem(
            menu_id=menu_id,
            menu_name=f"Menu {menu_id}",
            image_ref=f"/images/menu-{menu_id}.svg",
            size=SizeOption(id=size.lower(), name=size),
            milk=MilkOption(id=milk.lower().replace(" ", "-"), name=milk),
            sweetness=sweetness,
            temperature=temperature,
            add_ons=list(add_ons or []),
            quantity=quantity,
            total_price=Decimal(total_price),
        )

    return _make_line
