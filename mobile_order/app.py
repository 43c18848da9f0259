"""
Mobile ordering client - composition root
"""

from typing import Optional

import httpx
import structlog
from sqlalchemy.orm import sessionmaker

from mobile_order.api.client import ApiClient
from mobile_order.cart import CartEngine
from mobile_order.checkout import CheckoutService
from mobile_order.config import Settings, settings as default_settings
from mobile_order.database import create_session_factory, create_storage_engine
from mobile_order.events import EventBus
from mobile_order.favorites import FavoritesStore
from mobile_order.identity import IdentityStore
from mobile_order.language import LocalePreference
from mobile_order.logging_config import configure_logging
from mobile_order.menu.service import MenuService
from mobile_order.orders.history import OrderHistoryTracker
from mobile_order.orders.poller import StatusPoller
from mobile_order.orders.service import OrderService
from mobile_order.remote_config.gateway import RemoteConfigGateway
from mobile_order.remote_config.sources import BaseRemoteConfigSource, HttpRemoteConfigSource
from mobile_order.storage import LocalStore
from mobile_order.uploads import BaseUploader

logger = structlog.get_logger()


class OrderingApp:
    """
    Owns one instance of every component and the event bus they share.

    Usage:
        async with OrderingApp() as app:
            menu = await app.menu.get_menu()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_factory: Optional[sessionmaker] = None,
        remote_config_source: Optional[BaseRemoteConfigSource] = None,
        uploader: Optional[BaseUploader] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or default_settings
        configure_logging(self.settings)

        if session_factory is None:
            session_factory = create_session_factory(
                create_storage_engine(self.settings.storage_url)
            )

        self.bus = EventBus()
        self.store = LocalStore(session_factory)
        self.identity = IdentityStore(self.store)
        self.language = LocalePreference(self.store, self.bus, default=self.settings.default_locale)
        self.favorites = FavoritesStore(self.store)

        self.api = ApiClient(
            base_url=self.settings.api_base_url,
            locale_provider=self.language.get,
            timeout=self.settings.http_timeout_seconds,
            transport=transport,
        )
        self.remote_config = RemoteConfigGateway(
            remote_config_source or HttpRemoteConfigSource(self.settings.remote_config_url),
            min_fetch_interval=self.settings.remote_config_min_fetch_interval_seconds,
        )

        self.menu = MenuService(self.api, self.remote_config)
        self.cart = CartEngine(self.store, self.bus)
        self.orders = OrderService(self.api, self.identity)
        self.history = OrderHistoryTracker(
            self.orders,
            self.identity,
            self.store,
            self.bus,
            limit=self.settings.order_history_limit,
        )
        self.poller = StatusPoller(self.history, interval=self.settings.order_poll_interval_seconds)
        self.checkout = CheckoutService(
            self.cart,
            self.orders,
            self.history,
            self.remote_config,
            uploader=uploader,
        )

    async def start(self) -> None:
        logger.info("Starting ordering client", api_base_url=self.settings.api_base_url)
        await self.history.load()
        self.poller.start()

    async def stop(self) -> None:
        await self.poller.stop()
        self.history.close()
        await self.api.aclose()
        logger.info("Ordering client stopped")

    async def __aenter__(self) -> "OrderingApp":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()
