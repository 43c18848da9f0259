"""Client-side order history reconciled against live status"""

import asyncio
from datetime import datetime
from typing import List, Optional

import structlog
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from mobile_order.config import settings
from mobile_order.errors import NetworkFailure, PersistenceCorrupt
from mobile_order.events import EventBus
from mobile_order.identity import IdentityStore
from mobile_order.orders.service import OrderService
from mobile_order.schemas.order import Order, OrderStatus
from mobile_order.storage import ORDER_HISTORY_KEY, LocalStore

logger = structlog.get_logger()


class OrderHistoryTracker:
    """
    Cached list of the customer's orders.

    Source priority on load: backend list, then the last persisted cache,
    then an empty list. Status updates apply in completion order, so the
    last response to arrive wins for a given order.
    """

    def __init__(
        self,
        service: OrderService,
        identity: IdentityStore,
        store: LocalStore,
        bus: EventBus,
        limit: Optional[int] = None,
    ):
        self.service = service
        self.identity = identity
        self.store = store
        self.bus = bus
        self.limit = limit or settings.order_history_limit
        self.is_loading = False
        self._orders: List[Order] = []
        self._refresh_task: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def orders(self) -> List[Order]:
        return [order.model_copy(deep=True) for order in self._orders]

    def get_recent(self, limit: int = 5) -> List[Order]:
        return self.orders[:limit]

    def get_order(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order.model_copy(deep=True)
        return None

    async def load(self) -> None:
        self.is_loading = True
        try:
            user_id = self.identity.get_or_create_customer_id()
            try:
                orders = await self.service.get_orders_for_customer(user_id)
            except (NetworkFailure, ValidationError) as e:
                logger.warning("Failed to fetch order history, using cached orders", error=str(e))
                if not self._closed:
                    self._replace(self._load_cached(), persist=False)
                return

            if not self._closed:
                self._replace(orders, persist=True)
        finally:
            self.is_loading = False

    async def refresh(self) -> None:
        """Reload history and poll live statuses; overlapping calls share one run"""
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.ensure_future(self._refresh())
        await asyncio.shield(self._refresh_task)

    async def _refresh(self) -> None:
        await self.load()
        await self.refresh_statuses()

    async def refresh_statuses(self) -> None:
        """Poll every non-terminal order independently"""
        active = [order.id for order in self._orders if not order.status.is_terminal]
        if not active:
            return

        results = await asyncio.gather(
            *(self._refresh_status(order_id) for order_id in active),
            return_exceptions=True,
        )
        for order_id, result in zip(active, results):
            if isinstance(result, Exception):
                logger.error("Failed to refresh order", order_id=order_id, error=str(result))

    async def _refresh_status(self, order_id: str) -> None:
        snapshot = await self.service.get_status(order_id)
        if snapshot is None:
            return

        current = self.get_order(order_id)
        if current is None:
            return
        if (
            snapshot.status != current.status
            or snapshot.estimated_pickup_time != current.estimated_pickup_time
        ):
            self.update_status(order_id, snapshot.status, snapshot.estimated_pickup_time)

    def add(self, order: Order) -> None:
        """Put a new order first, keeping only the most recent `limit` orders"""
        others = [existing for existing in self._orders if existing.id != order.id]
        self._replace([order] + others[: self.limit - 1], persist=True)

    def update_status(
        self,
        order_id: str,
        status: OrderStatus,
        estimated_pickup_time: Optional[datetime] = None,
    ) -> None:
        if self._closed:
            return

        updated = []
        for order in self._orders:
            if order.id == order_id:
                update = {"status": status}
                if estimated_pickup_time is not None:
                    update["estimated_pickup_time"] = estimated_pickup_time
                order = order.model_copy(update=update)
                logger.info("Order status updated", order_id=order_id, status=status.value)
            updated.append(order)

        self._replace(updated, persist=True)

    def clear(self) -> None:
        self._replace([], persist=True)

    def close(self) -> None:
        """Ignore any result that resolves after teardown"""
        self._closed = True

    def _replace(self, orders: List[Order], persist: bool) -> None:
        self._orders = list(orders)
        if persist:
            try:
                self.store.save(
                    ORDER_HISTORY_KEY,
                    [order.model_dump(mode="json") for order in self._orders],
                )
            except SQLAlchemyError as e:
                logger.error("Failed to save order history", error=str(e))
        self.bus.orders_changed.emit(self.orders)

    def _load_cached(self) -> List[Order]:
        try:
            stored = self.store.load(ORDER_HISTORY_KEY)
        except (PersistenceCorrupt, SQLAlchemyError) as e:
            logger.warning("Ignoring unreadable order history", error=str(e))
            return []

        if not isinstance(stored, list):
            return []

        orders = []
        for raw in stored:
            try:
                orders.append(Order.model_validate(raw))
            except ValidationError:
                logger.warning("Skipping malformed cached order")
        return orders
