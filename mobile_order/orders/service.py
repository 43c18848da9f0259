"""Order submission and status lookup"""

import re
from decimal import Decimal
from typing import List, Optional, Sequence, Union

import structlog

from mobile_order.api.client import ApiClient
from mobile_order.config import settings
from mobile_order.errors import NetworkFailure, OrderCreationFailed
from mobile_order.identity import IdentityStore
from mobile_order.orders.normalize import (
    default_pickup_time,
    normalize_order_history,
    normalize_status,
    read_order_envelope,
    utcnow,
)
from mobile_order.schemas.cart import CartLineItem, Customer
from mobile_order.schemas.order import (
    ApiCustomerInfo,
    ApiOrderCustomizations,
    ApiOrderItem,
    ApiOrderRequest,
    Order,
    OrderStatusSnapshot,
)

logger = structlog.get_logger()


def synthesize_email(name: str, domain: Optional[str] = None) -> str:
    """Contact email derived from the customer name when none is collected"""
    local_part = re.sub(r"\s+", ".", name.strip().lower())
    return f"{local_part}@{domain or settings.customer_email_domain}"


def normalize_payment_method(payment_method: str) -> str:
    return "cash" if payment_method == "cash" else "qr"


def _blank(value: Optional[str]) -> bool:
    return value is None or value.strip() == ""


def _menu_id(value: str) -> Union[int, str]:
    return int(value) if value.isdigit() else value


def build_order_request(
    items: Sequence[CartLineItem],
    customer: Customer,
    payment_method: str,
    user_id: str,
    attachment_url: Optional[str] = None,
) -> ApiOrderRequest:
    """Backend payload for an order submission"""
    customer_info = ApiCustomerInfo(
        name=customer.name,
        email=synthesize_email(customer.name),
        phone=None if _blank(customer.phone) else customer.phone.strip(),
        table_number=None if _blank(customer.table_number) else customer.table_number.strip(),
    )

    total = sum((item.total_price for item in items), Decimal("0"))

    return ApiOrderRequest(
        customer_id=user_id,
        customer_info=customer_info,
        items=[
            ApiOrderItem(
                menu_id=_menu_id(item.menu_id),
                name=item.menu_name,
                image_url=item.image_ref,
                quantity=item.quantity,
                price=float(item.unit_price),
                customizations=ApiOrderCustomizations(
                    size=item.size.name,
                    milk=item.milk.name,
                    sweetness=item.sweetness,
                    temperature=item.temperature,
                    extras=[add_on.name for add_on in item.add_ons],
                ),
            )
            for item in items
        ],
        total=float(total),
        payment_method=normalize_payment_method(payment_method),
        attachment_url=attachment_url or None,
        notes=None if _blank(customer.notes) else customer.notes.strip(),
    )


class OrderService:
    """Submits orders and reads their status from the backend"""

    def __init__(self, api: ApiClient, identity: IdentityStore):
        self.api = api
        self.identity = identity

    async def submit_order(
        self,
        items: Sequence[CartLineItem],
        customer: Customer,
        payment_method: str,
        user_id: Optional[str] = None,
        attachment_url: Optional[str] = None,
    ) -> Order:
        """
        Submit an order.
        Transport and HTTP failures propagate as NetworkFailure; a response
        without an order id raises OrderCreationFailed.
        """
        user_id = user_id or self.identity.get_or_create_customer_id()
        request = build_order_request(items, customer, payment_method, user_id, attachment_url)

        logger.info(
            "Submitting order",
            customer_id=user_id,
            line_count=len(request.items),
            total=request.total,
        )

        response = await self.api.post("/api/orders", json=request.model_dump(exclude_none=True))

        envelope = read_order_envelope(response)
        if not envelope.id:
            logger.error("No order ID found in API response", response=response)
            raise OrderCreationFailed("Order creation failed - no order ID returned")

        now = utcnow()
        subtotal = sum((item.total_price for item in items), Decimal("0"))
        order = Order(
            id=envelope.id,
            user_id=user_id,
            items=[item.model_copy(deep=True) for item in items],
            customer=customer.model_copy(),
            subtotal=subtotal,
            total=subtotal,
            status=envelope.status,
            estimated_pickup_time=envelope.estimated_pickup_time or default_pickup_time(now),
            created_at=envelope.created_at or now,
            payment_method=envelope.payment_method or request.payment_method,
            payment_slip_url=attachment_url,
        )

        logger.info("Order created", order_id=order.id, status=order.status.value)
        return order

    async def get_status(self, order_id: str) -> Optional[OrderStatusSnapshot]:
        """Live status, or None when it cannot be fetched"""
        try:
            response = await self.api.get(f"/api/orders/{order_id}/status")
        except NetworkFailure as e:
            logger.warning("Failed to fetch order status", order_id=order_id, error=str(e))
            return None

        snapshot = normalize_status(response)
        if not snapshot.id:
            snapshot = snapshot.model_copy(update={"id": order_id})
        return snapshot

    async def get_orders_for_customer(self, user_id: str) -> List[Order]:
        """Orders known to the backend for a customer; raises NetworkFailure"""
        response = await self.api.get(f"/api/orders/customer/{user_id}")
        orders = normalize_order_history(response)
        logger.debug("Fetched customer orders", customer_id=user_id, count=len(orders))
        return orders
