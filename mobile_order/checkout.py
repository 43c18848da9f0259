"""Checkout: from a filled cart to a placed, tracked order"""

from typing import Optional
from uuid import uuid4

import structlog

from mobile_order.cart import CartEngine
from mobile_order.errors import CheckoutUnavailable
from mobile_order.orders.history import OrderHistoryTracker
from mobile_order.orders.service import OrderService
from mobile_order.remote_config.gateway import RemoteConfigGateway
from mobile_order.schemas.order import Order
from mobile_order.uploads import BaseUploader

logger = structlog.get_logger()

SLIP_DESTINATION = "payment-slips"


class CheckoutService:
    """
    Places the current cart as an order.
    The cart is cleared only after the backend confirmed the order; any
    failure leaves it intact so the customer can retry.
    """

    def __init__(
        self,
        cart: CartEngine,
        orders: OrderService,
        history: OrderHistoryTracker,
        remote_config: RemoteConfigGateway,
        uploader: Optional[BaseUploader] = None,
    ):
        self.cart = cart
        self.orders = orders
        self.history = history
        self.remote_config = remote_config
        self.uploader = uploader

    async def place_order(self, payment_method: str, slip: Optional[bytes] = None) -> Order:
        merchant = await self.remote_config.check_merchant_status()
        if merchant.is_close:
            raise CheckoutUnavailable(merchant.close_message)
        if await self.remote_config.check_checkout_status():
            raise CheckoutUnavailable("Checkout is temporarily disabled")

        items = self.cart.items
        customer = self.cart.customer
        if not items:
            raise CheckoutUnavailable("Cart is empty")
        if customer is None or not customer.name.strip():
            raise CheckoutUnavailable("Customer name is required")

        attachment_url = None
        if slip is not None:
            if self.uploader is None:
                raise CheckoutUnavailable("No uploader configured for payment slips")
            attachment_url = await self.uploader.upload(
                slip, f"{SLIP_DESTINATION}/{uuid4().hex}"
            )
            logger.info("Payment slip uploaded", url=attachment_url)

        order = await self.orders.submit_order(
            items,
            customer,
            payment_method,
            attachment_url=attachment_url,
        )

        self.history.add(order)
        self.cart.clear()
        return order
