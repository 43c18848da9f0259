"""Order schemas"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel

from mobile_order.schemas.cart import CartLineItem, Customer


class OrderStatus(str, Enum):
    """Fulfillment pipeline: pending -> confirmed -> preparing -> ready -> completed"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.COMPLETED, OrderStatus.CANCELLED)

    @property
    def progress(self) -> int:
        """Progress bar percentage"""
        return _PROGRESS.get(self, 0)

    @property
    def label(self) -> str:
        return _LABELS[self]


_PROGRESS = {
    OrderStatus.PENDING: 25,
    OrderStatus.CONFIRMED: 50,
    OrderStatus.PREPARING: 75,
    OrderStatus.READY: 100,
    OrderStatus.COMPLETED: 100,
}

_LABELS = {
    OrderStatus.PENDING: "Order Received",
    OrderStatus.CONFIRMED: "Confirmed",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.READY: "Ready for Pickup",
    OrderStatus.COMPLETED: "Completed",
    OrderStatus.CANCELLED: "Cancelled",
}


class Order(BaseModel):
    """Submitted order with a snapshot of its cart lines"""
    id: str
    user_id: Optional[str] = None
    items: List[CartLineItem] = []
    customer: Customer
    subtotal: Decimal
    total: Decimal
    status: OrderStatus = OrderStatus.PENDING
    estimated_pickup_time: datetime
    created_at: datetime
    payment_method: Optional[str] = None
    payment_slip_url: Optional[str] = None


class OrderStatusItem(BaseModel):
    name: str
    quantity: int = 1


class OrderStatusSnapshot(BaseModel):
    """Live status reported by the backend"""
    id: str
    status: OrderStatus
    estimated_pickup_time: datetime
    items: List[OrderStatusItem] = []


# Backend wire formats

class ApiCustomerInfo(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    table_number: Optional[str] = None


class ApiOrderCustomizations(BaseModel):
    size: str
    milk: str
    sweetness: str
    temperature: str
    extras: List[str] = []


class ApiOrderItem(BaseModel):
    menu_id: Union[int, str]
    name: str
    image_url: str
    quantity: int
    price: float
    customizations: ApiOrderCustomizations


class ApiOrderRequest(BaseModel):
    """POST /api/orders payload"""
    customer_id: str
    customer_info: ApiCustomerInfo
    items: List[ApiOrderItem]
    total: float
    payment_method: str
    attachment_url: Optional[str] = None
    notes: Optional[str] = None
