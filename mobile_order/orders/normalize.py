"""
Normalization of order responses.
The backend answers either `{id, status, ...}` or `{success, data: {id, status, ...}}`;
every order response goes through `read_order_envelope` so no caller branches
on the shape.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from pydantic import BaseModel, ValidationError

from mobile_order.config import settings
from mobile_order.menu.pricing import parse_price
from mobile_order.schemas.cart import CartLineItem, Customer
from mobile_order.schemas.menu import AddOn, MilkOption, SizeOption, slugify
from mobile_order.schemas.order import Order, OrderStatus, OrderStatusItem, OrderStatusSnapshot

logger = structlog.get_logger()


class OrderEnvelope(BaseModel):
    """Canonical view of an order response, whichever shape it arrived in"""
    id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    estimated_pickup_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    items: List[Dict[str, Any]] = []


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_pickup_time(now: Optional[datetime] = None) -> datetime:
    return (now or utcnow()) + timedelta(minutes=settings.default_pickup_eta_minutes)


def parse_status(value: Any) -> OrderStatus:
    """Backend status string -> OrderStatus; missing or unknown -> pending"""
    if isinstance(value, OrderStatus):
        return value
    if isinstance(value, str) and value:
        try:
            return OrderStatus(value.strip().lower())
        except ValueError:
            logger.warning("Unknown order status from backend", status=value)
    return OrderStatus.PENDING


def parse_timestamp(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Unparseable timestamp from backend", value=value)
    return None


def read_order_envelope(response: Any) -> OrderEnvelope:
    """Read order fields from the wrapped shape first, then the bare shape"""
    outer = response if isinstance(response, dict) else {}
    inner = outer.get("data") if isinstance(outer.get("data"), dict) else {}

    def pick(*keys: str) -> Any:
        for source in (inner, outer):
            for key in keys:
                value = source.get(key)
                if value is not None and value != "":
                    return value
        return None

    order_id = pick("id")
    items = pick("items")
    return OrderEnvelope(
        id=str(order_id) if order_id is not None else None,
        status=parse_status(pick("status")),
        estimated_pickup_time=parse_timestamp(
            pick("estimated_pickup_time", "estimatedPickupTime")
        ),
        created_at=parse_timestamp(pick("created_at", "createdAt")),
        payment_method=_text(pick("payment_method", "paymentMethod")) or None,
        items=[item for item in items if isinstance(item, dict)] if isinstance(items, list) else [],
    )


def normalize_status(response: Any) -> OrderStatusSnapshot:
    envelope = read_order_envelope(response)
    return OrderStatusSnapshot(
        id=envelope.id or "",
        status=envelope.status,
        estimated_pickup_time=envelope.estimated_pickup_time or default_pickup_time(),
        items=[
            OrderStatusItem(
                name=str(item.get("name") or "Order Item"),
                quantity=_as_int(item.get("quantity"), 1),
            )
            for item in envelope.items
        ],
    )


def normalize_order_history(response: Any) -> List[Order]:
    """Orders from `GET /api/orders/customer/{id}`, wrapped or bare list"""
    orders_data = response.get("data") if isinstance(response, dict) else response
    if not isinstance(orders_data, list):
        return []

    orders = []
    for raw in orders_data:
        if not isinstance(raw, dict) or raw.get("id") is None:
            logger.warning("Skipping order without id in history response")
            continue
        try:
            orders.append(_history_order(raw))
        except ValidationError as e:
            logger.warning("Skipping malformed order in history response", order_id=raw.get("id"), error=str(e))
    return orders


def _history_order(raw: Dict[str, Any]) -> Order:
    envelope = read_order_envelope(raw)
    customer_info = _mapping(raw.get("customer_info"))
    total = parse_price(raw.get("total"), Decimal("0"))
    now = utcnow()

    return Order(
        id=envelope.id,
        user_id=_text(raw.get("user_id")) or _text(raw.get("customer_id")) or None,
        items=[_history_line(item, index) for index, item in enumerate(envelope.items)],
        customer=Customer(
            name=_text(customer_info.get("name")) or "Unknown Customer",
            phone=_text(customer_info.get("phone")),
            table_number=_text(customer_info.get("table_number"))
            or _text(customer_info.get("tableNumber")),
        ),
        subtotal=total,
        total=total,
        status=envelope.status,
        estimated_pickup_time=envelope.estimated_pickup_time or default_pickup_time(now),
        created_at=envelope.created_at or now,
        payment_method=envelope.payment_method,
        payment_slip_url=_text(raw.get("attachment_url")) or None,
    )


def _history_line(raw: Dict[str, Any], index: int) -> CartLineItem:
    customizations = _mapping(raw.get("customizations"))
    menu_id = _text(raw.get("menu_id"))
    name = _text(raw.get("name")) or _text(raw.get("menu_name")) or f"Menu #{menu_id or 'Unknown'}"
    quantity = max(_as_int(raw.get("quantity"), 1), 1)
    price = parse_price(raw.get("price"), Decimal("0"))
    size_name = _text(customizations.get("size")) or "Medium"
    milk_name = _text(customizations.get("milk")) or "Regular Milk"
    extras = customizations.get("extras")

    return CartLineItem(
        id=f"item-{index}",
        menu_id=menu_id or "1",
        menu_name=name,
        image_ref=_text(raw.get("image_url")) or f"/images/{slugify(name)}.svg",
        size=SizeOption(id=slugify(size_name), name=size_name),
        milk=MilkOption(id=slugify(milk_name), name=milk_name),
        sweetness=_text(customizations.get("sweetness")),
        temperature=_text(customizations.get("temperature")),
        add_ons=[
            AddOn(id=slugify(extra), name=extra)
            for extra in (extras if isinstance(extras, list) else [])
            if isinstance(extra, str)
        ],
        quantity=quantity,
        total_price=price * quantity,
    )


def _text(value: Any) -> str:
    """Scalar backend value as stripped text, empty for anything else"""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return ""
    return str(value).strip()


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default
