"""Pydantic schemas for client state and backend payloads"""

from mobile_order.schemas.menu import (
    SizeOption,
    MilkOption,
    AddOn,
    MenuCategory,
    MenuItem,
    Menu,
    slugify,
)
from mobile_order.schemas.cart import (
    Customer,
    CartLineItem,
    CartState,
    compute_unit_price,
)
from mobile_order.schemas.order import (
    OrderStatus,
    Order,
    OrderStatusSnapshot,
    ApiOrderRequest,
)
from mobile_order.schemas.remote_config import (
    MerchantStatus,
    CategoryConfigEntry,
    CustomizationOverride,
    MenuCustomizationConfig,
)

__all__ = [
    "SizeOption",
    "MilkOption",
    "AddOn",
    "MenuCategory",
    "MenuItem",
    "Menu",
    "slugify",
    "Customer",
    "CartLineItem",
    "CartState",
    "compute_unit_price",
    "OrderStatus",
    "Order",
    "OrderStatusSnapshot",
    "ApiOrderRequest",
    "MerchantStatus",
    "CategoryConfigEntry",
    "CustomizationOverride",
    "MenuCustomizationConfig",
]
