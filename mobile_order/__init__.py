"""Mobile ordering client for a single-merchant counter"""

from mobile_order.app import OrderingApp
from mobile_order.cart import CartEngine, MergePricePolicy
from mobile_order.checkout import CheckoutService
from mobile_order.identity import IdentityStore
from mobile_order.menu import MenuService, normalize_menu
from mobile_order.orders import OrderHistoryTracker, OrderService, StatusPoller
from mobile_order.remote_config import RemoteConfigGateway

__version__ = "1.0.0"

__all__ = [
    "OrderingApp",
    "CartEngine",
    "MergePricePolicy",
    "CheckoutService",
    "IdentityStore",
    "MenuService",
    "normalize_menu",
    "OrderHistoryTracker",
    "OrderService",
    "StatusPoller",
    "RemoteConfigGateway",
]
