"""Order submission, history and status polling"""

from mobile_order.orders.history import OrderHistoryTracker
from mobile_order.orders.poller import StatusPoller
from mobile_order.orders.service import OrderService

__all__ = ["OrderHistoryTracker", "StatusPoller", "OrderService"]
