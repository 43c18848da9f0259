"""Database models"""

from mobile_order.models.local_state import LocalState

__all__ = [
    "LocalState",
]
