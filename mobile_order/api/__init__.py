"""Backend API access"""

from mobile_order.api.client import ApiClient
from mobile_order.api.envelope import unwrap_envelope

__all__ = ["ApiClient", "unwrap_envelope"]
