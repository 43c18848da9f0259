"""Error taxonomy for the ordering client"""

from typing import Optional


class MobileOrderError(Exception):
    """Base class for all client errors"""


class ConfigUnavailable(MobileOrderError):
    """Remote config could not be fetched or parsed"""


class NetworkFailure(MobileOrderError):
    """A backend request failed at the transport or HTTP level"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OrderCreationFailed(MobileOrderError):
    """The backend answered an order submission without an order id"""


class PersistenceCorrupt(MobileOrderError):
    """A locally stored value could not be decoded"""


class CheckoutUnavailable(MobileOrderError):
    """Checkout was refused before anything was sent to the backend"""
