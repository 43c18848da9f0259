"""Remote config module"""

from mobile_order.remote_config.gateway import RemoteConfigGateway
from mobile_order.remote_config.sources import (
    BaseRemoteConfigSource,
    HttpRemoteConfigSource,
    StaticRemoteConfigSource,
)

__all__ = [
    "RemoteConfigGateway",
    "BaseRemoteConfigSource",
    "HttpRemoteConfigSource",
    "StaticRemoteConfigSource",
]
