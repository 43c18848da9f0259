"""Remote config sources"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
import structlog

from mobile_order.config import settings
from mobile_order.errors import ConfigUnavailable

logger = structlog.get_logger()


class BaseRemoteConfigSource(ABC):
    """Abstract base class for remote config backends"""

    @abstractmethod
    async def fetch(self) -> Dict[str, Any]:
        """Fetch the current parameter values, raising ConfigUnavailable on failure"""
        pass


class StaticRemoteConfigSource(BaseRemoteConfigSource):
    """In-memory values, for offline use and tests"""

    def __init__(self, values: Optional[Dict[str, Any]] = None):
        self.values = dict(values or {})
        self.fetch_count = 0

    async def fetch(self) -> Dict[str, Any]:
        self.fetch_count += 1
        return dict(self.values)


class HttpRemoteConfigSource(BaseRemoteConfigSource):
    """
    Fetches parameters from an HTTP endpoint.
    Accepts a flat `{key: value}` object or a template of the form
    `{"parameters": {key: {"defaultValue": {"value": ...}}}}`.
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.remote_config_url
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ConfigUnavailable(f"Remote config fetch failed: {e}") from e

        if not isinstance(data, dict):
            raise ConfigUnavailable("Remote config payload is not an object")

        return _flatten_template(data)


def _flatten_template(data: Dict[str, Any]) -> Dict[str, Any]:
    parameters = data.get("parameters")
    if not isinstance(parameters, dict):
        return data

    values = {}
    for key, parameter in parameters.items():
        if isinstance(parameter, dict):
            default_value = parameter.get("defaultValue") or {}
            if isinstance(default_value, dict) and "value" in default_value:
                values[key] = default_value["value"]
        else:
            values[key] = parameter
    return values
