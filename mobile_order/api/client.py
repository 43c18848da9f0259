"""HTTP client for the merchant backend"""

from typing import Any, Callable, Optional

import httpx
import structlog

from mobile_order.config import settings
from mobile_order.errors import NetworkFailure

logger = structlog.get_logger()


class ApiClient:
    """Thin async wrapper over httpx that adds the locale and maps failures"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        locale_provider: Optional[Callable[[], str]] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.locale_provider = locale_provider or (lambda: settings.default_locale)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or settings.http_timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def request(
        self,
        method: str,
        endpoint: str,
        json: Optional[Any] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body"""
        params = dict(params or {})
        params.setdefault("locale", self.locale_provider())

        logger.debug("API request", method=method, endpoint=endpoint)

        try:
            response = await self._client.request(method, endpoint, json=json, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NetworkFailure(
                f"API Error: {e.response.status_code} {e.response.reason_phrase}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise NetworkFailure(f"API request failed: {e}") from e

        try:
            return response.json()
        except ValueError as e:
            raise NetworkFailure(f"API returned invalid JSON for {endpoint}") from e

    async def get(self, endpoint: str, params: Optional[dict] = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json: Any) -> Any:
        return await self.request("POST", endpoint, json=json)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
