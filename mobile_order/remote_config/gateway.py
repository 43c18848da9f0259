"""Throttled remote config with safe defaults"""

import asyncio
import json
import time
from typing import Any, Callable, Dict, List, Optional

import structlog
from pydantic import ValidationError

from mobile_order.config import settings
from mobile_order.errors import ConfigUnavailable
from mobile_order.remote_config.sources import BaseRemoteConfigSource
from mobile_order.schemas.remote_config import (
    DEFAULT_CLOSE_MESSAGE,
    DEFAULT_CLOSE_TITLE,
    CategoryConfigEntry,
    CustomizationOverride,
    MenuCustomizationConfig,
    MerchantStatus,
)

logger = structlog.get_logger()

# Parameter keys
IS_CLOSE = "is_close"
CLOSE_TITLE = "close_title"
CLOSE_MESSAGE = "close_message"
IS_DISABLE_CHECKOUT = "is_disable_checkout"
MENU_CATEGORY_CONFIG = "menu_category_config"
MENU_CUSTOMIZATION_CONFIG = "menu_customization_config"


class RemoteConfigGateway:
    """
    Remote feature toggles for the storefront.
    Background fetches are skipped while the last successful fetch is younger
    than the minimum interval. Every getter falls back to an open, fully
    enabled storefront when its value is missing or malformed.
    """

    def __init__(
        self,
        source: BaseRemoteConfigSource,
        min_fetch_interval: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.source = source
        self.min_fetch_interval = (
            settings.remote_config_min_fetch_interval_seconds
            if min_fetch_interval is None
            else min_fetch_interval
        )
        self.clock = clock
        self._values: Dict[str, Any] = {}
        self._last_fetch_time: Optional[float] = None
        self._lock = asyncio.Lock()

    async def fetch_config(self) -> None:
        """Fetch and activate unless a fetch succeeded within the interval"""
        async with self._lock:
            now = self.clock()
            if (
                self._last_fetch_time is not None
                and now - self._last_fetch_time < self.min_fetch_interval
            ):
                logger.debug("Remote config fetch skipped - within minimum interval")
                return

            await self._fetch_and_activate(now)

    async def force_fetch_config(self) -> None:
        """Fetch regardless of the interval and restart it"""
        async with self._lock:
            logger.info("Force fetching remote config")
            await self._fetch_and_activate(self.clock())

    async def _fetch_and_activate(self, now: float) -> None:
        try:
            values = await self.source.fetch()
        except ConfigUnavailable as e:
            logger.warning("Failed to fetch remote config, keeping current values", error=str(e))
            return

        self._values = dict(values)
        self._last_fetch_time = now
        logger.info("Remote config fetched and activated", keys=sorted(self._values))

    # Checks (fetch, then read)

    async def check_merchant_status(self) -> MerchantStatus:
        await self.fetch_config()
        return self.get_merchant_status()

    async def check_checkout_status(self) -> bool:
        """True when checkout is disabled"""
        await self.fetch_config()
        return self.get_checkout_disabled()

    async def check_menu_category_config(self) -> List[CategoryConfigEntry]:
        await self.fetch_config()
        return self.get_menu_category_config()

    async def check_menu_customization_config(self) -> Optional[MenuCustomizationConfig]:
        await self.fetch_config()
        return self.get_menu_customization_config()

    # Getters over the active values

    def get_merchant_status(self) -> MerchantStatus:
        return MerchantStatus(
            is_close=_as_bool(self._values.get(IS_CLOSE), default=False),
            close_title=_as_text(self._values.get(CLOSE_TITLE), DEFAULT_CLOSE_TITLE),
            close_message=_as_text(self._values.get(CLOSE_MESSAGE), DEFAULT_CLOSE_MESSAGE),
        )

    def get_checkout_disabled(self) -> bool:
        return _as_bool(self._values.get(IS_DISABLE_CHECKOUT), default=False)

    def get_menu_category_config(self) -> List[CategoryConfigEntry]:
        """Configured categories sorted by `order`, hidden ones included; empty means no restriction"""
        raw = _as_json(self._values.get(MENU_CATEGORY_CONFIG), MENU_CATEGORY_CONFIG)
        if not isinstance(raw, list):
            return []

        entries = []
        for entry in raw:
            try:
                entries.append(CategoryConfigEntry.model_validate(entry))
            except ValidationError:
                logger.warning("Ignoring malformed category config entry", entry=entry)

        return sorted(entries, key=lambda entry: entry.order)

    def get_menu_customization_config(self) -> Optional[MenuCustomizationConfig]:
        raw = _as_json(self._values.get(MENU_CUSTOMIZATION_CONFIG), MENU_CUSTOMIZATION_CONFIG)
        if not isinstance(raw, dict):
            return None

        return MenuCustomizationConfig(
            milk=_overrides(raw.get("milk")),
            size=_overrides(raw.get("size")),
        )


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    return default


def _as_text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value
    return default


def _as_json(value: Any, key: str) -> Any:
    """Decode JSON-encoded string values; already-decoded values pass through"""
    if value is None:
        return None
    if isinstance(value, str):
        if not value.strip():
            return None
        try:
            return json.loads(value)
        except ValueError:
            logger.warning("Remote config value is not valid JSON", key=key)
            return None
    return value


def _overrides(value: Any) -> List[CustomizationOverride]:
    if not isinstance(value, list):
        return []
    return [
        CustomizationOverride.model_validate(entry)
        for entry in value
        if isinstance(entry, dict)
    ]
