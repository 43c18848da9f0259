"""Menu fetching"""

import asyncio
from typing import Any, List, Optional

import structlog

from mobile_order.api.client import ApiClient
from mobile_order.api.envelope import unwrap_envelope
from mobile_order.errors import NetworkFailure
from mobile_order.menu.normalizer import (
    apply_category_config,
    normalize_menu,
    normalize_menu_item,
)
from mobile_order.remote_config.gateway import RemoteConfigGateway
from mobile_order.schemas.menu import Menu, MenuItem
from mobile_order.schemas.remote_config import CategoryConfigEntry, MenuCustomizationConfig

logger = structlog.get_logger()


class MenuService:
    """Fetches the menu and applies remote customization and category config"""

    def __init__(self, api: ApiClient, remote_config: RemoteConfigGateway):
        self.api = api
        self.remote_config = remote_config

    async def get_menu(self) -> Menu:
        """The full menu, or an empty one when the backend is unreachable"""
        response, overrides, categories = await asyncio.gather(
            self.api.get("/api/menu"),
            self.remote_config.check_menu_customization_config(),
            self.remote_config.check_menu_category_config(),
            return_exceptions=True,
        )

        if isinstance(response, NetworkFailure):
            logger.error("Failed to fetch menu", error=str(response))
            return Menu()
        if isinstance(response, BaseException):
            raise response

        menu = normalize_menu(unwrap_envelope(response), self._overrides_or_none(overrides))
        return apply_category_config(menu, self._categories_or_empty(categories))

    async def get_menu_item(self, menu_id: str) -> Optional[MenuItem]:
        """A single item, or None when it cannot be fetched"""
        response, overrides = await asyncio.gather(
            self.api.get(f"/api/menu/{menu_id}"),
            self.remote_config.check_menu_customization_config(),
            return_exceptions=True,
        )

        if isinstance(response, NetworkFailure):
            logger.error("Failed to fetch menu item details", menu_id=menu_id, error=str(response))
            return None
        if isinstance(response, BaseException):
            raise response

        return normalize_menu_item(unwrap_envelope(response), self._overrides_or_none(overrides))

    @staticmethod
    def _overrides_or_none(result: Any) -> Optional[MenuCustomizationConfig]:
        if isinstance(result, BaseException):
            logger.warning("Customization config unavailable, using inferred prices", error=str(result))
            return None
        return result

    @staticmethod
    def _categories_or_empty(result: Any) -> List[CategoryConfigEntry]:
        if isinstance(result, BaseException):
            logger.warning("Category config unavailable, showing all categories", error=str(result))
            return []
        return result
