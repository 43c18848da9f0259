"""Menu normalization and fetching"""

from mobile_order.menu.normalizer import (
    apply_category_config,
    normalize_menu,
    normalize_menu_item,
)
from mobile_order.menu.service import MenuService
from mobile_order.menu.tokens import apply_overrides, customization_tokens

__all__ = [
    "apply_category_config",
    "normalize_menu",
    "normalize_menu_item",
    "MenuService",
    "apply_overrides",
    "customization_tokens",
]
