"""Conversion of backend menu payloads into the canonical Menu model"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import structlog
from pydantic import ValidationError

from mobile_order.menu.pricing import (
    ADD_ON_PRICE,
    DEFAULT_BASE_PRICE,
    infer_milk_price,
    infer_size_price_modifier,
    parse_price,
)
from mobile_order.menu.tokens import apply_overrides
from mobile_order.schemas.menu import (
    AddOn,
    Menu,
    MenuCategory,
    MenuItem,
    MilkOption,
    SizeOption,
    slugify,
)
from mobile_order.schemas.remote_config import CategoryConfigEntry, MenuCustomizationConfig

logger = structlog.get_logger()

DEFAULT_CATEGORY = "specialty"
DEFAULT_TEMPERATURES = ["Iced"]

FALLBACK_ADD_ONS = [
    AddOn(id="extra-shot", name="Extra Shot", price=Decimal("15.0")),
    AddOn(id="whipped-cream", name="Whipped Cream", price=Decimal("15.0")),
    AddOn(id="extra-syrup", name="Extra Syrup", price=Decimal("0.0")),
]


def normalize_menu(
    raw_categories: Any,
    overrides: Optional[MenuCustomizationConfig] = None,
) -> Menu:
    """
    Flatten `[{category, items: [...]}, ...]` into a flat item list plus one
    category per distinct name, in first-seen order.
    """
    if not isinstance(raw_categories, list):
        logger.warning("Unexpected menu payload shape", payload_type=type(raw_categories).__name__)
        return Menu()

    items: List[MenuItem] = []
    categories: Dict[str, MenuCategory] = {}

    for raw_category in raw_categories:
        if not isinstance(raw_category, dict):
            continue

        category_name = raw_category.get("category")
        if isinstance(category_name, str) and category_name:
            category_id = category_name.lower()
            if category_id not in categories:
                categories[category_id] = MenuCategory(
                    id=category_id,
                    name=category_name,
                    description=f"Premium {category_id} selections",
                )

        raw_items = raw_category.get("items")
        if not isinstance(raw_items, list):
            continue

        for raw_item in raw_items:
            item = normalize_menu_item(raw_item, overrides, category=category_name)
            if item is not None:
                items.append(item)

    return Menu(categories=list(categories.values()), items=items)


def normalize_menu_item(
    raw: Any,
    overrides: Optional[MenuCustomizationConfig] = None,
    category: Optional[str] = None,
) -> Optional[MenuItem]:
    """Normalize one backend item; None when it carries no id"""
    if not isinstance(raw, dict) or raw.get("id") is None:
        return None

    name = _text(raw.get("name"))
    customizations = _lowercase_keys(raw.get("customizations"))

    sizes = [
        SizeOption(
            id=slugify(size_name),
            name=size_name.strip(),
            price_modifier=infer_size_price_modifier(size_name, index),
        )
        for index, size_name in enumerate(_first_list(customizations, "sizes", "size"))
    ]

    milk_options = [
        MilkOption(
            id=slugify(milk_name),
            name=milk_name.strip(),
            price=infer_milk_price(milk_name),
        )
        for milk_name in _first_list(customizations, "milk")
    ]

    add_ons = [
        AddOn(id=slugify(extra), name=extra.strip(), price=ADD_ON_PRICE)
        for extra in _first_list(customizations, "extras", "syrups")
    ]

    if overrides is not None:
        sizes = apply_overrides(sizes, overrides.size, "price_modifier")
        milk_options = apply_overrides(milk_options, overrides.milk, "price")

    category_name = category or raw.get("category")
    if not isinstance(category_name, str) or not category_name:
        category_name = DEFAULT_CATEGORY

    try:
        return MenuItem(
            id=str(raw["id"]),
            name=name,
            description=_text(raw.get("description")) or f"Delicious {name}",
            image_ref=_text(raw.get("image_url")) or f"/images/{slugify(name)}.svg",
            category=category_name.lower(),
            base_price=parse_price(raw.get("base_price"), DEFAULT_BASE_PRICE),
            sizes=sizes,
            milk_options=milk_options,
            sweetness_levels=_first_list(customizations, "sweetness", "sweet"),
            temperature_options=list(DEFAULT_TEMPERATURES),
            add_ons=add_ons or [add_on.model_copy() for add_on in FALLBACK_ADD_ONS],
            is_popular=bool(raw.get("popular", False)),
        )
    except ValidationError as e:
        logger.warning("Skipping malformed menu item", menu_id=raw.get("id"), error=str(e))
        return None


def apply_category_config(menu: Menu, entries: Sequence[CategoryConfigEntry]) -> Menu:
    """
    Restrict and order categories by config.
    An empty config means every category is shown unfiltered.
    """
    if not entries:
        return menu

    by_key = {}
    for category in menu.categories:
        by_key.setdefault(category.id.lower(), category)
        by_key.setdefault(category.name.lower(), category)

    visible: List[MenuCategory] = []
    for entry in sorted(entries, key=lambda entry: entry.order):
        if not entry.is_show:
            continue
        category = by_key.get(entry.type.lower())
        if category is not None and category not in visible:
            visible.append(category)

    visible_ids = {category.id for category in visible}
    return Menu(
        categories=visible,
        items=[item for item in menu.items if item.category in visible_ids],
    )


def _text(value: Any) -> str:
    """Scalar backend value as stripped text, empty for anything else"""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return ""
    return str(value).strip()


def _lowercase_keys(customizations: Any) -> Dict[str, Any]:
    if not isinstance(customizations, dict):
        return {}
    return {str(key).lower(): value for key, value in customizations.items()}


def _first_list(customizations: Dict[str, Any], *keys: str) -> List[str]:
    """First key holding a list, as strings; missing or malformed -> []"""
    for key in keys:
        value = customizations.get(key)
        if isinstance(value, list):
            return [str(entry) for entry in value if isinstance(entry, (str, int, float))]
    return []
