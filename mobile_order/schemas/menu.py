"""Menu schemas"""

import re
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


def slugify(value: str) -> str:
    """Stable id for an option or image: lowercased, whitespace runs become hyphens"""
    return re.sub(r"\s+", "-", value.strip().lower())


class SizeOption(BaseModel):
    """Cup size with an upcharge over the base price"""
    id: str
    name: str
    price_modifier: Decimal = Field(default=Decimal("0"), ge=0)
    enabled: bool = True


class MilkOption(BaseModel):
    """Milk choice with its own price"""
    id: str
    name: str
    price: Decimal = Field(default=Decimal("0"), ge=0)
    enabled: bool = True


class AddOn(BaseModel):
    """Extra topping or syrup"""
    id: str
    name: str
    price: Decimal = Field(default=Decimal("0"), ge=0)
    enabled: bool = True


class MenuCategory(BaseModel):
    """Category derived from the menu payload"""
    id: str
    name: str
    description: Optional[str] = None


class MenuItem(BaseModel):
    """Canonical menu item"""
    id: str
    name: str
    description: str = ""
    image_ref: str = ""
    category: str = "specialty"
    base_price: Decimal = Field(default=Decimal("0"), ge=0)
    sizes: List[SizeOption] = []
    milk_options: List[MilkOption] = []
    sweetness_levels: List[str] = []
    temperature_options: List[str] = []
    add_ons: List[AddOn] = []
    is_popular: bool = False

    @property
    def is_available(self) -> bool:
        """Items without any size cannot be checked out"""
        return len(self.sizes) > 0


class Menu(BaseModel):
    """Normalized menu: derived categories plus a flat item list"""
    categories: List[MenuCategory] = []
    items: List[MenuItem] = []

    def items_in_category(self, category_id: str) -> List[MenuItem]:
        return [item for item in self.items if item.category == category_id]
