"""Remote config schemas"""

from typing import Any, List

from pydantic import BaseModel

DEFAULT_CLOSE_TITLE = "Store Temporarily Closed"
DEFAULT_CLOSE_MESSAGE = "Sorry, we are temporarily closed. Please try again later."


class MerchantStatus(BaseModel):
    """Open/closed flag with the text shown while closed"""
    is_close: bool = False
    close_title: str = DEFAULT_CLOSE_TITLE
    close_message: str = DEFAULT_CLOSE_MESSAGE


class CategoryConfigEntry(BaseModel):
    """Visibility and position of one menu category"""
    type: str
    is_show: bool = True
    order: int = 0


class CustomizationOverride(BaseModel):
    """
    Price/enable override for one upstream option.
    `type` is matched against option names by token, not by equality.
    `price` stays raw so non-numeric values can be ignored at apply time.
    """
    type: Any = None
    price: Any = None
    enable: Any = True


class MenuCustomizationConfig(BaseModel):
    milk: List[CustomizationOverride] = []
    size: List[CustomizationOverride] = []
