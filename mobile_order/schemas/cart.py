"""Cart schemas"""

from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from mobile_order.schemas.menu import AddOn, MenuItem, MilkOption, SizeOption


def new_line_item_id() -> str:
    """Session-unique cart line id"""
    return f"cart-{uuid4().hex[:12]}"


def compute_unit_price(
    base_price: Decimal,
    size: SizeOption,
    milk: MilkOption,
    add_ons: List[AddOn],
) -> Decimal:
    """Unit price of a customized item at the moment it is selected"""
    return base_price + size.price_modifier + milk.price + sum(
        (add_on.price for add_on in add_ons), Decimal("0")
    )


class Customer(BaseModel):
    """Customer details collected at checkout"""
    name: str = ""
    phone: str = ""
    table_number: Optional[str] = None
    notes: Optional[str] = None


class CartLineItem(BaseModel):
    """One customized, quantity-bearing entry in the cart"""
    id: str = Field(default_factory=new_line_item_id)
    menu_id: str
    menu_name: str
    image_ref: str = ""
    size: SizeOption
    milk: MilkOption
    sweetness: str = ""
    temperature: str = ""
    add_ons: List[AddOn] = []
    quantity: int = Field(default=1, ge=1)
    total_price: Decimal = Field(ge=0)

    @property
    def unit_price(self) -> Decimal:
        """Unit price implied by the locked total"""
        return self.total_price / self.quantity

    @classmethod
    def from_selection(
        cls,
        item: MenuItem,
        size: SizeOption,
        milk: MilkOption,
        sweetness: str = "",
        temperature: str = "",
        add_ons: Optional[List[AddOn]] = None,
        quantity: int = 1,
    ) -> "CartLineItem":
        """Build a line item from a menu item and the chosen options"""
        add_ons = list(add_ons or [])
        unit_price = compute_unit_price(item.base_price, size, milk, add_ons)
        return cls(
            menu_id=item.id,
            menu_name=item.name,
            image_ref=item.image_ref,
            size=size,
            milk=milk,
            sweetness=sweetness,
            temperature=temperature,
            add_ons=add_ons,
            quantity=quantity,
            total_price=unit_price * quantity,
        )


class CartState(BaseModel):
    """Whole cart state as persisted"""
    items: List[CartLineItem] = []
    customer: Optional[Customer] = None
    is_open: bool = False
