"""Cart engine: merge-or-append line items with locked unit prices"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

import structlog
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from mobile_order.config import settings
from mobile_order.errors import PersistenceCorrupt
from mobile_order.events import EventBus
from mobile_order.schemas.cart import CartLineItem, CartState, Customer
from mobile_order.storage import CART_KEY, LocalStore

logger = structlog.get_logger()


class MergePricePolicy(str, Enum):
    """Which unit price a merged line keeps"""
    INCOMING = "incoming"
    EXISTING = "existing"


def _add_on_key(line: CartLineItem) -> List[tuple]:
    return sorted(
        (add_on.id, add_on.name, add_on.price, add_on.enabled)
        for add_on in line.add_ons
    )


def is_same_line(a: CartLineItem, b: CartLineItem) -> bool:
    """Merge identity: same menu item and customizations, add-ons in any order"""
    return (
        a.menu_id == b.menu_id
        and a.size.id == b.size.id
        and a.milk == b.milk
        and a.sweetness == b.sweetness
        and a.temperature == b.temperature
        and _add_on_key(a) == _add_on_key(b)
    )


class CartEngine:
    """
    Cart state with every transition saved to the local store.
    Operations are synchronous and never raise for state reasons.
    """

    def __init__(
        self,
        store: LocalStore,
        bus: EventBus,
        merge_policy: Optional[MergePricePolicy] = None,
    ):
        self.store = store
        self.bus = bus
        self.merge_policy = merge_policy or MergePricePolicy(settings.cart_merge_price_policy)
        self._state = self._load()

    # State access

    @property
    def state(self) -> CartState:
        return self._state.model_copy(deep=True)

    @property
    def items(self) -> List[CartLineItem]:
        return [item.model_copy(deep=True) for item in self._state.items]

    @property
    def customer(self) -> Optional[Customer]:
        return self._state.customer

    @property
    def is_open(self) -> bool:
        return self._state.is_open

    def total_items(self) -> int:
        return sum(item.quantity for item in self._state.items)

    def total_price(self) -> Decimal:
        return sum((item.total_price for item in self._state.items), Decimal("0"))

    # Transitions

    def add_item(self, item: CartLineItem) -> None:
        items = list(self._state.items)

        for index, existing in enumerate(items):
            if not is_same_line(existing, item):
                continue

            quantity = existing.quantity + item.quantity
            if self.merge_policy == MergePricePolicy.INCOMING:
                unit_price = item.unit_price
            else:
                unit_price = existing.unit_price

            items[index] = existing.model_copy(
                update={"quantity": quantity, "total_price": unit_price * quantity}
            )
            logger.debug("Cart line merged", line_id=existing.id, quantity=quantity)
            break
        else:
            items.append(item.model_copy(deep=True))
            logger.debug("Cart line added", line_id=item.id, menu_id=item.menu_id)

        self._commit(self._state.model_copy(update={"items": items}))

    def remove_item(self, line_id: str) -> None:
        items = [item for item in self._state.items if item.id != line_id]
        self._commit(self._state.model_copy(update={"items": items}))

    def set_quantity(self, line_id: str, quantity: int) -> None:
        """Change a line's quantity at its locked unit price; <= 0 removes it"""
        if quantity <= 0:
            self.remove_item(line_id)
            return

        items = [
            item.model_copy(
                update={"quantity": quantity, "total_price": item.unit_price * quantity}
            )
            if item.id == line_id
            else item
            for item in self._state.items
        ]
        self._commit(self._state.model_copy(update={"items": items}))

    def clear(self) -> None:
        self._commit(self._state.model_copy(update={"items": [], "customer": None}))

    def set_customer(self, customer: Customer) -> None:
        """Set checkout details without blanking a table number set out-of-band"""
        current = self._state.customer
        if (
            current is not None
            and current.table_number
            and not (customer.table_number or "").strip()
        ):
            customer = customer.model_copy(update={"table_number": current.table_number})

        self._commit(self._state.model_copy(update={"customer": customer}))

    def set_table_number(self, table_number: str) -> None:
        """Record a scanned or deep-linked table number"""
        table_number = table_number.strip()
        if not table_number:
            return

        customer = self._state.customer or Customer()
        self._commit(
            self._state.model_copy(
                update={"customer": customer.model_copy(update={"table_number": table_number})}
            )
        )

    def toggle_open(self) -> None:
        self._commit(self._state.model_copy(update={"is_open": not self._state.is_open}))

    # Persistence

    def _commit(self, state: CartState) -> None:
        self._state = state
        try:
            self.store.save(CART_KEY, state.model_dump(mode="json"))
        except SQLAlchemyError as e:
            logger.error("Failed to save cart", error=str(e))
        self.bus.cart_changed.emit(self.state)

    def _load(self) -> CartState:
        try:
            stored = self.store.load(CART_KEY)
            if stored is None:
                return CartState()
            state = CartState.model_validate(stored)
        except (PersistenceCorrupt, ValidationError, SQLAlchemyError) as e:
            logger.warning("Ignoring unreadable saved cart", error=str(e))
            return CartState()

        logger.info("Cart restored", line_count=len(state.items))
        return state
