"""Typed observables shared through a single event bus"""

from typing import Callable, Generic, List, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")

Listener = Callable[[T], None]


class Observable(Generic[T]):
    """A list of listeners for one kind of event"""

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, value: T) -> None:
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("Event listener failed", observable=self.name)

    def __len__(self) -> int:
        return len(self._listeners)


class EventBus:
    """
    Root-scoped set of observables.
    One instance is created by the composition root and handed to every
    component that publishes or listens.
    """

    def __init__(self):
        # Payload types: CartState, List[Order], str
        self.cart_changed: Observable = Observable("cart_changed")
        self.orders_changed: Observable = Observable("orders_changed")
        self.locale_changed: Observable = Observable("locale_changed")
