"""Durable key/value storage for client-side state"""

import json
from typing import Any, Optional

import structlog
from sqlalchemy.orm import sessionmaker

from mobile_order.errors import PersistenceCorrupt
from mobile_order.models.local_state import LocalState

logger = structlog.get_logger()

# Storage keys
CART_KEY = "cart"
ANONYMOUS_USER_ID_KEY = "anonymous_user_id"
ORDER_HISTORY_KEY = "order_history"
LANGUAGE_KEY = "language"
FAVORITES_KEY = "favorites"


class LocalStore:
    """
    JSON values stored under independent keys.
    Each save replaces the whole value for its key in its own transaction,
    so writers sharing the store never see a partial value.
    SQLAlchemy errors propagate; callers decide how to degrade.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def load(self, key: str) -> Optional[Any]:
        """Return the decoded value, None if absent, PersistenceCorrupt if undecodable"""
        with self.session_factory() as session:
            entry = session.get(LocalState, key)
            if entry is None:
                return None
            raw = entry.value

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            raise PersistenceCorrupt(f"Stored value for {key!r} is not valid JSON") from e

    def save(self, key: str, value: Any) -> None:
        encoded = json.dumps(value)
        with self.session_factory() as session:
            entry = session.get(LocalState, key)
            if entry is None:
                session.add(LocalState(key=key, value=encoded))
            else:
                entry.value = encoded
            session.commit()

        logger.debug("Local state saved", key=key, size=len(encoded))

    def remove(self, key: str) -> None:
        with self.session_factory() as session:
            entry = session.get(LocalState, key)
            if entry is not None:
                session.delete(entry)
                session.commit()
