"""Anonymous customer identity"""

import time
import uuid
from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from mobile_order.errors import PersistenceCorrupt
from mobile_order.storage import ANONYMOUS_USER_ID_KEY, LocalStore

logger = structlog.get_logger()


class IdentityStore:
    """
    Generates and persists an anonymous customer id.
    If storage is unavailable a timestamp-based id is used for this session
    only, so the id may change between sessions.
    """

    def __init__(self, store: LocalStore):
        self.store = store
        self._session_fallback: Optional[str] = None

    def get_or_create_customer_id(self) -> str:
        if self._session_fallback:
            return self._session_fallback

        try:
            stored = self._load()
            if stored:
                return stored

            customer_id = str(uuid.uuid4())
            self.store.save(ANONYMOUS_USER_ID_KEY, customer_id)
            logger.info("Generated anonymous customer id", customer_id=customer_id)
            return customer_id

        except SQLAlchemyError as e:
            self._session_fallback = f"anon_{int(time.time() * 1000)}"
            logger.warning(
                "Identity storage unavailable, using session-only id",
                customer_id=self._session_fallback,
                error=str(e),
            )
            return self._session_fallback

    def _load(self) -> Optional[str]:
        try:
            stored = self.store.load(ANONYMOUS_USER_ID_KEY)
        except PersistenceCorrupt:
            logger.warning("Stored customer id is corrupt, generating a new one")
            return None

        if isinstance(stored, str) and stored.strip():
            return stored
        return None
