"""Persisted UI language preference"""

from typing import Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError

from mobile_order.config import settings
from mobile_order.errors import PersistenceCorrupt
from mobile_order.events import EventBus
from mobile_order.storage import LANGUAGE_KEY, LocalStore

logger = structlog.get_logger()


class LocalePreference:
    """Current language, sent as the `locale` query parameter on every request"""

    def __init__(
        self,
        store: LocalStore,
        bus: EventBus,
        default: Optional[str] = None,
    ):
        self.store = store
        self.bus = bus
        self.default = default or settings.default_locale
        self._current = self._load()

    def _load(self) -> str:
        try:
            stored = self.store.load(LANGUAGE_KEY)
        except (PersistenceCorrupt, SQLAlchemyError) as e:
            logger.warning("Could not load language preference", error=str(e))
            return self.default

        if isinstance(stored, str) and stored:
            return stored
        return self.default

    def get(self) -> str:
        return self._current

    def set(self, language: str) -> None:
        if language == self._current:
            return

        self._current = language
        try:
            self.store.save(LANGUAGE_KEY, language)
        except SQLAlchemyError as e:
            logger.error("Could not save language preference", language=language, error=str(e))

        logger.info("Language changed", language=language)
        self.bus.locale_changed.emit(language)
