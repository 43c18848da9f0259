"""Persisted favorite menu items"""

from typing import List

import structlog
from sqlalchemy.exc import SQLAlchemyError

from mobile_order.errors import PersistenceCorrupt
from mobile_order.storage import FAVORITES_KEY, LocalStore

logger = structlog.get_logger()


class FavoritesStore:
    def __init__(self, store: LocalStore):
        self.store = store
        self._favorites = self._load()

    @property
    def favorites(self) -> List[str]:
        return list(self._favorites)

    def is_favorite(self, menu_id: str) -> bool:
        return menu_id in self._favorites

    def add(self, menu_id: str) -> None:
        if menu_id not in self._favorites:
            self._save(self._favorites + [menu_id])

    def remove(self, menu_id: str) -> None:
        self._save([favorite for favorite in self._favorites if favorite != menu_id])

    def toggle(self, menu_id: str) -> None:
        if self.is_favorite(menu_id):
            self.remove(menu_id)
        else:
            self.add(menu_id)

    def _save(self, favorites: List[str]) -> None:
        self._favorites = favorites
        try:
            self.store.save(FAVORITES_KEY, favorites)
        except SQLAlchemyError as e:
            logger.error("Failed to save favorites", error=str(e))

    def _load(self) -> List[str]:
        try:
            stored = self.store.load(FAVORITES_KEY)
        except (PersistenceCorrupt, SQLAlchemyError) as e:
            logger.warning("Failed to load favorites", error=str(e))
            return []

        if not isinstance(stored, list):
            return []
        return [str(favorite) for favorite in stored]
