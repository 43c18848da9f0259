"""Tests for identity, language, favorites and the event bus"""

import pytest
from sqlalchemy.exc import OperationalError

from mobile_order.errors import PersistenceCorrupt
from mobile_order.events import EventBus, Observable
from mobile_order.favorites import FavoritesStore
from mobile_order.identity import IdentityStore
from mobile_order.language import LocalePreference
from mobile_order.models.local_state import LocalState
from mobile_order.storage import ANONYMOUS_USER_ID_KEY, LANGUAGE_KEY, LocalStore


class UnavailableStore(LocalStore):
    """Store whose database cannot be reached"""

    def __init__(self):
        pass

    def load(self, key):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    def save(self, key, value):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))


def test_customer_id_is_generated_once(store):
    """Test that the id is stable across calls and instances"""
    identity = IdentityStore(store)
    customer_id = identity.get_or_create_customer_id()

    assert len(customer_id) == 36
    assert customer_id[14] == "4"
    assert identity.get_or_create_customer_id() == customer_id
    assert IdentityStore(store).get_or_create_customer_id() == customer_id


def test_customer_id_falls_back_without_storage():
    """Test a session-only id when persistence is unavailable"""
    identity = IdentityStore(UnavailableStore())

    customer_id = identity.get_or_create_customer_id()

    assert customer_id.startswith("anon_")
    assert identity.get_or_create_customer_id() == customer_id


def test_corrupt_customer_id_is_replaced(store, session_factory):
    with session_factory() as session:
        session.add(LocalState(key=ANONYMOUS_USER_ID_KEY, value="not json"))
        session.commit()

    customer_id = IdentityStore(store).get_or_create_customer_id()

    assert len(customer_id) == 36
    assert store.load(ANONYMOUS_USER_ID_KEY) == customer_id


def test_store_replaces_whole_values(store):
    store.save("key", {"a": 1, "b": 2})
    store.save("key", {"c": 3})

    assert store.load("key") == {"c": 3}

    store.remove("key")
    assert store.load("key") is None


def test_store_reports_corrupt_values(store, session_factory):
    with session_factory() as session:
        session.add(LocalState(key="broken", value="{"))
        session.commit()

    with pytest.raises(PersistenceCorrupt):
        store.load("broken")


def test_language_preference_persists_and_publishes(store, bus):
    """Test language changes are saved and broadcast"""
    seen = []
    bus.locale_changed.subscribe(seen.append)

    language = LocalePreference(store, bus, default="th")
    assert language.get() == "th"

    language.set("en")
    language.set("en")

    assert seen == ["en"]
    assert store.load(LANGUAGE_KEY) == "en"
    assert LocalePreference(store, EventBus()).get() == "en"


def test_favorites_toggle_and_persist(store):
    favorites = FavoritesStore(store)

    favorites.toggle("1")
    favorites.add("2")
    favorites.add("2")
    favorites.toggle("1")

    assert favorites.favorites == ["2"]
    assert FavoritesStore(store).is_favorite("2")


def test_observable_unsubscribe_and_failing_listener():
    """Test listeners can unsubscribe and one failure does not stop others"""
    observable = Observable("test")
    seen = []

    def broken(value):
        raise ValueError("listener bug")

    observable.subscribe(broken)
    unsubscribe = observable.subscribe(seen.append)

    observable.emit(1)
    unsubscribe()
    observable.emit(2)

    assert seen == [1]
    assert len(observable) == 1
