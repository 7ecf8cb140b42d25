"""
Unit tests for the in-memory session store.
"""

from storefront.api.sessions import SessionStore
from storefront.domain.models import User

from tests.helpers import FakeClock


def make_user() -> User:
    return User(email="a@example.com", password_hash="x", id=7)


class TestSessionStore:
    def test_create_and_get(self, clock: FakeClock) -> None:
        store = SessionStore(3600, clock=clock)

        session_id = store.create(make_user())
        session = store.get(session_id)

        assert session.user_id == 7
        assert session.email == "a@example.com"

    def test_ids_are_unique(self, clock: FakeClock) -> None:
        store = SessionStore(3600, clock=clock)
        assert store.create(make_user()) != store.create(make_user())

    def test_unknown_or_missing_id(self, clock: FakeClock) -> None:
        store = SessionStore(3600, clock=clock)
        assert store.get("nope") is None
        assert store.get(None) is None

    def test_expires_after_max_age(self, clock: FakeClock) -> None:
        store = SessionStore(3600, clock=clock)
        session_id = store.create(make_user())

        clock.advance(seconds=3600)
        assert store.get(session_id) is not None
        clock.advance(seconds=1)
        assert store.get(session_id) is None

    def test_destroy(self, clock: FakeClock) -> None:
        store = SessionStore(3600, clock=clock)
        session_id = store.create(make_user())

        store.destroy(session_id)
        store.destroy(None)

        assert store.get(session_id) is None

    def test_max_age_seconds(self) -> None:
        assert SessionStore(86400).max_age_seconds == 86400
