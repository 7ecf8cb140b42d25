"""Test helpers shared across unit and integration tests."""

from datetime import datetime, timedelta, timezone

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "admin123"

# Cheapest bcrypt cost keeps hashing fast in tests
TEST_BCRYPT_ROUNDS = 4


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)
