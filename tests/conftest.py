"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- A controllable clock for expiry tests
- In-memory storage and console notification wiring
- Application / test client setup with injected storage
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from storefront.adapters.repository.memory import InMemoryStorage
from storefront.adapters.repository.seed import seed_storage
from storefront.adapters.smtp.console import ConsoleEmailSender
from storefront.api.main import create_app
from storefront.config.settings import Settings
from storefront.domain.models import Product
from storefront.domain.notifications import NotificationService
from tests.helpers import ADMIN_EMAIL, ADMIN_PASSWORD, TEST_BCRYPT_ROUNDS, FakeClock


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage() -> InMemoryStorage:
    """Empty in-memory storage."""
    return InMemoryStorage()


@pytest.fixture
def notifier() -> NotificationService:
    return NotificationService(email_sender=ConsoleEmailSender())


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        storage_backend="memory",
        snapshot_enabled=False,
        snapshot_path=str(tmp_path / "user.json"),
        seed_sample_data=False,
        bcrypt_cost=TEST_BCRYPT_ROUNDS,
        email_backend="console",
        sms_enabled=False,
    )


@pytest.fixture
def app_storage() -> InMemoryStorage:
    """Storage seeded with an admin and two products, shared with the app."""
    storage = InMemoryStorage()
    seed_storage(storage, ADMIN_EMAIL, ADMIN_PASSWORD, bcrypt_rounds=TEST_BCRYPT_ROUNDS)
    storage.create_product(
        Product(name="Linen Trousers", price=1999, category="Casual Wear", stock=3, min_stock=5)
    )
    return storage


@pytest.fixture
def app(test_settings: Settings, app_storage: InMemoryStorage) -> FastAPI:
    return create_app(settings=test_settings, storage=app_storage)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_client(client: TestClient) -> TestClient:
    """Client logged in as the seeded administrator."""
    response = client.post(
        "/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert response.status_code == 200
    return client
