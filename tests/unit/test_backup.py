"""
Unit tests for user-data snapshots.
"""

import json
import logging
import threading
import time
from pathlib import Path
from unittest.mock import patch

import pytest

from storefront.adapters.repository.backup import (
    BackupStorage,
    PeriodicSnapshotter,
    SnapshotWriter,
    redact_user,
)
from storefront.adapters.repository.memory import InMemoryStorage
from storefront.domain.models import Product, User, UserAddress


@pytest.fixture
def inner() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def snapshot_path(tmp_path: Path) -> Path:
    return tmp_path / "backups" / "user.json"


@pytest.fixture
def backed(inner: InMemoryStorage, snapshot_path: Path) -> BackupStorage:
    return BackupStorage(inner, SnapshotWriter(inner, snapshot_path))


def read_snapshot(path: Path) -> dict:
    return json.loads(path.read_text(encoding="utf-8"))


def test_redact_user_drops_credentials() -> None:
    user = User(email="a@example.com", password_hash="secret", reset_token="ABC123")

    redacted = redact_user(user)

    assert "password_hash" not in redacted
    assert "reset_token" not in redacted
    assert "reset_token_expiry" not in redacted
    assert redacted["email"] == "a@example.com"


class TestBackupStorage:
    def test_user_write_produces_snapshot(self, backed: BackupStorage, snapshot_path: Path) -> None:
        backed.create_user(User(email="a@example.com", password_hash="$2b$secret"))

        snapshot = read_snapshot(snapshot_path)
        assert [u["email"] for u in snapshot["users"]] == ["a@example.com"]
        assert "$2b$secret" not in snapshot_path.read_text(encoding="utf-8")
        assert set(snapshot) == {"users", "userPreferences", "userAddresses"}

    def test_address_write_included(self, backed: BackupStorage, snapshot_path: Path) -> None:
        user = backed.create_user(User(email="a@example.com", password_hash="x"))
        backed.create_address(
            UserAddress(
                user_id=user.id,
                address_line1="1 MG Road",
                city="Pune",
                state="MH",
                postal_code="411001",
            )
        )

        snapshot = read_snapshot(snapshot_path)
        assert snapshot["userAddresses"][0][0]["city"] == "Pune"

    def test_product_writes_pass_through_without_snapshot(
        self, backed: BackupStorage, snapshot_path: Path
    ) -> None:
        product = backed.create_product(Product(name="Shirt", price=1, category="Casual Wear"))

        assert backed.get_product(product.id).name == "Shirt"
        assert not snapshot_path.exists()

    def test_snapshot_failure_does_not_fail_write(
        self, backed: BackupStorage, inner: InMemoryStorage, caplog: pytest.LogCaptureFixture
    ) -> None:
        with patch.object(SnapshotWriter, "write", side_effect=OSError("read-only")):
            with caplog.at_level(logging.ERROR):
                user = backed.create_user(User(email="a@example.com", password_hash="x"))

        assert inner.get_user(user.id) is not None
        assert "Error backing up user data" in caplog.text

    def test_inner_exposed(self, backed: BackupStorage, inner: InMemoryStorage) -> None:
        assert backed.inner is inner


class TestPeriodicSnapshotter:
    def test_writes_on_interval_and_stops(
        self, inner: InMemoryStorage, snapshot_path: Path
    ) -> None:
        inner.create_user(User(email="a@example.com", password_hash="x"))
        snapshotter = PeriodicSnapshotter(SnapshotWriter(inner, snapshot_path), interval=0.01)

        snapshotter.start()
        try:
            deadline = time.monotonic() + 5
            while not snapshot_path.exists() and time.monotonic() < deadline:
                time.sleep(0.01)
            assert snapshotter.running
        finally:
            snapshotter.stop()

        assert snapshot_path.exists()
        assert not snapshotter.running

    def test_stop_without_start(self, inner: InMemoryStorage, snapshot_path: Path) -> None:
        snapshotter = PeriodicSnapshotter(SnapshotWriter(inner, snapshot_path), interval=60)
        snapshotter.stop()
        assert not snapshotter.running


class StallingStorage(InMemoryStorage):
    """Blocks the first preferences read until released."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = threading.Event()
        self.release = threading.Event()
        self._stalled = False

    def get_preferences(self, user_id: int):
        if not self._stalled:
            self._stalled = True
            self.entered.set()
            self.release.wait(5)
        return super().get_preferences(user_id)


class TestConcurrentSnapshots:
    def test_slow_snapshot_does_not_overwrite_newer_one(self, snapshot_path: Path) -> None:
        """A snapshot started earlier never replaces one that includes later writes."""
        inner = StallingStorage()
        first = inner.create_user(User(email="a@example.com", password_hash="x"))
        backed = BackupStorage(inner, SnapshotWriter(inner, snapshot_path))

        slow = threading.Thread(
            target=backed.update_user, args=(first.id,), kwargs={"display_name": "A"}
        )
        slow.start()
        assert inner.entered.wait(5)

        fast = threading.Thread(
            target=backed.create_user, args=(User(email="b@example.com", password_hash="x"),)
        )
        fast.start()
        time.sleep(0.2)
        inner.release.set()
        slow.join(5)
        fast.join(5)

        emails = [u["email"] for u in read_snapshot(snapshot_path)["users"]]
        assert emails == ["a@example.com", "b@example.com"]
