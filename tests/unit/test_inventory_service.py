"""
Unit tests for InventoryService.

Covers stock clamping, ledger entries written alongside stock changes,
low-stock selection and the rollback when a ledger append fails.
"""

from unittest.mock import patch

import pytest

from storefront.adapters.repository.memory import InMemoryStorage
from storefront.domain.exceptions import NotFoundError, ValidationError
from storefront.domain.inventory import InventoryService, clamp_stock, default_note
from storefront.domain.models import LogType, Product

from tests.helpers import FakeClock


@pytest.fixture
def storage(clock: FakeClock) -> InMemoryStorage:
    return InMemoryStorage(clock=clock)


@pytest.fixture
def service(storage: InMemoryStorage) -> InventoryService:
    return InventoryService(storage)


def add_product(
    storage: InMemoryStorage, stock: int, min_stock: int | None = 5, name: str = "Shirt"
) -> Product:
    return storage.create_product(
        Product(name=name, price=1000, category="Casual Wear", stock=stock, min_stock=min_stock)
    )


class TestClampStock:
    def test_positive_delta(self) -> None:
        assert clamp_stock(10, 5) == 15

    def test_floors_at_zero(self) -> None:
        assert clamp_stock(10, -1000) == 0

    def test_exact_removal(self) -> None:
        assert clamp_stock(3, -3) == 0


class TestAdjustStock:
    def test_add_increases_stock_and_logs(self, service, storage) -> None:
        product = add_product(storage, stock=10)

        updated = service.adjust_stock(product.id, 5)

        assert updated.stock == 15
        [log] = storage.list_inventory_logs(product.id)
        assert log.quantity == 5
        assert log.type == LogType.ADD
        assert log.note == "Stock updated by adding 5 units"

    def test_remove_tags_entry_as_remove(self, service, storage) -> None:
        product = add_product(storage, stock=10)

        updated = service.adjust_stock(product.id, -4, note="Damaged in transit")

        assert updated.stock == 6
        [log] = storage.list_inventory_logs(product.id)
        assert log.type == LogType.REMOVE
        assert log.note == "Damaged in transit"

    def test_over_removal_clamps_but_logs_requested_delta(self, service, storage) -> None:
        """Stock empties; the ledger keeps the full requested delta."""
        product = add_product(storage, stock=10)

        updated = service.adjust_stock(product.id, -1000)

        assert updated.stock == 0
        [log] = storage.list_inventory_logs(product.id)
        assert log.quantity == -1000
        assert log.note == "Stock updated by removing 1000 units"

    def test_zero_delta_rejected(self, service, storage) -> None:
        product = add_product(storage, stock=10)

        with pytest.raises(ValidationError):
            service.adjust_stock(product.id, 0)

        assert storage.list_inventory_logs() == []

    @pytest.mark.parametrize("delta", ["5", 2.5, True, None])
    def test_non_integer_delta_rejected(self, service, storage, delta) -> None:
        product = add_product(storage, stock=10)

        with pytest.raises(ValidationError):
            service.adjust_stock(product.id, delta)

    def test_unknown_product(self, service) -> None:
        with pytest.raises(NotFoundError):
            service.adjust_stock(999, 1)

    def test_ledger_failure_restores_stock(self, service, storage) -> None:
        product = add_product(storage, stock=10)

        with patch.object(storage, "append_inventory_log", side_effect=RuntimeError("disk full")):
            with pytest.raises(RuntimeError):
                service.adjust_stock(product.id, -3)

        assert storage.get_product(product.id).stock == 10
        assert storage.list_inventory_logs() == []

    def test_default_note_wording(self) -> None:
        assert default_note(1) == "Stock updated by adding 1 units"
        assert default_note(-7) == "Stock updated by removing 7 units"


class TestRecordLog:
    def test_manual_entry_leaves_stock_alone(self, service, storage) -> None:
        product = add_product(storage, stock=10)

        entry = service.record_log(product.id, 3, LogType.ADJUST, "Recount")

        assert entry.id > 0
        assert entry.type == LogType.ADJUST
        assert entry.timestamp is not None
        assert storage.get_product(product.id).stock == 10

    def test_accepts_raw_type_value(self, service, storage) -> None:
        product = add_product(storage, stock=10)

        entry = service.record_log(product.id, 1, "add")

        assert entry.type == LogType.ADD

    def test_unknown_product(self, service) -> None:
        with pytest.raises(NotFoundError):
            service.record_log(42, 1, LogType.ADD)


class TestLowStock:
    def test_uses_each_products_min_stock(self, service, storage) -> None:
        add_product(storage, stock=10, min_stock=5, name="Plenty")
        at_limit = add_product(storage, stock=5, min_stock=5, name="At limit")
        below = add_product(storage, stock=2, min_stock=5, name="Below")

        low = service.get_low_stock_products()

        assert [p.id for p in low] == [below.id, at_limit.id]

    def test_missing_min_stock_falls_back_to_default(self, service, storage) -> None:
        product = add_product(storage, stock=4, min_stock=None)

        assert [p.id for p in service.get_low_stock_products()] == [product.id]

    def test_explicit_threshold_overrides(self, service, storage) -> None:
        add_product(storage, stock=10, min_stock=5, name="Ten")
        twenty = add_product(storage, stock=20, min_stock=5, name="Twenty")
        ten = storage.list_products()[0]

        low = service.get_low_stock_products(threshold=20)

        assert [p.id for p in low] == [ten.id, twenty.id]

    def test_zero_threshold_is_honoured(self, service, storage) -> None:
        add_product(storage, stock=3, min_stock=5, name="Three")
        empty = add_product(storage, stock=0, min_stock=5, name="Empty")

        assert [p.id for p in service.get_low_stock_products(threshold=0)] == [empty.id]


class TestGetLogs:
    def test_newest_first(self, service, storage, clock) -> None:
        product = add_product(storage, stock=10)
        service.adjust_stock(product.id, 1)
        clock.advance(minutes=1)
        service.adjust_stock(product.id, 2)

        logs = service.get_logs()

        assert [log.quantity for log in logs] == [2, 1]

    def test_filtered_by_product(self, service, storage) -> None:
        first = add_product(storage, stock=10, name="First")
        second = add_product(storage, stock=10, name="Second")
        service.adjust_stock(first.id, 1)
        service.adjust_stock(second.id, 2)

        logs = service.get_logs(second.id)

        assert [log.product_id for log in logs] == [second.id]
