import pytest
from catalogue.product.cached import ALL_PRODUCTS_KEY, category_key, is_fence, product_key
from inventory.operation.log import OperationLog
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.deadline import Deadline
from shared.errors import NotEnoughStockError, OperationCancelled


class TestRecordMovement:
    def test_incoming_increases_stock_and_logs(self, movements, ledger, database, make_product):
        product = make_product(quantity=2)

        updated, operation = movements.record(product.product_id, 8, "incoming")

        assert updated.quantity == 10
        assert ledger.get_by_id(product.product_id).quantity == 10
        assert operation.change == 8
        assert [op.operation_id for op in OperationLog(database).get_by_product_id(product.product_id)] == [
            operation.operation_id
        ]

    def test_reserve_decreases_stock(self, movements, make_product):
        product = make_product(quantity=5)
        updated, _ = movements.record(product.product_id, -2, "reserve")
        assert updated.quantity == 3

    def test_wrong_direction_rejected_before_storage(self, movements, ledger, make_product):
        product = make_product(quantity=5)
        with pytest.raises(ValidationError):
            movements.record(product.product_id, 3, "outgoing")
        assert ledger.get_by_id(product.product_id).quantity == 5

    def test_insufficient_stock_leaves_no_trace(self, movements, ledger, database, make_product):
        product = make_product(quantity=1)

        with pytest.raises(NotEnoughStockError):
            movements.record(product.product_id, -2, "adjustment")

        assert ledger.get_by_id(product.product_id).quantity == 1
        assert OperationLog(database).get_by_product_id(product.product_id) == []

    def test_missing_product(self, movements):
        with pytest.raises(ObjectNotFoundError):
            movements.record(404, 1, "incoming")

    def test_missing_order_rolls_back_the_delta(self, movements, ledger, make_product):
        product = make_product(quantity=4)

        with pytest.raises(ValidationError):
            movements.record(product.product_id, -1, "outgoing", order_id=55)

        assert ledger.get_by_id(product.product_id).quantity == 4

    def test_cancelled_deadline_applies_nothing(self, movements, ledger, make_product):
        product = make_product(quantity=4)
        deadline = Deadline()
        deadline.cancel()

        with pytest.raises(OperationCancelled):
            movements.record(product.product_id, 1, "incoming", deadline=deadline)

        assert ledger.get_by_id(product.product_id).quantity == 4

    def test_cache_entries_are_evicted(self, movements, products, cache, make_product):
        product = make_product(quantity=4, category="tools")
        products.get_by_id(product.product_id)
        products.get_all()
        products.get_by_category("tools")

        movements.record(product.product_id, 6, "incoming")

        for key in (product_key(product.product_id), ALL_PRODUCTS_KEY, category_key("tools")):
            assert is_fence(cache.get(key))
        assert products.get_by_id(product.product_id).quantity == 10
