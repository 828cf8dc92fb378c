"""Read-through and write-invalidate behaviour of the cached product repository."""

from decimal import Decimal

import pytest
from catalogue.product.cached import ALL_PRODUCTS_KEY, NOT_FOUND, category_key, is_fence, product_key
from catalogue.product.product import Product
from protean.exceptions import ObjectNotFoundError, ValidationError


def _replacement(product, **changes):
    values = product.model_dump()
    values.update(changes)
    return Product(**values)


class TestReadThrough:
    def test_miss_populates_single_product_key(self, products, cache, make_product):
        created = make_product()

        products.get_by_id(created.product_id)

        assert product_key(created.product_id) in cache.keys()

    def test_hit_is_served_from_cache(self, products, ledger, cache, make_product):
        created = make_product(name="Cached")
        products.get_by_id(created.product_id)

        # bypass the cache so only a cache hit can still return the old name
        ledger.update(_replacement(created, name="Changed underneath"))

        assert products.get_by_id(created.product_id).name == "Cached"

    def test_lists_are_cached(self, products, cache, make_product):
        make_product(category="books")

        products.get_all()
        products.get_by_category("books")

        assert ALL_PRODUCTS_KEY in cache.keys()
        assert category_key("books") in cache.keys()

    def test_cached_list_round_trips(self, products, make_product):
        created = make_product(price="12.34", category="books")

        first = products.get_by_category("books")
        second = products.get_by_category("books")

        assert first == second
        assert second[0].product_id == created.product_id
        assert second[0].price == Decimal("12.34")

    def test_undecodable_entry_falls_through(self, products, cache, make_product):
        created = make_product(name="Real")
        cache.set(product_key(created.product_id), b"{not json", 60)

        assert products.get_by_id(created.product_id).name == "Real"

    def test_invalid_id_never_reaches_cache(self, products, cache):
        with pytest.raises(ValidationError):
            products.get_by_id(0)
        assert cache.calls == []


class TestNotFoundSentinel:
    def test_missing_product_caches_sentinel(self, products, cache):
        with pytest.raises(ObjectNotFoundError):
            products.get_by_id(77)

        assert cache.get(product_key(77)) == NOT_FOUND

    def test_sentinel_is_served_until_it_expires(self, products, ledger, cache, make_product):
        p = make_product()
        cache.set(product_key(p.product_id), NOT_FOUND, 60)

        with pytest.raises(ObjectNotFoundError):
            products.get_by_id(p.product_id)
        assert ledger.get_by_id(p.product_id).product_id == p.product_id

    def test_create_clears_sentinel_for_new_id(self, products, cache):
        with pytest.raises(ObjectNotFoundError):
            products.get_by_id(1)

        created = products.create(Product(name="Late", price=Decimal("1"), quantity=1))

        assert created.product_id == 1
        assert products.get_by_id(1).name == "Late"


class TestWriteInvalidation:
    def test_create_invalidates_list_and_category(self, products, cache, make_product):
        make_product(category="books")
        products.get_all()
        products.get_by_category("books")

        products.create(Product(name="New", price=Decimal("5"), quantity=1, category="books"))

        assert is_fence(cache.get(ALL_PRODUCTS_KEY))
        assert is_fence(cache.get(category_key("books")))
        assert len(products.get_by_category("books")) == 2

    def test_category_change_invalidates_old_and_new_lists(self, products, cache, make_product):
        p = make_product(name="Moving", category="A")
        make_product(name="Stays", category="B")
        for read in (
            lambda: products.get_by_id(p.product_id),
            products.get_all,
            lambda: products.get_by_category("A"),
            lambda: products.get_by_category("B"),
        ):
            read()

        products.update(_replacement(p, category="B"))

        assert products.get_by_id(p.product_id).category == "B"
        assert [x.category for x in products.get_all() if x.product_id == p.product_id] == ["B"]
        assert products.get_by_category("A") == []
        assert p.product_id in [x.product_id for x in products.get_by_category("B")]

    def test_writes_delete_before_and_fence_after(self, products, cache, make_product):
        p = make_product(category="A")
        cache.calls.clear()

        products.update(_replacement(p, name="Renamed"))

        assert [op for op, key in cache.calls if key == product_key(p.product_id)] == ["DEL", "SET"]
        assert is_fence(cache.get(product_key(p.product_id)))

    def test_delete_invalidates(self, products, cache, make_product):
        p = make_product(category="A")
        products.get_by_id(p.product_id)
        products.get_by_category("A")

        products.delete(p.product_id)

        assert is_fence(cache.get(product_key(p.product_id)))
        assert is_fence(cache.get(category_key("A")))
        with pytest.raises(ObjectNotFoundError):
            products.get_by_id(p.product_id)

    def test_update_quantity_invalidates(self, products, make_product):
        p = make_product(quantity=5, category="A")
        products.get_by_id(p.product_id)
        products.get_by_category("A")

        products.update_quantity(p.product_id, -2)

        assert products.get_by_id(p.product_id).quantity == 3
        assert products.get_by_category("A")[0].quantity == 3

    def test_failed_update_still_drops_single_product_key(self, products, cache, make_product):
        p = make_product(quantity=1)
        products.get_by_id(p.product_id)

        with pytest.raises(ValidationError):
            products.update(_replacement(p, price=Decimal("0")))

        assert is_fence(cache.get(product_key(p.product_id)))

    def test_failed_pre_read_drops_single_product_key(self, products, cache):
        cache.set(product_key(9), b'{"product_id": 9, "name": "stale", "price": "1", "quantity": 1}', 60)

        with pytest.raises(ObjectNotFoundError):
            products.update_quantity(9, 1)

        assert product_key(9) not in cache.keys()

    def test_evict_drops_products_lists_and_categories(self, products, cache, make_product):
        a = make_product(category="A")
        b = make_product(category="B")
        for product in (a, b):
            products.get_by_id(product.product_id)
        products.get_all()
        products.get_by_category("A")
        products.get_by_category("B")

        products.evict([a.product_id], ["A", None])

        for key in (product_key(a.product_id), ALL_PRODUCTS_KEY, category_key("A")):
            assert is_fence(cache.get(key))
        for key in (product_key(b.product_id), category_key("B")):
            assert not is_fence(cache.get(key))
            assert cache.get(key) is not None


class TestCacheOutage:
    def test_reads_fall_back_to_store(self, products, cache, make_product):
        p = make_product(name="Available")
        cache.configure(available=False)

        assert products.get_by_id(p.product_id).name == "Available"
        assert [x.product_id for x in products.get_all()] == [p.product_id]

    def test_missing_product_still_not_found(self, products, cache):
        cache.configure(available=False)
        with pytest.raises(ObjectNotFoundError):
            products.get_by_id(123)

    def test_writes_succeed_without_cache(self, products, ledger, cache, make_product):
        p = make_product(quantity=5)
        cache.configure(available=False)

        products.update_quantity(p.product_id, 2)
        products.update(_replacement(p, name="Renamed", quantity=7))
        created = products.create(Product(name="Offline", price=Decimal("3"), quantity=0))

        assert ledger.get_by_id(p.product_id).name == "Renamed"
        assert ledger.get_by_id(created.product_id).name == "Offline"

    def test_recovered_cache_is_repopulated(self, products, cache, make_product):
        p = make_product()
        cache.configure(available=False)
        products.get_by_id(p.product_id)

        cache.configure(available=True)
        products.get_by_id(p.product_id)

        assert product_key(p.product_id) in cache.keys()


class TestFillRacingWrites:
    """A reader that loaded a row before a write finished must not cache it."""

    def test_stale_row_is_not_cached_after_update(self, products, ledger, cache, make_product, monkeypatch):
        p = make_product(quantity=5)
        load = ledger.get_by_id
        interleaved = []

        def load_then_write(product_id, deadline=None):
            row = load(product_id, deadline=deadline)
            if not interleaved:
                interleaved.append(product_id)
                products.update(_replacement(row, quantity=9))
            return row

        monkeypatch.setattr(ledger, "get_by_id", load_then_write)

        assert products.get_by_id(p.product_id).quantity == 5
        assert is_fence(cache.get(product_key(p.product_id)))
        assert products.get_by_id(p.product_id).quantity == 9
        assert Product.model_validate_json(cache.get(product_key(p.product_id))).quantity == 9

    def test_stale_list_is_not_cached_after_external_write(self, products, ledger, make_product, monkeypatch):
        p = make_product(quantity=5, category="tools")
        load = ledger.get_by_category

        def load_then_write(category, deadline=None):
            rows = load(category, deadline=deadline)
            ledger.update_quantity(p.product_id, 2)
            products.evict([p.product_id], ["tools"])
            return rows

        monkeypatch.setattr(ledger, "get_by_category", load_then_write)
        assert products.get_by_category("tools")[0].quantity == 5
        monkeypatch.undo()

        assert products.get_by_category("tools")[0].quantity == 7

    def test_not_found_is_not_cached_after_create(self, products, ledger, cache, monkeypatch):
        load = ledger.get_by_id

        def miss_then_create(product_id, deadline=None):
            try:
                return load(product_id, deadline=deadline)
            finally:
                monkeypatch.undo()
                products.create(Product(name="Arrived", price=Decimal("2"), quantity=1))

        monkeypatch.setattr(ledger, "get_by_id", miss_then_create)
        with pytest.raises(ObjectNotFoundError):
            products.get_by_id(1)

        assert cache.get(product_key(1)) != NOT_FOUND
        assert products.get_by_id(1).name == "Arrived"

    def test_reader_after_write_replaces_the_fence(self, products, cache, make_product):
        p = make_product(quantity=5)
        products.update_quantity(p.product_id, 1)
        assert is_fence(cache.get(product_key(p.product_id)))

        products.get_by_id(p.product_id)

        assert Product.model_validate_json(cache.get(product_key(p.product_id))).quantity == 6
