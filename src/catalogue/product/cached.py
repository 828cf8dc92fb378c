"""Cache Coherence Layer — read-through, write-invalidate product cache.

Keys:
    product:<id>                 one product, or the NOT_FOUND sentinel
    products:all                 every product ordered by id
    products:category:<name>     products in one category

Reads consult the cache first and fall back to the wrapped repository,
repopulating on the way out. A write deletes every key that could describe the
affected product before delegating, and once the write is done it leaves a
fresh fence token in each of those keys.

A fill is a compare-and-set against whatever the reader saw before it went to
the store. A reader that loaded the row before a write finished therefore finds
the write's fence instead of its own observation and drops the fill, while a
reader that starts after the write replaces the fence with the current row.

The cache is an optimisation only: backend errors are logged and never reach
the caller.
"""

import uuid
from collections.abc import Iterable

import structlog
from protean.exceptions import ObjectNotFoundError
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from catalogue.cache.port import CacheBackend, CacheError
from catalogue.product.product import Product, ProductRepository, require_category
from shared.deadline import Deadline
from shared.errors import not_found, require_positive_id

logger = structlog.get_logger(__name__)

NOT_FOUND = b"notfound"
FENCE_PREFIX = b"fence:"
ALL_PRODUCTS_KEY = "products:all"

_product_list = TypeAdapter(list[Product])


def product_key(product_id: int) -> str:
    return f"product:{product_id}"


def category_key(category: str) -> str:
    return f"products:category:{category}"


def is_fence(value: bytes | None) -> bool:
    return value is not None and value.startswith(FENCE_PREFIX)


class CachedProductRepository(ProductRepository):
    """`ProductRepository` that fronts another one with a cache backend."""

    def __init__(
        self,
        repository: ProductRepository,
        cache: CacheBackend,
        ttl: int = 300,
        not_found_ttl: int = 60,
    ):
        self._repository = repository
        self._cache = cache
        self._ttl = ttl
        self._not_found_ttl = not_found_ttl

    # -------------------------------------------------------------------
    # Cache primitives (never raise)
    # -------------------------------------------------------------------
    def _read(self, key: str) -> bytes | None:
        try:
            return self._cache.get(key)
        except CacheError as exc:
            logger.warning("Cache read failed, continuing with the database", key=key, error=str(exc))
            return None

    def _fill(self, key: str, observed: bytes | None, value: bytes, ttl: int) -> None:
        try:
            if not self._cache.compare_and_set(key, observed, value, ttl):
                logger.debug("Cache fill skipped, key changed while loading", key=key)
        except CacheError as exc:
            logger.warning("Cache write failed", key=key, error=str(exc))

    def _invalidate(self, *keys: str) -> None:
        for key in dict.fromkeys(keys):
            try:
                self._cache.delete(key)
            except CacheError as exc:
                logger.warning("Cache invalidation failed", key=key, error=str(exc))

    def _fence(self, *keys: str) -> None:
        for key in dict.fromkeys(keys):
            try:
                self._cache.set(key, FENCE_PREFIX + uuid.uuid4().hex.encode(), self._ttl)
            except CacheError as exc:
                logger.warning("Cache invalidation failed", key=key, error=str(exc))

    @staticmethod
    def _keys_for(product_id: int, *categories: str | None) -> list[str]:
        keys = [product_key(product_id), ALL_PRODUCTS_KEY]
        keys.extend(category_key(category) for category in categories if category)
        return keys

    def _read_list(self, key: str) -> tuple[bytes | None, list[Product] | None]:
        observed = self._read(key)
        if observed is None or is_fence(observed):
            return observed, None
        try:
            return observed, _product_list.validate_json(observed)
        except SchemaError:
            logger.warning("Discarding undecodable cache entry", key=key)
            return observed, None

    # -------------------------------------------------------------------
    # Read path
    # -------------------------------------------------------------------
    def get_by_id(self, product_id: int, deadline: Deadline | None = None) -> Product:
        require_positive_id(product_id, "product_id")
        key = product_key(product_id)

        observed = self._read(key)
        if observed == NOT_FOUND:
            raise not_found("Product", product_id)
        if observed is not None and not is_fence(observed):
            try:
                return Product.model_validate_json(observed)
            except SchemaError:
                logger.warning("Discarding undecodable cache entry", key=key)

        try:
            product = self._repository.get_by_id(product_id, deadline=deadline)
        except ObjectNotFoundError:
            self._fill(key, observed, NOT_FOUND, self._not_found_ttl)
            raise

        self._fill(key, observed, product.model_dump_json().encode(), self._ttl)
        return product

    def get_all(self, deadline: Deadline | None = None) -> list[Product]:
        observed, cached = self._read_list(ALL_PRODUCTS_KEY)
        if cached is not None:
            return cached

        result = self._repository.get_all(deadline=deadline)
        self._fill(ALL_PRODUCTS_KEY, observed, _product_list.dump_json(result), self._ttl)
        return result

    def get_by_category(self, category: str, deadline: Deadline | None = None) -> list[Product]:
        require_category(category)
        key = category_key(category)
        observed, cached = self._read_list(key)
        if cached is not None:
            return cached

        result = self._repository.get_by_category(category, deadline=deadline)
        self._fill(key, observed, _product_list.dump_json(result), self._ttl)
        return result

    # -------------------------------------------------------------------
    # Write path
    # -------------------------------------------------------------------
    def create(self, product: Product, deadline: Deadline | None = None) -> Product:
        keys = [ALL_PRODUCTS_KEY]
        if product.category:
            keys.append(category_key(product.category))
        self._invalidate(*keys)
        try:
            created = self._repository.create(product, deadline=deadline)
        finally:
            self._fence(*keys)
        # a not-found sentinel may still be cached for the id the store just assigned
        self._fence(product_key(created.product_id))
        return created

    def _pre_read(self, product_id: int, deadline: Deadline | None) -> Product:
        """Read the current row so its category can be invalidated.

        If the pre-read fails, the single-product key is still dropped.
        """
        try:
            return self._repository.get_by_id(product_id, deadline=deadline)
        except Exception:
            self._invalidate(product_key(product_id))
            raise

    def update(self, product: Product, deadline: Deadline | None = None) -> Product:
        require_positive_id(product.product_id, "product_id")
        previous = self._pre_read(product.product_id, deadline)

        categories = [previous.category]
        if product.category != previous.category:
            categories.append(product.category)
        keys = self._keys_for(product.product_id, *categories)

        self._invalidate(*keys)
        try:
            return self._repository.update(product, deadline=deadline)
        finally:
            self._fence(*keys)

    def delete(self, product_id: int, deadline: Deadline | None = None) -> None:
        require_positive_id(product_id, "product_id")
        previous = self._pre_read(product_id, deadline)
        keys = self._keys_for(product_id, previous.category)

        self._invalidate(*keys)
        try:
            self._repository.delete(product_id, deadline=deadline)
        finally:
            self._fence(*keys)

    def update_quantity(self, product_id: int, change: int, deadline: Deadline | None = None) -> Product:
        # Same invalidation as update(); the delta itself stays server-side in the ledger.
        require_positive_id(product_id, "product_id")
        previous = self._pre_read(product_id, deadline)
        keys = self._keys_for(product_id, previous.category)

        self._invalidate(*keys)
        try:
            return self._repository.update_quantity(product_id, change, deadline=deadline)
        finally:
            self._fence(*keys)

    # -------------------------------------------------------------------
    # External writers
    # -------------------------------------------------------------------
    def evict(self, product_ids: Iterable[int], categories: Iterable[str | None] = ()) -> None:
        """Fence the cache entries of products changed by a writer that bypassed this layer.

        Used after an order or a stock movement commits directly against the
        ledger. Always fences the all-products key.
        """
        keys = [product_key(product_id) for product_id in product_ids]
        keys.append(ALL_PRODUCTS_KEY)
        keys.extend(category_key(category) for category in categories if category)
        self._fence(*keys)


def build_product_repository(database=None, cache: CacheBackend | None = None) -> CachedProductRepository:
    """Compose the ledger and the configured cache backend for this process."""
    from catalogue.cache import get_cache
    from catalogue.product.ledger import StockLedger
    from shared.database import get_database
    from shared.settings import get_settings

    settings = get_settings()
    return CachedProductRepository(
        StockLedger(database or get_database()),
        cache or get_cache(),
        ttl=settings.product_cache_ttl,
        not_found_ttl=settings.not_found_cache_ttl,
    )
