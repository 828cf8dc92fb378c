import os
from decimal import Decimal
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("CACHE_ADAPTER", "memory")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture()
def database(tmp_path):
    """A fresh SQLite database with the full schema, installed as the process-wide one."""
    from shared.database import Database, build_engine, reset_database, set_database
    from shared.settings import Settings

    db = Database(build_engine(Settings(database_url=f"sqlite:///{tmp_path / 'stockroom.db'}")))
    db.create_all()
    set_database(db)

    yield db

    reset_database()


@pytest.fixture()
def cache():
    """In-memory cache backend, installed as the process-wide one."""
    from catalogue.cache import reset_cache, set_cache
    from catalogue.cache.memory_adapter import InMemoryCache

    backend = InMemoryCache()
    set_cache(backend)

    yield backend

    reset_cache()


@pytest.fixture()
def client(database, cache):
    """HTTP client bound to the temporary database and the in-memory cache."""
    from app import app
    from fastapi.testclient import TestClient

    return TestClient(app)


@pytest.fixture()
def ledger(database):
    from catalogue.product.ledger import StockLedger

    return StockLedger(database)


@pytest.fixture()
def products(ledger, cache):
    from catalogue.product.cached import CachedProductRepository

    return CachedProductRepository(ledger, cache)


@pytest.fixture()
def customers(database):
    from identity.customer.repository import CustomerRepository

    return CustomerRepository(database)


@pytest.fixture()
def make_product(ledger):
    from catalogue.product.product import Product

    def _make(name="Widget", price="100", quantity=5, category=None, description=""):
        return ledger.create(
            Product(name=name, price=Decimal(price), quantity=quantity, category=category, description=description)
        )

    return _make


@pytest.fixture()
def make_customer(customers):
    from identity.customer.customer import Customer

    counter = iter(range(1, 10_000))

    def _make(name="Jane Doe", email=None, phone_number=None, address="1 Main Street"):
        n = next(counter)
        return customers.create(
            Customer(
                name=name,
                email=email or f"customer{n}@example.com",
                phone_number=phone_number or f"+7916{n:07d}",
                address=address,
            )
        )

    return _make
