import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def ordering_bed():
    from ordering.domain import ordering

    bed = DomainFixture(ordering)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(ordering_bed):
    with ordering_bed.domain_context():
        yield


@pytest.fixture()
def engine(database):
    from ordering.order.creation import OrderTransactionEngine

    return OrderTransactionEngine(database, retry_attempts=3)


@pytest.fixture()
def orders(database):
    from ordering.order.repository import OrderRepository

    return OrderRepository(database)


@pytest.fixture()
def operations(database):
    from inventory.operation.log import OperationLog

    return OperationLog(database)


@pytest.fixture()
def stocked(make_product, make_customer):
    """P1 (price 100, quantity 5), P2 (price 200, quantity 1) and a customer."""
    return {
        "p1": make_product(name="P1", price="100", quantity=5, category="tools"),
        "p2": make_product(name="P2", price="200", quantity=1, category="garden"),
        "customer": make_customer(),
    }
