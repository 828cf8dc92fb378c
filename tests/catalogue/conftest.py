import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def catalogue_bed():
    from catalogue.domain import catalogue

    bed = DomainFixture(catalogue)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(catalogue_bed):
    with catalogue_bed.domain_context():
        yield


@pytest.fixture()
def create_product(client):
    """POST a product through the API and return the response body.

    Defaults to a Widget in "tools" priced 100.00 with 5 on hand.
    """

    def _create(**overrides):
        body = {"name": "Widget", "price": "100.00", "quantity": 5, "category": "tools"}
        body.update(overrides)
        response = client.post("/products", json=body)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
