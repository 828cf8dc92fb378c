import pytest
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def identity_bed():
    from identity.domain import identity

    bed = DomainFixture(identity)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(identity_bed):
    with identity_bed.domain_context():
        yield


@pytest.fixture()
def customer_body():
    return {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone_number": "+79161234567",
        "address": "1 Main Street",
    }


@pytest.fixture()
def register(client, customer_body):
    """Register a customer over HTTP, overriding any default field."""

    def _register(**overrides):
        response = client.post("/customers", json=dict(customer_body, **overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _register
