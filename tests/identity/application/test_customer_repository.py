import pytest
from identity.customer.customer import Customer
from protean.exceptions import ObjectNotFoundError, ValidationError
from shared.errors import DuplicateError


def _customer(**overrides):
    values = {
        "name": "Jane Doe",
        "email": "jane@example.com",
        "phone_number": "+79161234567",
        "address": "1 Main Street",
    }
    values.update(overrides)
    return Customer(**values)


class TestRegisterCustomer:
    def test_create_assigns_id_and_timestamp(self, customers):
        customer = customers.create(_customer())
        assert customer.customer_id > 0
        assert customer.registered_at is not None

    def test_invalid_phone_never_reaches_store(self, customers):
        with pytest.raises(ValidationError):
            customers.create(_customer(phone_number="89161234567"))
        assert customers.get_all() == []

    def test_duplicate_email(self, customers):
        customers.create(_customer())
        with pytest.raises(DuplicateError, match="email"):
            customers.create(_customer(phone_number="+79160000000"))

    def test_duplicate_phone(self, customers):
        customers.create(_customer())
        with pytest.raises(DuplicateError, match="phone_number"):
            customers.create(_customer(email="other@example.com"))


class TestCustomerLookups:
    def test_get_by_id(self, customers, make_customer):
        created = make_customer(name="Ann Smith")
        assert customers.get_by_id(created.customer_id).name == "Ann Smith"

    def test_get_by_id_missing(self, customers):
        with pytest.raises(ObjectNotFoundError):
            customers.get_by_id(42)

    def test_get_by_id_non_positive(self, customers):
        with pytest.raises(ValidationError):
            customers.get_by_id(0)

    def test_get_by_email(self, customers, make_customer):
        created = make_customer(email="find.me@example.com")
        assert customers.get_by_email("find.me@example.com").customer_id == created.customer_id

    def test_get_by_phone_number(self, customers, make_customer):
        created = make_customer(phone_number="+15551234567")
        assert customers.get_by_phone_number("+15551234567").customer_id == created.customer_id

    def test_empty_lookup_keys_rejected(self, customers):
        with pytest.raises(ValidationError):
            customers.get_by_email("")
        with pytest.raises(ValidationError):
            customers.get_by_phone_number("")

    def test_lookup_missing_email(self, customers):
        with pytest.raises(ObjectNotFoundError):
            customers.get_by_email("nobody@example.com")

    def test_get_all_ordered_by_id(self, customers, make_customer):
        ids = [make_customer().customer_id for _ in range(3)]
        assert [c.customer_id for c in customers.get_all()] == ids


class TestUpdateAndDelete:
    def test_update(self, customers, make_customer):
        created = make_customer()
        updated = customers.update(
            _customer(customer_id=created.customer_id, name="Jane Roe", email="roe@example.com", address="2 Side St")
        )
        assert updated.name == "Jane Roe"
        assert customers.get_by_email("roe@example.com").address == "2 Side St"

    def test_update_missing(self, customers):
        with pytest.raises(ObjectNotFoundError):
            customers.update(_customer(customer_id=99))

    def test_update_into_duplicate_email(self, customers, make_customer):
        make_customer(email="taken@example.com")
        other = make_customer()
        with pytest.raises(DuplicateError):
            customers.update(
                _customer(customer_id=other.customer_id, email="taken@example.com", phone_number=other.phone_number)
            )

    def test_delete(self, customers, make_customer):
        created = make_customer()
        customers.delete(created.customer_id)
        with pytest.raises(ObjectNotFoundError):
            customers.get_by_id(created.customer_id)

    def test_delete_missing(self, customers):
        with pytest.raises(ObjectNotFoundError):
            customers.delete(7)
