"""Shared BDD fixtures and step definitions for the Ordering domain."""

from decimal import Decimal

import pytest
from pytest_bdd import given, parsers, then


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


@pytest.fixture()
def catalogue():
    """Products created by the scenario, keyed by name."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a registered customer", target_fixture="customer")
def registered_customer(make_customer):
    return make_customer()


@given(parsers.cfparse('product "{name}" priced {price:d} with {quantity:d} in stock'))
def product_in_stock(make_product, catalogue, name, price, quantity):
    catalogue[name] = make_product(name=name, price=str(price), quantity=quantity)


@given(
    parsers.cfparse('the customer has already ordered {quantity:d} of "{name}"'),
    target_fixture="existing_order",
)
def customer_has_ordered(engine, customer, catalogue, quantity, name):
    return engine.create_order(
        customer.customer_id,
        [{"product_id": catalogue[name].product_id, "quantity": quantity}],
    ).order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {quantity:d} in stock'))
def product_has_stock(ledger, catalogue, name, quantity):
    assert ledger.get_by_id(catalogue[name].product_id).quantity == quantity


@then(parsers.cfparse("the order is created with total {total:d}"))
def order_total(placed, total):
    assert placed.order.total_amount == Decimal(total)
    assert placed.order.status == "created"
