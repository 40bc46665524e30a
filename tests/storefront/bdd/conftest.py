"""Shared BDD fixtures and step definitions for checkout and orders."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.checkout.placement import PlaceOrder
from storefront.order.order import Order

BUYER_ID = "cust-bdd-001"


@pytest.fixture
def products():
    """Product ids by name."""
    return {}


@pytest.fixture
def outcome():
    """The last order id placed and the last error raised."""
    return {"order_id": None, "error": None}


def _product(products, name):
    return current_domain.repository_for(Product).get(products[name])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a customer with a saved address", target_fixture="address_id")
def _(make_address):
    return make_address(customer_id=BUYER_ID)


@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(products, make_product, name, price, stock):
    products[name] = make_product(name=name, price=price, stock=stock)


@given(parsers.cfparse('the customer has {quantity:d} of "{name}" in the cart'))
def _(products, add_to_cart, quantity, name):
    add_to_cart(products[name], quantity=quantity, customer_id=BUYER_ID)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer checks out paying by "{method}"'))
def _(address_id, outcome, method):
    outcome["error"] = None
    try:
        outcome["order_id"] = current_domain.process(
            PlaceOrder(
                customer_id=BUYER_ID,
                shipping_address_id=address_id,
                billing_address_id=address_id,
                payment_method=method,
            ),
            asynchronous=False,
        )
    except ValidationError as exc:
        outcome["error"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('an order is placed with status "{status}"'))
@then(parsers.cfparse('the order status is "{status}"'))
def _(outcome, status):
    order = current_domain.repository_for(Order).get(outcome["order_id"])
    assert order.status == status


@then(
    parsers.cfparse(
        "the order totals are subtotal {subtotal:f}, tax {tax:f}, shipping {shipping:f}, "
        "discount {discount:f}, total {total:f}"
    )
)
def _(outcome, subtotal, tax, shipping, discount, total):
    pricing = current_domain.repository_for(Order).get(outcome["order_id"]).pricing
    assert (pricing.subtotal, pricing.tax, pricing.shipping_fee, pricing.discount, pricing.total) == (
        subtotal,
        tax,
        shipping,
        discount,
        total,
    )


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, name, stock):
    assert _product(products, name).stock == stock


@then("the cart is empty")
def _():
    assert current_domain.repository_for(Cart).for_customer(BUYER_ID).is_empty


@then(parsers.cfparse('checkout fails with "{message}"'))
@then(parsers.cfparse('the cancellation fails with "{message}"'))
def _(outcome, message):
    error = outcome["error"]
    assert error is not None
    assert message in [m for messages in error.messages.values() for m in messages]
