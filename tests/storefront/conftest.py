"""Shared fixtures for storefront tests.

Factories go through the same commands the API uses so every test starts
from state the application could actually have produced.
"""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from storefront.cart.items import AddToCart
from storefront.catalogue.management import AddProduct
from storefront.checkout.placement import PlaceOrder
from storefront.coupon.management import CreateCoupon
from storefront.customer.management import AddAddress

CUSTOMER_ID = "cust-001"
OTHER_CUSTOMER_ID = "cust-002"


@pytest.fixture
def make_product():
    def _make(name="Laptop", price=30000.0, stock=10, image_url=None):
        return current_domain.process(
            AddProduct(name=name, price=price, stock=stock, image_url=image_url),
            asynchronous=False,
        )

    return _make


@pytest.fixture
def make_address():
    def _make(customer_id=CUSTOMER_ID, city="Bengaluru"):
        return current_domain.process(
            AddAddress(
                customer_id=customer_id,
                full_name="Asha Rao",
                phone="9800000000",
                street="12 MG Road",
                city=city,
                state="KA",
                postal_code="560001",
                country="IN",
            ),
            asynchronous=False,
        )

    return _make


@pytest.fixture
def address_id(make_address):
    return make_address()


@pytest.fixture
def add_to_cart():
    def _add(product_id, quantity=1, customer_id=CUSTOMER_ID):
        return current_domain.process(
            AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity),
            asynchronous=False,
        )

    return _add


@pytest.fixture
def make_coupon():
    def _make(code="SAVE10", coupon_type="PERCENTAGE", value=10.0, **kwargs):
        now = datetime.now(UTC)
        kwargs.setdefault("valid_from", now - timedelta(days=1))
        kwargs.setdefault("valid_until", now + timedelta(days=30))
        return current_domain.process(
            CreateCoupon(code=code, coupon_type=coupon_type, value=value, **kwargs),
            asynchronous=False,
        )

    return _make


@pytest.fixture
def place_order(address_id):
    def _place(customer_id=CUSTOMER_ID, payment_method="CARD", shipping_address_id=None, notes=None):
        return current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                shipping_address_id=shipping_address_id or address_id,
                billing_address_id=shipping_address_id or address_id,
                payment_method=payment_method,
                notes=notes,
            ),
            asynchronous=False,
        )

    return _place
