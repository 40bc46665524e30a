import os

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from storefront.api import (
    address_router,
    admin_router,
    cart_router,
    coupon_router,
    order_router,
    product_router,
    shipment_router,
)
from storefront.api.errors import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    for router in (
        cart_router,
        order_router,
        admin_router,
        coupon_router,
        address_router,
        product_router,
        shipment_router,
    ):
        app.include_router(router)
    register_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def customer():
    return {"X-Customer-Id": "cust-api-001"}


@pytest.fixture()
def admin():
    return {"X-Api-Key": os.environ["STORE_ADMIN_API_KEY"]}
