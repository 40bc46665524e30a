"""Storefront load test scenarios.

ShopperUser walks the full purchase journey. LastUnitUser makes many users
race for a handful of scarce products so the checkout's stock check is
exercised under contention: failures must be 400 (insufficient stock) or
409 (concurrent modification), never oversold stock.
"""

import os
import random

import requests
from locust import HttpUser, SequentialTaskSet, between, events, task

from loadtests.data_generators import address_data, checkout_data, coupon_data, customer_id, product_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState

ADMIN_HEADERS = {"X-Api-Key": os.environ.get("STORE_ADMIN_API_KEY", "")}

# Seeded once per test run by on_test_start
CATALOGUE: list[str] = []
SCARCE: list[str] = []
COUPONS: list[str] = []


@events.test_start.add_listener
def seed_catalogue(environment, **_kwargs):
    """Create products and coupons through the admin API before users start."""
    host = environment.host
    for _ in range(20):
        resp = requests.post(f"{host}/products", json=product_data(), headers=ADMIN_HEADERS, timeout=10)
        if resp.status_code == 201:
            CATALOGUE.append(resp.json()["data"]["id"])
    for _ in range(3):
        resp = requests.post(f"{host}/products", json=product_data(stock=5), headers=ADMIN_HEADERS, timeout=10)
        if resp.status_code == 201:
            SCARCE.append(resp.json()["data"]["id"])
    for _ in range(3):
        resp = requests.post(f"{host}/coupons", json=coupon_data(), headers=ADMIN_HEADERS, timeout=10)
        if resp.status_code == 201:
            COUPONS.append(resp.json()["data"]["code"])


class PurchaseJourney(SequentialTaskSet):
    """Address -> add items -> maybe coupon -> checkout -> view -> maybe cancel."""

    def on_start(self):
        self.state = ShopperState(customer_id=customer_id())
        self.headers = {"X-Customer-Id": self.state.customer_id}

    @task
    def add_address(self):
        with self.client.post(
            "/addresses", json=address_data(), headers=self.headers, catch_response=True, name="POST /addresses"
        ) as resp:
            if resp.status_code == 201:
                self.state.address_id = resp.json()["data"]["id"]
            else:
                resp.failure(f"Add address failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def fill_cart(self):
        for product_id in random.sample(CATALOGUE, k=min(3, len(CATALOGUE))):
            self.client.post(
                "/cart/items",
                json={"productId": product_id, "quantity": random.randint(1, 3)},
                headers=self.headers,
                name="POST /cart/items",
            )

    @task
    def maybe_apply_coupon(self):
        if COUPONS and random.random() < 0.3:
            with self.client.post(
                "/cart/apply-coupon",
                json={"code": random.choice(COUPONS)},
                headers=self.headers,
                catch_response=True,
                name="POST /cart/apply-coupon",
            ) as resp:
                # Minimum order amounts may legitimately reject the coupon
                if resp.status_code in (200, 400):
                    resp.success()

    @task
    def checkout(self):
        with self.client.post(
            "/orders",
            json=checkout_data(self.state.address_id),
            headers=self.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_ids.append(resp.json()["data"]["id"])
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def view_orders(self):
        self.client.get("/orders", headers=self.headers, name="GET /orders")

    @task
    def maybe_cancel(self):
        if self.state.order_ids and random.random() < 0.2:
            self.client.patch(
                f"/orders/{self.state.order_ids[-1]}/cancel",
                json={"reason": "Changed my mind"},
                headers=self.headers,
                name="PATCH /orders/{id}/cancel",
            )
        self.interrupt(reschedule=False)


class ShopperUser(HttpUser):
    wait_time = between(0.5, 2.0)
    tasks = [PurchaseJourney]


class LastUnitUser(HttpUser):
    """Races other users for the scarce products."""

    wait_time = between(0.1, 0.5)

    def on_start(self):
        self.headers = {"X-Customer-Id": customer_id()}
        resp = self.client.post("/addresses", json=address_data(), headers=self.headers, name="POST /addresses")
        self.address_id = resp.json()["data"]["id"] if resp.status_code == 201 else None

    @task
    def grab_last_unit(self):
        if not SCARCE or self.address_id is None:
            return
        self.client.post(
            "/cart/items",
            json={"productId": random.choice(SCARCE), "quantity": 1},
            headers=self.headers,
            name="[RACE] POST /cart/items",
        )
        with self.client.post(
            "/orders",
            json=checkout_data(self.address_id),
            headers=self.headers,
            catch_response=True,
            name="[RACE] POST /orders",
        ) as resp:
            if resp.status_code in (201, 400, 409):
                resp.success()
            else:
                resp.failure(f"Unexpected checkout result: {resp.status_code}: {extract_error_detail(resp)}")
        self.client.delete("/cart", headers=self.headers, name="[RACE] DELETE /cart")
