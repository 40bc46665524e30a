"""Faker-based data generators for Locust load test scenarios.

Payloads use the camelCase field names of the storefront API's request schemas.
"""

import random
import uuid
from datetime import UTC, datetime, timedelta

from faker import Faker

fake = Faker()

PAYMENT_METHODS = ["CARD", "PAYPAL", "COD", "BANK_TRANSFER", "WALLET"]


def customer_id() -> str:
    return f"cust-lt-{uuid.uuid4().hex[:8]}"


def address_data() -> dict:
    return {
        "fullName": fake.name()[:150],
        "phone": fake.msisdn()[:20],
        "street": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state_abbr(),
        "postalCode": fake.postcode()[:20],
        "country": fake.country_code(),
    }


def product_data(stock: int | None = None) -> dict:
    return {
        "name": fake.catch_phrase()[:255],
        "description": fake.sentence(),
        "price": round(random.uniform(99, 45000), 2),
        "stock": stock if stock is not None else random.randint(500, 5000),
    }


def coupon_data() -> dict:
    now = datetime.now(UTC)
    return {
        "code": f"LT{uuid.uuid4().hex[:8].upper()}",
        "couponType": random.choice(["PERCENTAGE", "FIXED"]),
        "value": random.choice([5, 10, 15, 20]),
        "validFrom": (now - timedelta(days=1)).isoformat(),
        "validUntil": (now + timedelta(days=7)).isoformat(),
    }


def checkout_data(address_id: str) -> dict:
    return {
        "shippingAddressId": address_id,
        "billingAddressId": address_id,
        "paymentMethod": random.choice(PAYMENT_METHODS),
        "notes": fake.sentence() if random.random() < 0.2 else None,
    }
