"""Checkout policy: the store's tax and shipping rules.

Values come from the environment so deployments can change them without a
code change; the defaults are the store's standing rates.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class CheckoutPolicy:
    tax_rate: float = 0.18
    free_shipping_threshold: float = 50000.0
    flat_shipping_fee: float = 500.0
    currency: str = "INR"

    @classmethod
    def from_env(cls) -> "CheckoutPolicy":
        return cls(
            tax_rate=float(os.environ.get("STORE_TAX_RATE", cls.tax_rate)),
            free_shipping_threshold=float(
                os.environ.get("STORE_FREE_SHIPPING_THRESHOLD", cls.free_shipping_threshold)
            ),
            flat_shipping_fee=float(os.environ.get("STORE_FLAT_SHIPPING_FEE", cls.flat_shipping_fee)),
            currency=os.environ.get("STORE_CURRENCY", cls.currency),
        )


_policy_instance = None


def get_checkout_policy() -> CheckoutPolicy:
    """Return the store's checkout policy, read from the environment once."""
    global _policy_instance
    if _policy_instance is None:
        _policy_instance = CheckoutPolicy.from_env()
    return _policy_instance


def reset_checkout_policy():
    """Forget the cached policy so the next checkout re-reads the environment (useful for testing)."""
    global _policy_instance
    _policy_instance = None
