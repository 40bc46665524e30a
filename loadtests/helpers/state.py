"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own ids; nothing is shared between users.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    customer_id: str
    address_id: str | None = None
    order_ids: list[str] = field(default_factory=list)
