"""Order pricing."""

from dataclasses import asdict, dataclass

from storefront.checkout.policy import CheckoutPolicy


@dataclass(frozen=True)
class PricingBreakdown:
    subtotal: float
    tax: float
    shipping_fee: float
    discount: float
    total: float
    currency: str

    def as_dict(self) -> dict:
        return asdict(self)


class OrderPricer:
    """Turns a subtotal and a discount into the order's monetary summary.

    Each component is rounded to the cent before the total is derived from
    them, so ``total == subtotal + tax + shipping_fee - discount`` holds
    exactly on the stored values.
    """

    def __init__(self, policy: CheckoutPolicy | None = None):
        self.policy = policy or CheckoutPolicy()

    def shipping_fee_for(self, subtotal: float) -> float:
        if subtotal > self.policy.free_shipping_threshold:
            return 0.0
        return round(self.policy.flat_shipping_fee, 2)

    def price(self, subtotal: float, discount: float = 0.0) -> PricingBreakdown:
        subtotal = round(subtotal, 2)
        discount = round(min(discount or 0.0, subtotal), 2)
        tax = round(subtotal * self.policy.tax_rate, 2)
        shipping_fee = self.shipping_fee_for(subtotal)

        return PricingBreakdown(
            subtotal=subtotal,
            tax=tax,
            shipping_fee=shipping_fee,
            discount=discount,
            total=round(subtotal + tax + shipping_fee - discount, 2),
            currency=self.policy.currency,
        )
