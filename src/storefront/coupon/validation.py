"""Coupon validator: evaluates a code against a cart subtotal.

Used by the coupon preview endpoint, by ``ApplyCouponToCart`` and again by
checkout, which never trusts a discount computed earlier. Validation has no
side effects.
"""

from dataclasses import dataclass
from datetime import datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.coupon.coupon import Coupon, normalize_code


@dataclass(frozen=True)
class CouponQuote:
    """Outcome of a successful coupon validation."""

    code: str
    coupon_type: str
    value: float
    discount: float
    description: str | None = None
    min_order_amount: float | None = None
    max_discount: float | None = None


class CouponValidator:
    def __init__(self, repository=None):
        self._repository = repository

    @property
    def repository(self):
        return self._repository or current_domain.repository_for(Coupon)

    def lookup(self, code) -> Coupon:
        normalized = normalize_code(code)
        if not normalized:
            raise ValidationError({"code": ["Coupon code is required"]})

        coupon = self.repository.find_by_code(normalized)
        if coupon is None:
            raise ObjectNotFoundError("Invalid coupon code")
        return coupon

    def check(self, coupon: Coupon, subtotal: float | None = None, now: datetime | None = None) -> CouponQuote:
        """Quote ``coupon`` for ``subtotal`` or raise with every failed rule."""
        if subtotal is not None and subtotal < 0:
            raise ValidationError({"cart_total": ["Cart total cannot be negative"]})

        errors = coupon.violations(subtotal=subtotal, now=now)
        if errors:
            raise ValidationError({"coupon": errors})

        return CouponQuote(
            code=coupon.code,
            coupon_type=coupon.coupon_type,
            value=coupon.value,
            discount=coupon.discount_for(subtotal),
            description=coupon.description,
            min_order_amount=coupon.min_order_amount,
            max_discount=coupon.max_discount,
        )

    def validate(self, code, subtotal: float | None = None, now: datetime | None = None) -> CouponQuote:
        return self.check(self.lookup(code), subtotal=subtotal, now=now)
