"""Coupon aggregate: a named discount rule with eligibility constraints.

Eligibility (``violations``) and discount computation (``discount_for``) are
pure; the only mutation checkout performs is ``redeem``, which bumps
``usage_count`` and can never push it past ``usage_limit``.
"""

from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.coupon.events import CouponCreated, CouponDeactivated, CouponRedeemed
from storefront.domain import storefront
from storefront.utils.timeutils import as_utc, utcnow


class CouponType(Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"


def normalize_code(code):
    return (code or "").strip().upper()


@storefront.aggregate
class Coupon:
    code = String(required=True, max_length=50, unique=True)
    description = String(max_length=500)
    coupon_type = String(required=True, choices=CouponType)
    value = Float(required=True)
    min_order_amount = Float(min_value=0.0)
    max_discount = Float(min_value=0.0)
    usage_limit = Integer(min_value=1)
    usage_count = Integer(default=0, min_value=0)
    valid_from = DateTime(required=True)
    valid_until = DateTime(required=True)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def value_must_be_positive(self):
        if self.value is not None and self.value <= 0:
            raise ValidationError({"value": ["Coupon value must be greater than 0"]})

    @invariant.post
    def percentage_cannot_exceed_hundred(self):
        if self.coupon_type == CouponType.PERCENTAGE.value and self.value is not None and self.value > 100:
            raise ValidationError({"value": ["Percentage value cannot exceed 100"]})

    @invariant.post
    def validity_window_must_be_ordered(self):
        if self.valid_from and self.valid_until and as_utc(self.valid_until) < as_utc(self.valid_from):
            raise ValidationError({"valid_until": ["Valid until must not be earlier than valid from"]})

    @invariant.post
    def usage_cannot_exceed_limit(self):
        if self.usage_limit is not None and (self.usage_count or 0) > self.usage_limit:
            raise ValidationError({"usage_count": ["Coupon usage cannot exceed its usage limit"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        code,
        coupon_type,
        value,
        valid_from,
        valid_until,
        description=None,
        min_order_amount=None,
        max_discount=None,
        usage_limit=None,
    ):
        now = utcnow()
        coupon = cls(
            code=normalize_code(code),
            description=description.strip() if description else None,
            coupon_type=coupon_type,
            value=value,
            min_order_amount=min_order_amount or None,
            max_discount=max_discount or None,
            usage_limit=usage_limit or None,
            usage_count=0,
            valid_from=as_utc(valid_from),
            valid_until=as_utc(valid_until),
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=str(coupon.id),
                code=coupon.code,
                coupon_type=coupon.coupon_type,
                value=coupon.value,
                valid_from=coupon.valid_from,
                valid_until=coupon.valid_until,
            )
        )
        return coupon

    # -------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------
    def violations(self, subtotal=None, now=None):
        """Every eligibility rule this coupon currently fails, in a stable order."""
        now = as_utc(now) or utcnow()
        errors = []

        if not self.is_active:
            errors.append("Coupon is no longer active")
        if as_utc(self.valid_from) > now:
            errors.append("Coupon is not yet valid")
        if as_utc(self.valid_until) < now:
            errors.append("Coupon has expired")
        if self.usage_limit is not None and (self.usage_count or 0) >= self.usage_limit:
            errors.append("Coupon usage limit reached")
        if subtotal is not None and self.min_order_amount is not None and subtotal < self.min_order_amount:
            errors.append(f"Minimum order amount of {self.min_order_amount:.2f} required")

        return errors

    def discount_for(self, subtotal):
        if subtotal is None:
            subtotal = 0.0

        if self.coupon_type == CouponType.PERCENTAGE.value:
            discount = subtotal * self.value / 100
            if self.max_discount is not None and discount > self.max_discount:
                discount = self.max_discount
        else:
            discount = min(self.value, subtotal)

        return round(discount, 2)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def redeem(self):
        """Record one use of the coupon by a committed checkout."""
        if self.usage_limit is not None and (self.usage_count or 0) >= self.usage_limit:
            raise ValidationError({"coupon": ["Coupon usage limit reached"]})

        now = utcnow()
        self.usage_count = (self.usage_count or 0) + 1
        self.updated_at = now

        self.raise_(
            CouponRedeemed(
                coupon_id=str(self.id),
                code=self.code,
                usage_count=self.usage_count,
                redeemed_at=now,
            )
        )

    def update(self, **changes):
        """Apply an administrator's partial update.

        Fields are changed together so the invariants see only the final state.
        Switching a coupon off goes through ``deactivate``.
        """
        is_active = changes.pop("is_active", None)
        with atomic_change(self):
            for field_name, value in changes.items():
                if field_name == "code":
                    value = normalize_code(value)
                elif field_name in ("valid_from", "valid_until"):
                    value = as_utc(value)
                elif field_name in ("min_order_amount", "max_discount", "usage_limit"):
                    value = value or None
                elif field_name == "description":
                    value = value.strip() if value else None
                setattr(self, field_name, value)
            self.updated_at = utcnow()

        if is_active is False:
            self.deactivate()
        elif is_active:
            self.is_active = True

    def deactivate(self):
        if not self.is_active:
            return
        self.is_active = False
        self.updated_at = utcnow()
        self.raise_(CouponDeactivated(coupon_id=str(self.id), code=self.code))


@storefront.repository(part_of=Coupon)
class CouponRepository:
    def find_by_code(self, code) -> Coupon | None:
        results = self._dao.query.filter(code=normalize_code(code)).all().items
        return results[0] if results else None

    def listing(self, status=None, coupon_type=None) -> list[Coupon]:
        query = self._dao.query
        if status == "active":
            query = query.filter(is_active=True)
        elif status == "inactive":
            query = query.filter(is_active=False)
        if coupon_type:
            query = query.filter(coupon_type=coupon_type)
        return query.order_by("-created_at").all().items
