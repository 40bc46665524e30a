"""Domain events for the Coupon aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Coupon")
class CouponCreated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True, max_length=50)
    coupon_type = String(required=True, max_length=20)
    value = Float(required=True)
    valid_from = DateTime(required=True)
    valid_until = DateTime(required=True)


@storefront.event(part_of="Coupon")
class CouponRedeemed:
    """A coupon was consumed by a completed checkout."""

    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True, max_length=50)
    usage_count = Integer(required=True)
    redeemed_at = DateTime(required=True)


@storefront.event(part_of="Coupon")
class CouponDeactivated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True, max_length=50)
