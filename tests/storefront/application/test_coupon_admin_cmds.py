"""Application tests for coupon administration and the coupon validator."""

from datetime import UTC, datetime, timedelta

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.coupon.coupon import Coupon
from storefront.coupon.management import DeleteCoupon, UpdateCoupon
from storefront.coupon.validation import CouponValidator


def _get(coupon_id):
    return current_domain.repository_for(Coupon).get(coupon_id)


class TestCreateCoupon:
    def test_create(self, make_coupon):
        coupon = _get(make_coupon(code="welcome", value=15.0, max_discount=0))
        assert coupon.code == "WELCOME"
        assert coupon.usage_count == 0
        assert coupon.max_discount is None
        assert coupon.is_active

    def test_duplicate_code_rejected(self, make_coupon):
        make_coupon(code="WELCOME")
        with pytest.raises(ValidationError) as exc:
            make_coupon(code=" welcome ")
        assert exc.value.messages["code"] == ["Coupon code already exists"]

    def test_invalid_type_rejected(self, make_coupon):
        with pytest.raises(ValidationError):
            make_coupon(coupon_type="BOGO")


class TestUpdateCoupon:
    def test_partial_update(self, make_coupon):
        coupon_id = make_coupon(code="SAVE10", value=10.0)
        current_domain.process(UpdateCoupon(coupon_id=coupon_id, value=20.0, is_active=False), asynchronous=False)
        coupon = _get(coupon_id)
        assert coupon.value == 20.0
        assert coupon.is_active is False
        assert coupon.code == "SAVE10"

    def test_code_clash(self, make_coupon):
        make_coupon(code="FIRST")
        second = make_coupon(code="SECOND")
        with pytest.raises(ValidationError):
            current_domain.process(UpdateCoupon(coupon_id=second, code="first"), asynchronous=False)

    def test_unknown_coupon(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(UpdateCoupon(coupon_id="missing", value=5.0), asynchronous=False)


class TestDeleteCoupon:
    def test_delete(self, make_coupon):
        coupon_id = make_coupon(code="BYE")
        current_domain.process(DeleteCoupon(coupon_id=coupon_id), asynchronous=False)
        assert current_domain.repository_for(Coupon).find_by_code("BYE") is None


class TestCouponValidator:
    def test_valid_quote(self, make_coupon):
        make_coupon(code="SAVE10", value=10.0, max_discount=150.0, min_order_amount=500.0)
        quote = CouponValidator().validate("save10", subtotal=2000.0)
        assert quote.code == "SAVE10"
        assert quote.discount == 150.0
        assert quote.max_discount == 150.0

    def test_no_subtotal(self, make_coupon):
        make_coupon(code="SAVE10", value=10.0, min_order_amount=500.0)
        assert CouponValidator().validate("SAVE10").discount == 0.0

    def test_unknown_code(self):
        with pytest.raises(ObjectNotFoundError):
            CouponValidator().validate("NOPE", subtotal=100.0)

    def test_blank_code(self):
        with pytest.raises(ValidationError):
            CouponValidator().validate("   ")

    def test_negative_subtotal(self, make_coupon):
        make_coupon(code="SAVE10")
        with pytest.raises(ValidationError):
            CouponValidator().validate("SAVE10", subtotal=-1.0)

    def test_every_failed_rule_reported(self, make_coupon):
        past = datetime.now(UTC) - timedelta(days=10)
        make_coupon(
            code="OLD",
            value=10.0,
            min_order_amount=1000.0,
            valid_from=past,
            valid_until=past + timedelta(days=1),
        )
        with pytest.raises(ValidationError) as exc:
            CouponValidator().validate("OLD", subtotal=100.0)
        assert exc.value.messages["coupon"] == [
            "Coupon has expired",
            "Minimum order amount of 1000.00 required",
        ]

    def test_validation_has_no_side_effects(self, make_coupon):
        make_coupon(code="SAVE10", usage_limit=1)
        CouponValidator().validate("SAVE10", subtotal=100.0)
        CouponValidator().validate("SAVE10", subtotal=100.0)
        assert current_domain.repository_for(Coupon).find_by_code("SAVE10").usage_count == 0
