"""Coupon administration: commands and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.coupon.coupon import Coupon, normalize_code
from storefront.domain import logger, storefront


@storefront.command(part_of="Coupon")
class CreateCoupon:
    code = String(required=True, max_length=50)
    coupon_type = String(required=True, max_length=20)
    value = Float(required=True)
    valid_from = DateTime(required=True)
    valid_until = DateTime(required=True)
    description = String(max_length=500)
    min_order_amount = Float()
    max_discount = Float()
    usage_limit = Integer()


@storefront.command(part_of="Coupon")
class UpdateCoupon:
    """Partial update: only the fields that were provided are changed."""

    coupon_id = Identifier(required=True)
    code = String(max_length=50)
    coupon_type = String(max_length=20)
    value = Float()
    valid_from = DateTime()
    valid_until = DateTime()
    description = String(max_length=500)
    min_order_amount = Float()
    max_discount = Float()
    usage_limit = Integer()
    is_active = Boolean()


@storefront.command(part_of="Coupon")
class DeleteCoupon:
    coupon_id = Identifier(required=True)


def load_coupon(coupon_id) -> Coupon:
    try:
        return current_domain.repository_for(Coupon).get(coupon_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError("Coupon not found") from None


_UPDATABLE_FIELDS = (
    "code",
    "coupon_type",
    "value",
    "valid_from",
    "valid_until",
    "description",
    "min_order_amount",
    "max_discount",
    "usage_limit",
    "is_active",
)


@storefront.command_handler(part_of=Coupon)
class ManageCouponHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        if repo.find_by_code(command.code) is not None:
            raise ValidationError({"code": ["Coupon code already exists"]})

        coupon = Coupon.create(
            code=command.code,
            coupon_type=command.coupon_type,
            value=command.value,
            valid_from=command.valid_from,
            valid_until=command.valid_until,
            description=command.description,
            min_order_amount=command.min_order_amount,
            max_discount=command.max_discount,
            usage_limit=command.usage_limit,
        )
        repo.add(coupon)
        logger.info("coupon_created", code=coupon.code, coupon_type=coupon.coupon_type)
        return str(coupon.id)

    @handle(UpdateCoupon)
    def update_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = load_coupon(command.coupon_id)

        changes = {
            name: getattr(command, name) for name in _UPDATABLE_FIELDS if getattr(command, name) is not None
        }

        if "code" in changes:
            clash = repo.find_by_code(changes["code"])
            if clash is not None and str(clash.id) != str(coupon.id):
                raise ValidationError({"code": ["Coupon code already exists"]})
            changes["code"] = normalize_code(changes["code"])

        coupon.update(**changes)
        repo.add(coupon)

    @handle(DeleteCoupon)
    def delete_coupon(self, command):
        repo = current_domain.repository_for(Coupon)
        coupon = load_coupon(command.coupon_id)
        repo._dao.delete(coupon)
        logger.info("coupon_deleted", code=coupon.code)
