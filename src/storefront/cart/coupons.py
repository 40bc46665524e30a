"""Cart coupon management: commands and handler."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.items import existing_cart
from storefront.coupon.validation import CouponValidator
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class ApplyCouponToCart:
    customer_id = Identifier(required=True)
    coupon_code = String(required=True, max_length=50)


@storefront.command(part_of="Cart")
class RemoveCouponFromCart:
    customer_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class CartCouponHandler:
    @handle(ApplyCouponToCart)
    def apply_coupon(self, command):
        """Validate the coupon against the cart subtotal and attach it.

        Returns the quote so the caller can show the discount preview.
        """
        repo = current_domain.repository_for(Cart)
        validator = CouponValidator()

        coupon = validator.lookup(command.coupon_code)
        cart = repo.for_customer(command.customer_id)
        if cart is None or cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        quote = validator.check(coupon, subtotal=cart.subtotal)
        cart.apply_coupon(quote.code)
        repo.add(cart)
        return quote

    @handle(RemoveCouponFromCart)
    def remove_coupon(self, command):
        repo = current_domain.repository_for(Cart)
        cart = existing_cart(command.customer_id)
        cart.remove_coupon()
        repo.add(cart)
