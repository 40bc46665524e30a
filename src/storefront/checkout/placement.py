"""Checkout: converting a cart into an order.

Everything happens inside the handler's unit of work: stock reservation,
coupon redemption, order creation and emptying the cart. All checks and
mutations run on freshly loaded aggregates before anything is added to a
repository, so a rejected checkout leaves stock, coupon and cart untouched.
Products carry a version; if another checkout changed a product after it was
loaded here, the commit fails with ``ExpectedVersionError`` and nothing is
written. Protean then re-runs the handler, which sees the new stock level.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.lookup import load_product
from storefront.catalogue.product import Product
from storefront.checkout.policy import get_checkout_policy
from storefront.checkout.pricing import OrderPricer
from storefront.coupon.coupon import Coupon
from storefront.coupon.validation import CouponValidator
from storefront.customer.address import find_owned_address
from storefront.domain import logger, storefront
from storefront.order.order import Order, PaymentMethod, generate_order_number

MAX_ORDER_NUMBER_ATTEMPTS = 5


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    shipping_address_id = Identifier(required=True)
    billing_address_id = Identifier(required=True)
    payment_method = String(required=True, max_length=20)
    notes = String(max_length=1000)


def unique_order_number(repo) -> str:
    for _ in range(MAX_ORDER_NUMBER_ATTEMPTS):
        number = generate_order_number()
        if repo.find_by_number(number) is None:
            return number
    raise ValidationError({"order_number": ["Could not allocate an order number, please retry"]})


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        if command.payment_method not in PaymentMethod.__members__:
            raise ValidationError({"payment_method": ["Invalid payment method"]})

        shipping = find_owned_address(command.shipping_address_id, command.customer_id, label="Shipping address")
        billing = find_owned_address(command.billing_address_id, command.customer_id, label="Billing address")

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_customer(command.customer_id)
        if cart is None or cart.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})

        # Reserve stock on every product before touching anything else
        products, items_data = [], []
        for item in cart.items:
            product = load_product(item.product_id)
            product.reserve_stock(item.quantity)
            products.append(product)
            items_data.append(
                {
                    "product_id": str(product.id),
                    "product_name": product.name,
                    "product_image": product.image_url,
                    "unit_price": item.unit_price,
                    "quantity": item.quantity,
                }
            )

        subtotal = cart.subtotal
        coupon, discount = None, 0.0
        if cart.coupon_code:
            validator = CouponValidator()
            try:
                coupon = validator.lookup(cart.coupon_code)
            except ObjectNotFoundError:
                raise ValidationError({"coupon": [f"Coupon {cart.coupon_code} is no longer valid"]}) from None
            discount = validator.check(coupon, subtotal=subtotal).discount
            coupon.redeem()

        pricing = OrderPricer(get_checkout_policy()).price(subtotal, discount)

        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            order_number=unique_order_number(order_repo),
            customer_id=command.customer_id,
            items_data=items_data,
            shipping_address_id=str(shipping.id),
            billing_address_id=str(billing.id),
            shipping_address=shipping.snapshot(),
            billing_address=billing.snapshot(),
            payment_method=command.payment_method,
            pricing=pricing.as_dict(),
            coupon_code=coupon.code if coupon else None,
            notes=command.notes,
        )
        cart.clear()

        product_repo = current_domain.repository_for(Product)
        for product in products:
            product_repo.add(product)
        if coupon is not None:
            current_domain.repository_for(Coupon).add(coupon)
        order_repo.add(order)
        cart_repo.add(cart)

        logger.info(
            "order_placed",
            order_number=order.order_number,
            customer_id=str(command.customer_id),
            total=order.pricing.total,
            item_count=len(items_data),
        )
        return str(order.id)
