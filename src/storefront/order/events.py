"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A cart was converted into an order at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=40)
    customer_id = Identifier(required=True)
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    tax = Float(required=True)
    shipping_fee = Float(required=True)
    discount = Float(required=True)
    total = Float(required=True)
    coupon_code = String(max_length=50)
    payment_method = String(required=True, max_length=20)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=40)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    tracking_number = String(max_length=100)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """An order was cancelled; its stock goes back on the shelf."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=40)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaymentUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_payment_status = String(required=True, max_length=20)
    payment_status = String(required=True, max_length=20)
    payment_id = String(max_length=255)
