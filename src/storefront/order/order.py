"""Order aggregate: the immutable record of a completed checkout.

Line items, prices and addresses are snapshots taken at checkout and are
never edited afterwards. Only the lifecycle fields (status, payment status,
tracking number and the transition timestamps) change, and only through
``cancel``, ``transition_to`` and ``update_payment``.

State machine:
    PENDING → PROCESSING → SHIPPED → DELIVERED → REFUNDED
    PENDING/PROCESSING → CANCELLED → REFUNDED
    PENDING → SHIPPED (orders fulfilled without a processing step)
"""

import random
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPaymentUpdated, OrderPlaced, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentStatus(Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class PaymentMethod(Enum):
    CARD = "CARD"
    PAYPAL = "PAYPAL"
    COD = "COD"
    BANK_TRANSFER = "BANK_TRANSFER"
    WALLET = "WALLET"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.REFUNDED},
    OrderStatus.CANCELLED: {OrderStatus.REFUNDED},
    OrderStatus.REFUNDED: set(),  # Terminal
}

_CANCEL_REJECTIONS = {
    OrderStatus.CANCELLED: "Order is already cancelled",
    OrderStatus.SHIPPED: "Cannot cancel shipped order. Please contact support.",
    OrderStatus.DELIVERED: "Cannot cancel delivered order",
    OrderStatus.REFUNDED: "Cannot cancel refunded order",
}


def generate_order_number(now=None, rng=random):
    """``ORD-<unix millis>-<4 random digits>``; uniqueness is checked by the caller."""
    now = now or datetime.now(UTC)
    return f"ORD-{int(now.timestamp() * 1000)}-{rng.randrange(10000):04d}"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class PostalAddress:
    """Where an order ships to (or is billed to), as it read at checkout."""

    full_name = String(required=True, max_length=150)
    phone = String(max_length=20)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Monetary summary of an order, fixed at checkout.

    ``total`` is always ``subtotal + tax + shipping_fee - discount`` to the cent.
    """

    subtotal = Float(default=0.0, min_value=0.0)
    tax = Float(default=0.0, min_value=0.0)
    shipping_fee = Float(default=0.0, min_value=0.0)
    discount = Float(default=0.0, min_value=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="INR")

    @invariant.post
    def total_must_match_components(self):
        expected = round(self.subtotal + self.tax + self.shipping_fee - self.discount, 2)
        if round(self.total, 2) != expected:
            raise ValidationError({"total": [f"Total {self.total} does not match its components ({expected})"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    product_image = String(max_length=500)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    line_total = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=40, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address_id = Identifier(required=True)
    billing_address_id = Identifier(required=True)
    shipping_address = ValueObject(PostalAddress)
    billing_address = ValueObject(PostalAddress)
    pricing = ValueObject(OrderPricing)
    coupon_code = String(max_length=50)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_id = String(max_length=255)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    notes = String(max_length=1000)
    tracking_number = String(max_length=100)
    cancellation_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()
    refunded_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        customer_id,
        items_data,
        shipping_address_id,
        billing_address_id,
        shipping_address,
        billing_address,
        payment_method,
        pricing,
        coupon_code=None,
        notes=None,
    ):
        """Create an order from checkout data.

        Args:
            items_data: List of dicts with product_id, product_name,
                        product_image, unit_price, quantity.
            shipping_address / billing_address: Dicts matching PostalAddress.
            pricing: Dict matching OrderPricing.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            items=[
                OrderItem(
                    product_id=item["product_id"],
                    product_name=item["product_name"],
                    product_image=item.get("product_image"),
                    unit_price=item["unit_price"],
                    quantity=item["quantity"],
                    line_total=round(item["unit_price"] * item["quantity"], 2),
                )
                for item in items_data
            ],
            shipping_address_id=shipping_address_id,
            billing_address_id=billing_address_id,
            shipping_address=PostalAddress(**shipping_address),
            billing_address=PostalAddress(**billing_address),
            pricing=OrderPricing(**pricing),
            coupon_code=coupon_code,
            payment_method=payment_method,
            payment_status=PaymentStatus.PENDING.value,
            status=OrderStatus.PENDING.value,
            notes=notes,
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                customer_id=str(customer_id),
                item_count=sum(item.quantity for item in order.items),
                subtotal=order.pricing.subtotal,
                tax=order.pricing.tax,
                shipping_fee=order.pricing.shipping_fee,
                discount=order.pricing.discount,
                total=order.pricing.total,
                coupon_code=coupon_code,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def belongs_to(self, customer_id):
        return str(self.customer_id) == str(customer_id)

    def stock_to_release(self):
        """(product_id, quantity) pairs that go back to stock if the order is cancelled."""
        return [(str(item.product_id), item.quantity) for item in self.items]

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target):
        current = OrderStatus(self.status)
        if target == current:
            raise ValidationError({"status": [f"Order is already {current.value}"]})
        if target not in _VALID_TRANSITIONS[current]:
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target.value}"]})

    def cancel(self, reason=None):
        """Cancel a PENDING or PROCESSING order.

        The caller restores stock for ``stock_to_release()`` in the same unit of work.
        """
        current = OrderStatus(self.status)
        if current in _CANCEL_REJECTIONS:
            raise ValidationError({"status": [_CANCEL_REJECTIONS[current]]})
        self._assert_can_transition(OrderStatus.CANCELLED)

        now = datetime.now(UTC)
        with atomic_change(self):
            self.status = OrderStatus.CANCELLED.value
            self.cancelled_at = now
            self.updated_at = now
            if reason:
                self.cancellation_reason = reason

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                reason=reason,
                cancelled_at=now,
            )
        )
        self._record_status_change(current, now)

    def transition_to(self, target, tracking_number=None, reason=None, at=None):
        """Move the order to ``target``, stamping the matching timestamp.

        This is the only path for status changes made by administrators and shipments:
        SHIPPED records ``shipped_at`` and the tracking number, DELIVERED records
        ``delivered_at`` and completes payment, REFUNDED records ``refunded_at``
        and refunds payment, CANCELLED follows the cancellation rules. ``at``
        overrides the stamp, e.g. with the time a carrier reported delivery.
        """
        target = OrderStatus(target)
        if target == OrderStatus.CANCELLED:
            self.cancel(reason=reason)
            return

        current = OrderStatus(self.status)
        self._assert_can_transition(target)

        now = at or datetime.now(UTC)
        with atomic_change(self):
            self.status = target.value
            self.updated_at = now
            if target == OrderStatus.SHIPPED:
                self.shipped_at = now
                if tracking_number:
                    self.tracking_number = tracking_number
            elif target == OrderStatus.DELIVERED:
                self.delivered_at = now
                self.payment_status = PaymentStatus.COMPLETED.value
            elif target == OrderStatus.REFUNDED:
                self.refunded_at = now
                self.payment_status = PaymentStatus.REFUNDED.value

        self._record_status_change(current, now)

    def _record_status_change(self, previous, now):
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=self.status,
                tracking_number=self.tracking_number,
                changed_at=now,
            )
        )

    def update_payment(self, payment_status, payment_id=None):
        new_status = PaymentStatus(payment_status)
        previous = self.payment_status

        with atomic_change(self):
            self.payment_status = new_status.value
            if payment_id:
                self.payment_id = payment_id
            self.updated_at = datetime.now(UTC)

        self.raise_(
            OrderPaymentUpdated(
                order_id=str(self.id),
                previous_payment_status=previous,
                payment_status=self.payment_status,
                payment_id=self.payment_id,
            )
        )


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_number(self, order_number) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all().items
        return results[0] if results else None

    def for_customer(self, customer_id) -> list[Order]:
        return self._dao.query.filter(customer_id=str(customer_id)).order_by("-created_at").all().items

    def owned_by(self, order_id, customer_id) -> Order:
        """Fetch an order, treating another customer's order as missing."""
        try:
            order = self.get(order_id)
        except ObjectNotFoundError:
            order = None

        if order is None or not order.belongs_to(customer_id):
            raise ObjectNotFoundError("Order not found")
        return order

    def search(self, status=None, payment_status=None, search=None, page=1, limit=10):
        """One page of orders, newest first, and the total number of matches."""
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        if payment_status:
            query = query.filter(payment_status=payment_status)
        if search:
            query = query.filter(order_number__icontains=search)

        result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()
        return result.items, result.total
