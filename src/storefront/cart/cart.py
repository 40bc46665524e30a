"""Cart aggregate: a customer's staging area of intended purchases.

Each line freezes the product price at the moment it was added; the cart
subtotal is computed from those snapshots only and never re-reads live
prices. The applied coupon is just a code: checkout validates it again.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartCleared,
    CartCouponApplied,
    CartItemAdded,
    CartItemQuantityChanged,
    CartItemRemoved,
)
from storefront.domain import storefront


@storefront.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    product_name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    added_at = DateTime()

    @property
    def line_total(self):
        return round(self.unit_price * self.quantity, 2)


@storefront.aggregate
class Cart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    coupon_code = String(max_length=50)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Totals (price snapshots only)
    # -------------------------------------------------------------------
    @property
    def subtotal(self):
        return round(sum(item.unit_price * item.quantity for item in self.items), 2)

    @property
    def item_count(self):
        return sum(item.quantity for item in self.items)

    @property
    def is_empty(self):
        return not self.items

    # -------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------
    def find_item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError("Cart item not found")
        return item

    def line_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    def add_item(self, product_id, unit_price, quantity=1, product_name=None):
        """Add a product, or increase the quantity of the line already holding it.

        An existing line keeps its original price snapshot.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = self.line_for(product_id)

        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(
                product_id=product_id,
                product_name=product_name,
                quantity=quantity,
                unit_price=unit_price,
                added_at=now,
            )
            self.add_items(item)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
                unit_price=item.unit_price,
            )
        )
        return item

    def update_item_quantity(self, item_id, new_quantity):
        if new_quantity is None or new_quantity < 1:
            raise ValidationError({"quantity": ["Valid quantity is required"]})

        item = self.find_item(item_id)
        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )
        return item

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self):
        """Remove every line and detach the coupon."""
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)
        self.coupon_code = None
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))

    # -------------------------------------------------------------------
    # Coupon
    # -------------------------------------------------------------------
    def apply_coupon(self, coupon_code):
        if self.is_empty:
            raise ValidationError({"cart": ["Cart is empty"]})
        if self.coupon_code == coupon_code:
            raise ValidationError({"coupon_code": ["Coupon already applied"]})

        self.coupon_code = coupon_code
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCouponApplied(cart_id=str(self.id), coupon_code=coupon_code))

    def remove_coupon(self):
        self.coupon_code = None
        self.updated_at = datetime.now(UTC)


@storefront.repository(part_of=Cart)
class CartRepository:
    def for_customer(self, customer_id) -> Cart | None:
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None
