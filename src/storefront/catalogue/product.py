"""Product aggregate: the authoritative stock counter for every sellable item.

Stock is never negative. It is only decremented by checkout (``reserve_stock``)
and only incremented by order cancellation (``release_stock``) or an
administrator receiving new units (``restock``).
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.catalogue.events import ProductAdded, ProductOutOfStock, ProductRestocked
from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = String(max_length=2000)
    image_url = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, name, price, stock=0, description=None, image_url=None):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            description=description,
            image_url=image_url,
            price=price,
            stock=stock,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                price=price,
                stock=stock,
                added_at=now,
            )
        )
        return product

    def has_stock_for(self, quantity):
        return self.stock >= quantity

    def reserve_stock(self, quantity):
        """Take ``quantity`` units out of stock for an order."""
        if not self.is_active:
            raise ValidationError({"product": [f"{self.name} is no longer available"]})
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if not self.has_stock_for(quantity):
            raise ValidationError({"stock": [f"Insufficient stock for {self.name}. Only {self.stock} available."]})

        self.stock -= quantity
        self.updated_at = datetime.now(UTC)

        if self.stock == 0:
            self.raise_(ProductOutOfStock(product_id=str(self.id), name=self.name))

    def release_stock(self, quantity):
        """Put units from a cancelled order back into stock."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        self.stock += quantity
        self.updated_at = datetime.now(UTC)

    def restock(self, quantity):
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be positive"]})

        now = datetime.now(UTC)
        self.stock += quantity
        self.updated_at = now

        self.raise_(
            ProductRestocked(
                product_id=str(self.id),
                quantity=quantity,
                new_stock=self.stock,
                restocked_at=now,
            )
        )

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)
