"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True)
    stock = Integer(required=True)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRestocked:
    """Units were received into stock by an administrator."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    new_stock = Integer(required=True)
    restocked_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductOutOfStock:
    """Checkout consumed the last available unit of a product."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
