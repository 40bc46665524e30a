"""Domain events for the Shipment aggregate."""

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Shipment")
class ShipmentDispatched:
    """A parcel for an order was handed to a carrier."""

    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=40)
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=100)
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Shipment")
class ShipmentStatusChanged:
    __version__ = 1

    shipment_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    changed_at = DateTime(required=True)


@storefront.event(part_of="Shipment")
class ShipmentDelivered:
    __version__ = 1

    shipment_id = Identifier(required=True)
    order_id = Identifier(required=True)
    tracking_number = String(required=True, max_length=100)
    delivered_at = DateTime(required=True)
