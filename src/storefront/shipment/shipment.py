"""Shipment aggregate: a carrier parcel for an order.

A shipment owns carrier-side tracking only. The order it belongs to moves
through its own state machine: dispatching a shipment ships the order and
delivering one delivers it, both via ``Order.transition_to``.

Shipment statuses:
    PENDING → IN_TRANSIT → OUT_FOR_DELIVERY → DELIVERED
    any non-delivered status → FAILED
"""

from enum import Enum

from protean import atomic_change
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront
from storefront.shipment.events import ShipmentDelivered, ShipmentDispatched, ShipmentStatusChanged
from storefront.utils.timeutils import as_utc, utcnow


class ShipmentStatus(Enum):
    PENDING = "PENDING"
    IN_TRANSIT = "IN_TRANSIT"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"


def _clean(value):
    return value.strip() if isinstance(value, str) else value


@storefront.aggregate
class Shipment:
    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=40)
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=100, unique=True)
    tracking_url = String(max_length=500)
    status = String(choices=ShipmentStatus, default=ShipmentStatus.PENDING.value)
    estimated_delivery = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def dispatch(
        cls,
        order,
        carrier,
        tracking_number,
        status=ShipmentStatus.PENDING.value,
        tracking_url=None,
        estimated_delivery=None,
    ):
        """Create the shipment for ``order``. Delivered-on-creation parcels are marked delivered."""
        requested = ShipmentStatus(status)
        now = utcnow()
        shipment = cls(
            order_id=str(order.id),
            order_number=order.order_number,
            carrier=_clean(carrier),
            tracking_number=_clean(tracking_number),
            tracking_url=_clean(tracking_url) or None,
            status=ShipmentStatus.PENDING.value if requested == ShipmentStatus.DELIVERED else requested.value,
            estimated_delivery=as_utc(estimated_delivery),
            shipped_at=now,
            created_at=now,
            updated_at=now,
        )
        shipment.raise_(
            ShipmentDispatched(
                shipment_id=str(shipment.id),
                order_id=shipment.order_id,
                order_number=shipment.order_number,
                carrier=shipment.carrier,
                tracking_number=shipment.tracking_number,
                shipped_at=now,
            )
        )
        if requested == ShipmentStatus.DELIVERED:
            shipment.mark_delivered(at=now)
        return shipment

    @property
    def is_delivered(self):
        return self.delivered_at is not None

    def update(self, **changes):
        """Apply an administrator's partial update of carrier details or status."""
        if self.is_delivered and changes.get("status", self.status) != ShipmentStatus.DELIVERED.value:
            raise ValidationError({"status": ["Shipment is already delivered"]})

        previous = self.status
        with atomic_change(self):
            for field_name, value in changes.items():
                if field_name == "status":
                    value = ShipmentStatus(value).value
                elif field_name == "estimated_delivery":
                    value = as_utc(value)
                elif field_name == "tracking_url":
                    value = _clean(value) or None
                else:
                    value = _clean(value)
                setattr(self, field_name, value)
            self.updated_at = utcnow()

        if self.status != previous and self.status != ShipmentStatus.DELIVERED.value:
            self.raise_(
                ShipmentStatusChanged(
                    shipment_id=str(self.id),
                    tracking_number=self.tracking_number,
                    previous_status=previous,
                    new_status=self.status,
                    changed_at=self.updated_at,
                )
            )

    def mark_delivered(self, at=None):
        """Record delivery once; later calls keep the first delivery time."""
        if self.is_delivered:
            return

        now = as_utc(at) or utcnow()
        self.status = ShipmentStatus.DELIVERED.value
        self.delivered_at = now
        self.updated_at = utcnow()
        self.raise_(
            ShipmentDelivered(
                shipment_id=str(self.id),
                order_id=str(self.order_id),
                tracking_number=self.tracking_number,
                delivered_at=now,
            )
        )


@storefront.repository(part_of=Shipment)
class ShipmentRepository:
    def find_by_tracking_number(self, tracking_number) -> Shipment | None:
        results = self._dao.query.filter(tracking_number=_clean(tracking_number)).all().items
        return results[0] if results else None

    def for_order(self, order_id) -> list[Shipment]:
        return self._dao.query.filter(order_id=str(order_id)).order_by("-created_at").all().items

    def listing(self, status=None, carrier=None) -> list[Shipment]:
        query = self._dao.query
        if status:
            query = query.filter(status=status)
        if carrier:
            query = query.filter(carrier=carrier)
        return query.order_by("-created_at").all().items
