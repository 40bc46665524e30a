"""Shipment administration: dispatch, tracking updates and removal.

Dispatching ships the order and a delivered shipment delivers it. The order
and the shipment are saved in the same unit of work, after every check has
passed.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.order import Order, OrderStatus
from storefront.shipment.shipment import Shipment, ShipmentStatus


@storefront.command(part_of="Shipment")
class CreateShipment:
    order_id = Identifier(required=True)
    carrier = String(required=True, max_length=100)
    tracking_number = String(required=True, max_length=100)
    tracking_url = String(max_length=500)
    status = String(choices=ShipmentStatus, default=ShipmentStatus.PENDING.value)
    estimated_delivery = DateTime()


@storefront.command(part_of="Shipment")
class UpdateShipment:
    shipment_id = Identifier(required=True)
    carrier = String(max_length=100)
    tracking_number = String(max_length=100)
    tracking_url = String(max_length=500)
    status = String(choices=ShipmentStatus)
    estimated_delivery = DateTime()
    delivered_at = DateTime()


@storefront.command(part_of="Shipment")
class DeleteShipment:
    shipment_id = Identifier(required=True)


def load_shipment(shipment_id) -> Shipment:
    try:
        return current_domain.repository_for(Shipment).get(shipment_id)
    except ObjectNotFoundError:
        raise ObjectNotFoundError("Shipment not found") from None


def _assert_tracking_number_free(repo, tracking_number, shipment_id=None):
    clash = repo.find_by_tracking_number(tracking_number)
    if clash is not None and str(clash.id) != str(shipment_id):
        raise ValidationError({"tracking_number": ["Tracking number already exists"]})


def _deliver_order(order, shipment):
    if order.status != OrderStatus.DELIVERED.value:
        order.transition_to(OrderStatus.DELIVERED.value, at=shipment.delivered_at)


_UPDATABLE_FIELDS = ("carrier", "tracking_number", "tracking_url", "status", "estimated_delivery")


@storefront.command_handler(part_of=Shipment)
class ShipmentHandler:
    @handle(CreateShipment)
    def create_shipment(self, command):
        order_repo = current_domain.repository_for(Order)
        try:
            order = order_repo.get(command.order_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Order not found") from None

        repo = current_domain.repository_for(Shipment)
        _assert_tracking_number_free(repo, command.tracking_number.strip())

        shipment = Shipment.dispatch(
            order,
            carrier=command.carrier,
            tracking_number=command.tracking_number,
            status=command.status,
            tracking_url=command.tracking_url,
            estimated_delivery=command.estimated_delivery,
        )
        # Further parcels for an already shipped order leave the order as it is
        if order.status != OrderStatus.SHIPPED.value:
            order.transition_to(OrderStatus.SHIPPED.value, tracking_number=shipment.tracking_number)
        if shipment.is_delivered:
            _deliver_order(order, shipment)

        repo.add(shipment)
        order_repo.add(order)

        logger.info(
            "shipment_created",
            order_number=order.order_number,
            carrier=shipment.carrier,
            tracking_number=shipment.tracking_number,
        )
        return str(shipment.id)

    @handle(UpdateShipment)
    def update_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = load_shipment(command.shipment_id)
        was_delivered = shipment.is_delivered

        changes = {
            name: getattr(command, name) for name in _UPDATABLE_FIELDS if getattr(command, name) is not None
        }
        if "tracking_number" in changes:
            _assert_tracking_number_free(repo, changes["tracking_number"].strip(), shipment.id)

        shipment.update(**changes)
        if shipment.status == ShipmentStatus.DELIVERED.value or command.delivered_at:
            shipment.mark_delivered(at=command.delivered_at)

        if shipment.is_delivered and not was_delivered:
            order_repo = current_domain.repository_for(Order)
            order = order_repo.get(shipment.order_id)
            _deliver_order(order, shipment)
            order_repo.add(order)
            logger.info("shipment_delivered", order_number=order.order_number, tracking_number=shipment.tracking_number)

        repo.add(shipment)

    @handle(DeleteShipment)
    def delete_shipment(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = load_shipment(command.shipment_id)
        repo._dao.delete(shipment)
        logger.info("shipment_deleted", tracking_number=shipment.tracking_number)
