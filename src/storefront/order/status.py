"""Administrative status changes: single and bulk.

Both paths go through ``Order.transition_to`` so they obey the same transition
table and stamp the same timestamps. A cancellation from either path puts the
order's stock back.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.cancellation import release_order_stock
from storefront.order.order import Order, OrderStatus


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    tracking_number = String(max_length=100)
    reason = String(max_length=500)


@storefront.command(part_of="Order")
class BulkUpdateOrderStatus:
    order_ids = Text(required=True)  # JSON: list of order ids
    status = String(required=True, choices=OrderStatus)


def _apply_transition(order, status, tracking_number=None, reason=None):
    order.transition_to(status, tracking_number=tracking_number, reason=reason)
    if order.status == OrderStatus.CANCELLED.value:
        release_order_stock(order)


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Order not found") from None

        previous = order.status
        _apply_transition(order, command.status, command.tracking_number, command.reason)
        repo.add(order)

        logger.info(
            "order_status_updated",
            order_number=order.order_number,
            previous_status=previous,
            new_status=order.status,
        )

    @handle(BulkUpdateOrderStatus)
    def bulk_update_status(self, command):
        """Move every listed order to the same status, or none of them.

        All orders are loaded and transitioned in memory first; nothing is
        persisted unless every transition is legal. Returns the number of
        orders updated.
        """
        order_ids = json.loads(command.order_ids) if isinstance(command.order_ids, str) else command.order_ids
        if not order_ids:
            raise ValidationError({"order_ids": ["Order IDs are required"]})

        repo = current_domain.repository_for(Order)
        orders, errors = [], []
        for order_id in dict.fromkeys(order_ids):
            try:
                order = repo.get(order_id)
            except ObjectNotFoundError:
                errors.append(f"Order {order_id} not found")
                continue

            try:
                order.transition_to(command.status)
            except ValidationError as exc:
                for message in exc.messages.get("status", []):
                    errors.append(f"{order.order_number}: {message}")
                continue
            orders.append(order)

        if errors:
            raise ValidationError({"orders": errors})

        release_order_stock(*[order for order in orders if order.status == OrderStatus.CANCELLED.value])
        for order in orders:
            repo.add(order)

        logger.info("orders_bulk_updated", count=len(orders), new_status=command.status)
        return len(orders)
