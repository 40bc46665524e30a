"""Payment status updates: command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order, PaymentStatus


@storefront.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, choices=PaymentStatus)
    payment_id = String(max_length=255)


@storefront.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(UpdatePaymentStatus)
    def update_payment(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Order not found") from None

        order.update_payment(command.payment_status, payment_id=command.payment_id)
        repo.add(order)
