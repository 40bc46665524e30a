"""Order cancellation: command, handler and stock release."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.lookup import load_product
from storefront.catalogue.product import Product
from storefront.domain import logger, storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String(max_length=500)


def release_order_stock(*orders):
    """Return every line of the given cancelled orders to stock.

    Quantities are summed per product so each product is saved once,
    even when several orders share it.
    """
    quantities = {}
    for order in orders:
        for product_id, quantity in order.stock_to_release():
            quantities[product_id] = quantities.get(product_id, 0) + quantity

    repo = current_domain.repository_for(Product)
    for product_id, quantity in quantities.items():
        product = load_product(product_id)
        product.release_stock(quantity)
        repo.add(product)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.owned_by(command.order_id, command.customer_id)
        order.cancel(reason=command.reason)

        release_order_stock(order)
        repo.add(order)

        logger.info("order_cancelled", order_number=order.order_number, customer_id=str(command.customer_id))
