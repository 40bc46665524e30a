"""Storefront bounded context: catalogue stock, carts, coupons and orders.

Everything that must change together at checkout (product stock, coupon
usage, the cart and the new order) lives in this one domain so that a single
unit of work can cover it.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
