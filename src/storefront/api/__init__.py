from storefront.api.routes import (
    address_router,
    admin_router,
    cart_router,
    coupon_router,
    order_router,
    product_router,
    shipment_router,
)

__all__ = [
    "address_router",
    "admin_router",
    "cart_router",
    "coupon_router",
    "order_router",
    "product_router",
    "shipment_router",
]
