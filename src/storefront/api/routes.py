"""FastAPI routes for the storefront: cart, checkout, orders, shipments, coupons and catalogue."""

import json
import math

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.dependencies import current_customer_id, require_admin
from storefront.api.schemas import (
    AddCartItemRequest,
    AddressView,
    AppliedCouponView,
    ApplyCouponRequest,
    BulkUpdateStatusRequest,
    CancelOrderRequest,
    CartView,
    CheckoutRequest,
    CouponQuoteView,
    CouponView,
    CreateAddressRequest,
    CreateCouponRequest,
    CreateProductRequest,
    CreateShipmentRequest,
    OrderPage,
    OrderView,
    ProductView,
    RestockRequest,
    ShipmentView,
    TrackingView,
    UpdateCartItemRequest,
    UpdateCouponRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdateShipmentRequest,
    ValidateCouponRequest,
    ok,
)
from storefront.cart.cart import Cart
from storefront.cart.coupons import ApplyCouponToCart, RemoveCouponFromCart
from storefront.cart.items import AddToCart, ClearCart, OpenCart, RemoveFromCart, UpdateCartItem
from storefront.catalogue.lookup import load_product
from storefront.catalogue.management import AddProduct, RestockProduct
from storefront.checkout.placement import PlaceOrder
from storefront.coupon.coupon import Coupon
from storefront.coupon.management import CreateCoupon, DeleteCoupon, UpdateCoupon, load_coupon
from storefront.coupon.validation import CouponValidator
from storefront.customer.address import Address
from storefront.customer.management import AddAddress
from storefront.order.cancellation import CancelOrder
from storefront.order.order import Order
from storefront.order.payment import UpdatePaymentStatus
from storefront.order.status import BulkUpdateOrderStatus, UpdateOrderStatus
from storefront.shipment.management import CreateShipment, DeleteShipment, UpdateShipment, load_shipment
from storefront.shipment.shipment import Shipment


def _cart_view(customer_id: str) -> CartView:
    cart_id = current_domain.process(OpenCart(customer_id=customer_id), asynchronous=False)
    return CartView.of(current_domain.repository_for(Cart).get(cart_id))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(customer_id: str = Depends(current_customer_id)) -> dict:
    return ok(_cart_view(customer_id), "Cart retrieved")


@cart_router.delete("")
async def clear_cart(customer_id: str = Depends(current_customer_id)) -> dict:
    current_domain.process(ClearCart(customer_id=customer_id), asynchronous=False)
    return ok(_cart_view(customer_id), "Cart cleared")


@cart_router.post("/items", status_code=201)
async def add_cart_item(body: AddCartItemRequest, customer_id: str = Depends(current_customer_id)) -> dict:
    command = AddToCart(customer_id=customer_id, product_id=body.product_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return ok(_cart_view(customer_id), "Item added to cart")


@cart_router.patch("/items/{item_id}")
async def update_cart_item(
    item_id: str, body: UpdateCartItemRequest, customer_id: str = Depends(current_customer_id)
) -> dict:
    command = UpdateCartItem(customer_id=customer_id, item_id=item_id, quantity=body.quantity)
    current_domain.process(command, asynchronous=False)
    return ok(_cart_view(customer_id), "Cart updated")


@cart_router.delete("/items/{item_id}")
async def remove_cart_item(item_id: str, customer_id: str = Depends(current_customer_id)) -> dict:
    current_domain.process(RemoveFromCart(customer_id=customer_id, item_id=item_id), asynchronous=False)
    return ok(_cart_view(customer_id), "Item removed from cart")


@cart_router.post("/apply-coupon")
async def apply_coupon(body: ApplyCouponRequest, customer_id: str = Depends(current_customer_id)) -> dict:
    command = ApplyCouponToCart(customer_id=customer_id, coupon_code=body.code)
    quote = current_domain.process(command, asynchronous=False)
    view = AppliedCouponView(cart=_cart_view(customer_id), coupon=CouponQuoteView.of(quote))
    return ok(view, "Coupon applied")


@cart_router.delete("/coupon")
async def remove_coupon(customer_id: str = Depends(current_customer_id)) -> dict:
    current_domain.process(RemoveCouponFromCart(customer_id=customer_id), asynchronous=False)
    return ok(_cart_view(customer_id), "Coupon removed")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def place_order(body: CheckoutRequest, customer_id: str = Depends(current_customer_id)) -> dict:
    """Convert the caller's cart into an order.

    Stock, coupon usage and the cart are updated in the same unit of work;
    the response carries the complete order as stored.
    """
    command = PlaceOrder(
        customer_id=customer_id,
        shipping_address_id=body.shipping_address_id,
        billing_address_id=body.billing_address_id,
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return ok(OrderView.of(order), "Order placed successfully")


@order_router.get("")
async def list_orders(customer_id: str = Depends(current_customer_id)) -> dict:
    orders = current_domain.repository_for(Order).for_customer(customer_id)
    return ok([OrderView.of(order) for order in orders], "Orders retrieved")


@order_router.get("/{order_id}")
async def get_order(order_id: str, customer_id: str = Depends(current_customer_id)) -> dict:
    order = current_domain.repository_for(Order).owned_by(order_id, customer_id)
    return ok(OrderView.of(order), "Order retrieved")


@order_router.get("/{order_id}/shipments")
async def list_order_shipments(order_id: str, customer_id: str = Depends(current_customer_id)) -> dict:
    order = current_domain.repository_for(Order).owned_by(order_id, customer_id)
    shipments = current_domain.repository_for(Shipment).for_order(order.id)
    return ok([ShipmentView.of(shipment) for shipment in shipments], "Shipments retrieved")


@order_router.patch("/{order_id}/cancel")
async def cancel_order(
    order_id: str, body: CancelOrderRequest | None = None, customer_id: str = Depends(current_customer_id)
) -> dict:
    command = CancelOrder(order_id=order_id, customer_id=customer_id, reason=body.reason if body else None)
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return ok(OrderView.of(order), "Order cancelled successfully")


@order_router.patch("/{order_id}/status", dependencies=[Depends(require_admin)])
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> dict:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        tracking_number=body.tracking_number,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return ok(OrderView.of(order), "Order status updated")


@order_router.patch("/{order_id}/payment", dependencies=[Depends(require_admin)])
async def update_payment_status(order_id: str, body: UpdatePaymentStatusRequest) -> dict:
    command = UpdatePaymentStatus(order_id=order_id, payment_status=body.payment_status, payment_id=body.payment_id)
    current_domain.process(command, asynchronous=False)
    order = current_domain.repository_for(Order).get(order_id)
    return ok(OrderView.of(order), "Payment status updated")


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_router.get("/orders")
async def search_orders(
    status: str | None = None,
    payment_status: str | None = Query(default=None, alias="paymentStatus"),
    search: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> dict:
    orders, total = current_domain.repository_for(Order).search(
        status=status,
        payment_status=payment_status,
        search=search,
        page=page,
        limit=limit,
    )
    view = OrderPage(
        orders=[OrderView.of(order) for order in orders],
        page=page,
        limit=limit,
        total=total,
        pages=math.ceil(total / limit),
    )
    return ok(view, "Orders retrieved")


@admin_router.patch("/orders/bulk-status")
async def bulk_update_status(body: BulkUpdateStatusRequest) -> dict:
    command = BulkUpdateOrderStatus(order_ids=json.dumps(body.order_ids), status=body.status)
    updated = current_domain.process(command, asynchronous=False)
    return ok({"updated": updated}, f"{updated} orders updated")


# ---------------------------------------------------------------------------
# Shipment Router
# ---------------------------------------------------------------------------
shipment_router = APIRouter(prefix="/shipments", tags=["shipments"])


@shipment_router.get("/track/{tracking_number}")
async def track_shipment(tracking_number: str) -> dict:
    """Public tracking lookup; the tracking number is the only credential."""
    shipment = current_domain.repository_for(Shipment).find_by_tracking_number(tracking_number)
    if shipment is None:
        raise ObjectNotFoundError("Shipment not found with this tracking number")
    order = current_domain.repository_for(Order).get(shipment.order_id)
    return ok(TrackingView.of(shipment, order), "Shipment details retrieved")


@shipment_router.get("", dependencies=[Depends(require_admin)])
async def list_shipments(status: str | None = None, carrier: str | None = None) -> dict:
    shipments = current_domain.repository_for(Shipment).listing(status=status, carrier=carrier)
    return ok([ShipmentView.of(shipment) for shipment in shipments], "Shipments retrieved")


@shipment_router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_shipment(body: CreateShipmentRequest) -> dict:
    shipment_id = current_domain.process(CreateShipment(**body.model_dump(exclude_none=True)), asynchronous=False)
    return ok(ShipmentView.of(load_shipment(shipment_id)), "Shipment created")


@shipment_router.get("/{shipment_id}", dependencies=[Depends(require_admin)])
async def get_shipment(shipment_id: str) -> dict:
    return ok(ShipmentView.of(load_shipment(shipment_id)), "Shipment retrieved")


@shipment_router.patch("/{shipment_id}", dependencies=[Depends(require_admin)])
async def update_shipment(shipment_id: str, body: UpdateShipmentRequest) -> dict:
    command = UpdateShipment(shipment_id=shipment_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(ShipmentView.of(load_shipment(shipment_id)), "Shipment updated")


@shipment_router.delete("/{shipment_id}", dependencies=[Depends(require_admin)])
async def delete_shipment(shipment_id: str) -> dict:
    current_domain.process(DeleteShipment(shipment_id=shipment_id), asynchronous=False)
    return ok(None, "Shipment deleted")


# ---------------------------------------------------------------------------
# Coupon Router
# ---------------------------------------------------------------------------
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.post("/validate", dependencies=[Depends(current_customer_id)])
async def validate_coupon(body: ValidateCouponRequest) -> dict:
    quote = CouponValidator().validate(body.code, subtotal=body.cart_total)
    return ok(CouponQuoteView.of(quote), "Coupon is valid")


@coupon_router.get("", dependencies=[Depends(require_admin)])
async def list_coupons(
    status: str | None = None, coupon_type: str | None = Query(default=None, alias="type")
) -> dict:
    coupons = current_domain.repository_for(Coupon).listing(status=status, coupon_type=coupon_type)
    return ok([CouponView.of(coupon) for coupon in coupons], "Coupons retrieved")


@coupon_router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def create_coupon(body: CreateCouponRequest) -> dict:
    command = CreateCoupon(
        code=body.code,
        coupon_type=body.coupon_type,
        value=body.value,
        valid_from=body.valid_from,
        valid_until=body.valid_until,
        description=body.description,
        min_order_amount=body.min_order_amount,
        max_discount=body.max_discount,
        usage_limit=body.usage_limit,
    )
    coupon_id = current_domain.process(command, asynchronous=False)
    return ok(CouponView.of(load_coupon(coupon_id)), "Coupon created")


@coupon_router.get("/{coupon_id}", dependencies=[Depends(require_admin)])
async def get_coupon(coupon_id: str) -> dict:
    return ok(CouponView.of(load_coupon(coupon_id)), "Coupon retrieved")


@coupon_router.patch("/{coupon_id}", dependencies=[Depends(require_admin)])
async def update_coupon(coupon_id: str, body: UpdateCouponRequest) -> dict:
    command = UpdateCoupon(coupon_id=coupon_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return ok(CouponView.of(load_coupon(coupon_id)), "Coupon updated")


@coupon_router.delete("/{coupon_id}", dependencies=[Depends(require_admin)])
async def delete_coupon(coupon_id: str) -> dict:
    current_domain.process(DeleteCoupon(coupon_id=coupon_id), asynchronous=False)
    return ok(None, "Coupon deleted")


# ---------------------------------------------------------------------------
# Address Router
# ---------------------------------------------------------------------------
address_router = APIRouter(prefix="/addresses", tags=["addresses"])


@address_router.get("")
async def list_addresses(customer_id: str = Depends(current_customer_id)) -> dict:
    addresses = current_domain.repository_for(Address).for_customer(customer_id)
    return ok([AddressView.of(address) for address in addresses], "Addresses retrieved")


@address_router.post("", status_code=201)
async def add_address(body: CreateAddressRequest, customer_id: str = Depends(current_customer_id)) -> dict:
    command = AddAddress(customer_id=customer_id, **body.model_dump())
    address_id = current_domain.process(command, asynchronous=False)
    address = current_domain.repository_for(Address).get(address_id)
    return ok(AddressView.of(address), "Address added")


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.post("", status_code=201, dependencies=[Depends(require_admin)])
async def add_product(body: CreateProductRequest) -> dict:
    product_id = current_domain.process(AddProduct(**body.model_dump()), asynchronous=False)
    return ok(ProductView.of(load_product(product_id)), "Product added")


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    return ok(ProductView.of(load_product(product_id)), "Product retrieved")


@product_router.patch("/{product_id}/stock", dependencies=[Depends(require_admin)])
async def restock_product(product_id: str, body: RestockRequest) -> dict:
    current_domain.process(RestockProduct(product_id=product_id, quantity=body.quantity), asynchronous=False)
    return ok(ProductView.of(load_product(product_id)), "Stock updated")
