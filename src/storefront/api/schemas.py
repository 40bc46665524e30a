"""Pydantic request/response schemas for the storefront API.

These are external contracts, kept separate from internal Protean commands.
JSON keys are camelCase on the wire; Python attributes stay snake_case.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def ok(data: Any = None, message: str = "OK") -> dict:
    """Wrap a payload in the success envelope."""
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True, mode="json")
    elif isinstance(data, list):
        data = [item.model_dump(by_alias=True, mode="json") if isinstance(item, BaseModel) else item for item in data]
    return {"success": True, "message": message, "data": data}


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class AddCartItemRequest(CamelModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartItemRequest(CamelModel):
    quantity: int = Field(ge=1)


class ApplyCouponRequest(CamelModel):
    code: str = Field(min_length=1)


class ValidateCouponRequest(CamelModel):
    code: str = Field(min_length=1)
    cart_total: float | None = Field(default=None, ge=0)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"examples": [{"code": "SAVE10", "cartTotal": 2500.0}]},
    )


class CheckoutRequest(CamelModel):
    shipping_address_id: str
    billing_address_id: str
    payment_method: str
    notes: str | None = Field(default=None, max_length=1000)

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "shippingAddressId": "addr-001",
                    "billingAddressId": "addr-001",
                    "paymentMethod": "CARD",
                    "notes": "Leave at the door",
                }
            ]
        },
    )


class CancelOrderRequest(CamelModel):
    reason: str | None = Field(default=None, max_length=500)


class UpdateOrderStatusRequest(CamelModel):
    status: str
    tracking_number: str | None = None
    reason: str | None = None


class UpdatePaymentStatusRequest(CamelModel):
    payment_status: str
    payment_id: str | None = None


class BulkUpdateStatusRequest(CamelModel):
    order_ids: list[str] = Field(min_length=1)
    status: str


ShipmentStatusName = Literal["PENDING", "IN_TRANSIT", "OUT_FOR_DELIVERY", "DELIVERED", "FAILED"]


class CreateShipmentRequest(CamelModel):
    order_id: str
    carrier: str = Field(min_length=1, max_length=100)
    tracking_number: str = Field(min_length=1, max_length=100)
    tracking_url: str | None = Field(default=None, max_length=500)
    status: ShipmentStatusName = "PENDING"
    estimated_delivery: datetime | None = None


class UpdateShipmentRequest(CamelModel):
    carrier: str | None = Field(default=None, min_length=1, max_length=100)
    tracking_number: str | None = Field(default=None, min_length=1, max_length=100)
    tracking_url: str | None = Field(default=None, max_length=500)
    status: ShipmentStatusName | None = None
    estimated_delivery: datetime | None = None
    delivered_at: datetime | None = None


class CreateCouponRequest(CamelModel):
    code: str = Field(min_length=1, max_length=50)
    description: str | None = None
    coupon_type: Literal["PERCENTAGE", "FIXED"]
    value: float = Field(gt=0)
    min_order_amount: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    usage_limit: int | None = Field(default=None, ge=1)
    valid_from: datetime
    valid_until: datetime


class UpdateCouponRequest(CamelModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = None
    coupon_type: Literal["PERCENTAGE", "FIXED"] | None = None
    value: float | None = Field(default=None, gt=0)
    min_order_amount: float | None = Field(default=None, ge=0)
    max_discount: float | None = Field(default=None, ge=0)
    usage_limit: int | None = Field(default=None, ge=1)
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    is_active: bool | None = None


class CreateAddressRequest(CamelModel):
    full_name: str = Field(min_length=1)
    phone: str | None = None
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str | None = None
    postal_code: str = Field(min_length=1)
    country: str = Field(min_length=1)
    is_default: bool = False


class CreateProductRequest(CamelModel):
    name: str = Field(min_length=1)
    description: str | None = None
    image_url: str | None = None
    price: float = Field(ge=0)
    stock: int = Field(ge=0, default=0)


class RestockRequest(CamelModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductView(CamelModel):
    id: str
    name: str
    description: str | None = None
    image_url: str | None = None
    price: float
    stock: int
    is_active: bool

    @classmethod
    def of(cls, product) -> "ProductView":
        return cls(
            id=str(product.id),
            name=product.name,
            description=product.description,
            image_url=product.image_url,
            price=product.price,
            stock=product.stock,
            is_active=product.is_active,
        )


class AddressView(CamelModel):
    id: str | None = None
    full_name: str
    phone: str | None = None
    street: str
    city: str
    state: str | None = None
    postal_code: str
    country: str
    is_default: bool | None = None

    @classmethod
    def of(cls, address) -> "AddressView":
        return cls(id=str(address.id), is_default=address.is_default, **address.snapshot())

    @classmethod
    def of_snapshot(cls, snapshot) -> "AddressView | None":
        if snapshot is None:
            return None
        return cls(
            full_name=snapshot.full_name,
            phone=snapshot.phone,
            street=snapshot.street,
            city=snapshot.city,
            state=snapshot.state,
            postal_code=snapshot.postal_code,
            country=snapshot.country,
        )


class CartItemView(CamelModel):
    id: str
    product_id: str
    product_name: str | None = None
    quantity: int
    unit_price: float
    line_total: float


class CartView(CamelModel):
    id: str
    customer_id: str
    items: list[CartItemView]
    item_count: int
    subtotal: float
    coupon_code: str | None = None

    @classmethod
    def of(cls, cart) -> "CartView":
        return cls(
            id=str(cart.id),
            customer_id=str(cart.customer_id),
            items=[
                CartItemView(
                    id=str(item.id),
                    product_id=str(item.product_id),
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    line_total=item.line_total,
                )
                for item in cart.items
            ],
            item_count=cart.item_count,
            subtotal=cart.subtotal,
            coupon_code=cart.coupon_code,
        )


class CouponView(CamelModel):
    id: str
    code: str
    description: str | None = None
    coupon_type: str
    value: float
    min_order_amount: float | None = None
    max_discount: float | None = None
    usage_limit: int | None = None
    usage_count: int
    valid_from: datetime
    valid_until: datetime
    is_active: bool

    @classmethod
    def of(cls, coupon) -> "CouponView":
        return cls(
            id=str(coupon.id),
            code=coupon.code,
            description=coupon.description,
            coupon_type=coupon.coupon_type,
            value=coupon.value,
            min_order_amount=coupon.min_order_amount,
            max_discount=coupon.max_discount,
            usage_limit=coupon.usage_limit,
            usage_count=coupon.usage_count or 0,
            valid_from=coupon.valid_from,
            valid_until=coupon.valid_until,
            is_active=coupon.is_active,
        )


class CouponQuoteView(CamelModel):
    code: str
    description: str | None = None
    coupon_type: str
    value: float
    discount: float
    min_order_amount: float | None = None
    max_discount: float | None = None

    @classmethod
    def of(cls, quote) -> "CouponQuoteView":
        return cls(
            code=quote.code,
            description=quote.description,
            coupon_type=quote.coupon_type,
            value=quote.value,
            discount=quote.discount,
            min_order_amount=quote.min_order_amount,
            max_discount=quote.max_discount,
        )


class OrderItemView(CamelModel):
    id: str
    product_id: str
    product_name: str
    product_image: str | None = None
    unit_price: float
    quantity: int
    line_total: float

    @classmethod
    def of(cls, item) -> "OrderItemView":
        return cls(
            id=str(item.id),
            product_id=str(item.product_id),
            product_name=item.product_name,
            product_image=item.product_image,
            unit_price=item.unit_price,
            quantity=item.quantity,
            line_total=item.line_total,
        )


class OrderView(CamelModel):
    id: str
    order_number: str
    customer_id: str
    status: str
    payment_status: str
    payment_method: str
    payment_id: str | None = None
    items: list[OrderItemView]
    shipping_address_id: str
    billing_address_id: str
    shipping_address: AddressView | None = None
    billing_address: AddressView | None = None
    subtotal: float
    tax: float
    shipping_fee: float
    discount: float
    total: float
    currency: str
    coupon_code: str | None = None
    notes: str | None = None
    tracking_number: str | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None
    refunded_at: datetime | None = None

    @classmethod
    def of(cls, order) -> "OrderView":
        pricing = order.pricing
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            customer_id=str(order.customer_id),
            status=order.status,
            payment_status=order.payment_status,
            payment_method=order.payment_method,
            payment_id=order.payment_id,
            items=[OrderItemView.of(item) for item in order.items],
            shipping_address_id=str(order.shipping_address_id),
            billing_address_id=str(order.billing_address_id),
            shipping_address=AddressView.of_snapshot(order.shipping_address),
            billing_address=AddressView.of_snapshot(order.billing_address),
            subtotal=pricing.subtotal,
            tax=pricing.tax,
            shipping_fee=pricing.shipping_fee,
            discount=pricing.discount,
            total=pricing.total,
            currency=pricing.currency,
            coupon_code=order.coupon_code,
            notes=order.notes,
            tracking_number=order.tracking_number,
            cancellation_reason=order.cancellation_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
            refunded_at=order.refunded_at,
        )


class OrderPage(CamelModel):
    orders: list[OrderView]
    page: int
    limit: int
    total: int
    pages: int


class AppliedCouponView(CamelModel):
    cart: CartView
    coupon: CouponQuoteView


class ShipmentView(CamelModel):
    id: str
    order_id: str
    order_number: str
    carrier: str
    tracking_number: str
    tracking_url: str | None = None
    status: str
    estimated_delivery: datetime | None = None
    shipped_at: datetime | None = None
    delivered_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def of(cls, shipment) -> "ShipmentView":
        return cls(
            id=str(shipment.id),
            order_id=str(shipment.order_id),
            order_number=shipment.order_number,
            carrier=shipment.carrier,
            tracking_number=shipment.tracking_number,
            tracking_url=shipment.tracking_url,
            status=shipment.status,
            estimated_delivery=shipment.estimated_delivery,
            shipped_at=shipment.shipped_at,
            delivered_at=shipment.delivered_at,
            created_at=shipment.created_at,
            updated_at=shipment.updated_at,
        )


class TrackingView(CamelModel):
    """What a tracking-number lookup shows: the parcel and the order it carries."""

    shipment: ShipmentView
    order_status: str
    items: list[OrderItemView]
    shipping_address: AddressView | None = None

    @classmethod
    def of(cls, shipment, order) -> "TrackingView":
        return cls(
            shipment=ShipmentView.of(shipment),
            order_status=order.status,
            items=[OrderItemView.of(item) for item in order.items],
            shipping_address=AddressView.of_snapshot(order.shipping_address),
        )
