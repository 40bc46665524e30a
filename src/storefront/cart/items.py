"""Cart lines: commands and handler.

Stock is checked when a line is added or resized so customers learn early
that an item is short; the binding check happens again at checkout.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.lookup import load_product
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class OpenCart:
    """Return the customer's cart, creating it on first access."""

    customer_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)


@storefront.command(part_of="Cart")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier(required=True)


def existing_cart(customer_id) -> Cart:
    cart = current_domain.repository_for(Cart).for_customer(customer_id)
    if cart is None:
        raise ObjectNotFoundError("Cart not found")
    return cart


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(OpenCart)
    def open_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id)
        if cart is None:
            cart = Cart.create(customer_id=command.customer_id)
            repo.add(cart)
        return str(cart.id)

    @handle(AddToCart)
    def add_to_cart(self, command):
        quantity = command.quantity or 1
        product = load_product(command.product_id)
        if not product.is_active:
            raise ValidationError({"product": [f"{product.name} is no longer available"]})
        if product.stock < quantity:
            raise ValidationError({"quantity": [f"Only {product.stock} items available in stock"]})

        repo = current_domain.repository_for(Cart)
        cart = repo.for_customer(command.customer_id) or Cart.create(customer_id=command.customer_id)

        existing = cart.line_for(product.id)
        if existing and product.stock < existing.quantity + quantity:
            raise ValidationError(
                {"quantity": [f"Cannot add more items. Only {product.stock} available in stock"]}
            )

        item = cart.add_item(
            product_id=product.id,
            product_name=product.name,
            unit_price=product.price,
            quantity=quantity,
        )
        repo.add(cart)
        return str(item.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = existing_cart(command.customer_id)
        item = cart.find_item(command.item_id)

        product = load_product(item.product_id)
        if product.stock < command.quantity:
            raise ValidationError({"quantity": [f"Only {product.stock} items available in stock"]})

        cart.update_item_quantity(command.item_id, command.quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = existing_cart(command.customer_id)
        cart.remove_item(command.item_id)
        repo.add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = existing_cart(command.customer_id)
        cart.clear()
        repo.add(cart)
