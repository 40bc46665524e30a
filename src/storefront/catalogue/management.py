"""Catalogue management: commands and handler for products and their stock."""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.lookup import load_product
from storefront.catalogue.product import Product
from storefront.domain import logger, storefront


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0, min_value=0)
    description = String(max_length=2000)
    image_url = String(max_length=500)


@storefront.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.create(
            name=command.name,
            price=command.price,
            stock=command.stock or 0,
            description=command.description,
            image_url=command.image_url,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        product.restock(command.quantity)
        repo.add(product)
        logger.info("product_restocked", product_id=str(product.id), quantity=command.quantity, stock=product.stock)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        product.deactivate()
        repo.add(product)
