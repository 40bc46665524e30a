"""Address book: command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from storefront.customer.address import Address
from storefront.domain import storefront


@storefront.command(part_of="Address")
class AddAddress:
    customer_id = Identifier(required=True)
    full_name = String(required=True, max_length=150)
    phone = String(max_length=20)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    is_default = Boolean(default=False)


@storefront.command_handler(part_of=Address)
class ManageAddressHandler:
    @handle(AddAddress)
    def add_address(self, command):
        address = Address.create(
            customer_id=command.customer_id,
            full_name=command.full_name,
            phone=command.phone,
            street=command.street,
            city=command.city,
            state=command.state,
            postal_code=command.postal_code,
            country=command.country,
            is_default=bool(command.is_default),
        )
        current_domain.repository_for(Address).add(address)
        return str(address.id)
