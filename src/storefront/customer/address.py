"""Address aggregate: shipping and billing addresses owned by a customer.

Checkout refers to addresses by id and copies them onto the order, so later
edits never alter where a past order was shipped.
"""

from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront


@storefront.aggregate
class Address:
    customer_id = Identifier(required=True)
    full_name = String(required=True, max_length=150)
    phone = String(max_length=20)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    state = String(max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)
    is_default = Boolean(default=False)
    created_at = DateTime()

    @classmethod
    def create(cls, customer_id, full_name, street, city, postal_code, country, state=None, phone=None, is_default=False):
        return cls(
            customer_id=customer_id,
            full_name=full_name,
            phone=phone,
            street=street,
            city=city,
            state=state,
            postal_code=postal_code,
            country=country,
            is_default=is_default,
            created_at=datetime.now(UTC),
        )

    def belongs_to(self, customer_id):
        return str(self.customer_id) == str(customer_id)

    def snapshot(self):
        return {
            "full_name": self.full_name,
            "phone": self.phone,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "postal_code": self.postal_code,
            "country": self.country,
        }


@storefront.repository(part_of=Address)
class AddressRepository:
    def for_customer(self, customer_id) -> list[Address]:
        return self._dao.query.filter(customer_id=str(customer_id)).all().items

    def owned_by(self, address_id, customer_id, label="Address") -> Address:
        """Fetch an address, treating someone else's address as missing."""
        try:
            address = self.get(address_id)
        except ObjectNotFoundError:
            address = None

        if address is None or not address.belongs_to(customer_id):
            raise ObjectNotFoundError(f"{label} not found")
        return address


def find_owned_address(address_id, customer_id, label="Address") -> Address:
    return current_domain.repository_for(Address).owned_by(address_id, customer_id, label=label)
