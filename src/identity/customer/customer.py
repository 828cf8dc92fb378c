"""Customer aggregate.

Email and phone formats are enforced by the EmailAddress and PhoneNumber value
objects; uniqueness of both is enforced by the store.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Auto, DateTime, String, Text

from identity.domain import identity
from identity.shared.email import EmailAddress
from identity.shared.phone import PhoneNumber

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 150


@identity.aggregate
class Customer:
    """A registered customer.

    The identity is assigned by the store on insert, so a Customer built from
    a request carries no `customer_id` until it has been created.
    """

    customer_id = Auto(identifier=True, increment=True)
    name = String(max_length=NAME_MAX_LENGTH, sanitize=False)
    email = String(max_length=254, sanitize=False)
    phone_number = String(sanitize=False)
    address = Text(sanitize=False, default="")
    registered_at = DateTime()

    @invariant.post
    def name_length_is_within_bounds(self):
        name = (self.name or "").strip()
        if not NAME_MIN_LENGTH <= len(name) <= NAME_MAX_LENGTH:
            raise ValidationError({"name": [f"Name must be {NAME_MIN_LENGTH}-{NAME_MAX_LENGTH} characters"]})

    @invariant.post
    def email_is_well_formed(self):
        try:
            EmailAddress(address=self.email)
        except ValidationError:
            raise ValidationError({"email": ["Invalid email format"]})

    @invariant.post
    def phone_number_is_e164(self):
        try:
            PhoneNumber(number=self.phone_number)
        except ValidationError:
            raise ValidationError({"phone_number": ["Phone number must be in E.164 format (+79161234567)"]})
