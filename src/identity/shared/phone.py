"""PhoneNumber value object for E.164 phone numbers."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity

E164_PATTERN = re.compile(r"^\+[1-9]\d{1,14}$")


@identity.value_object
class PhoneNumber:
    """Phone number in E.164 form: a leading +, then up to 15 digits, no separators.

    Example: +79161234567
    """

    number: String(required=True, max_length=16)

    @invariant.post
    def validate_e164_format(self):
        if not E164_PATTERN.match(self.number or ""):
            raise ValidationError({"phone_number": ["Phone number must be in E.164 format (+79161234567)"]})
