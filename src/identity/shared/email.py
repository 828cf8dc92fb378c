"""EmailAddress value object for validated email addresses."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from identity.domain import identity

_FORBIDDEN = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


@identity.value_object
class EmailAddress:
    """A structurally valid email address: one @, non-empty local and domain
    parts, a dotted domain, no whitespace, no consecutive dots."""

    address: String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        email = self.address or ""

        if any(ch.isspace() for ch in email) or email.count("@") != 1:
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

        local_part, domain_part = email.split("@", 1)
        if not local_part or not domain_part or "." not in domain_part:
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

        for part in (local_part, domain_part):
            if part.startswith(".") or part.endswith(".") or ".." in part:
                raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

        if any(label.startswith("-") or label.endswith("-") for label in domain_part.split(".")):
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

        if any(ch in email for ch in _FORBIDDEN):
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})
