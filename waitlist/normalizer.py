"""Email validation and canonicalization for waitlist signups.

Checks run in a fixed order and the first violated rule is reported, so the
same input always fails with the same reason. Validation is purely syntactic:
no DNS lookups and no IDNA conversion.
"""

import re
from email import _header_value_parser as parser
from email.errors import HeaderParseError
from email.headerregistry import HeaderRegistry
from email.utils import quote
from enum import Enum
from typing import NewType

CanonicalEmail = NewType("CanonicalEmail", str)

MAX_EMAIL_LENGTH = 254
MAX_LOCAL_PART_LENGTH = 64
MAX_DOMAIN_LENGTH = 255

_header_factory = HeaderRegistry()

# The stdlib parser signals some malformed input with these instead of defects
_PARSE_ERRORS = (HeaderParseError, ValueError, IndexError, AttributeError)

_ATEXT = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~-]+"
_DOT_ATOM = re.compile(rf"{_ATEXT}(?:\.{_ATEXT})*\Z")


class FailureReason(str, Enum):
    """Why a raw string could not become a canonical email."""
    EMPTY = "empty"
    TOO_LONG = "too_long"
    INVALID_FORMAT = "invalid_format"
    INVALID_LOCAL_PART = "invalid_local_part"
    INVALID_DOMAIN = "invalid_domain"
    INVALID_DOMAIN_NO_DOT = "invalid_domain_no_dot"


FAILURE_MESSAGES = {
    FailureReason.EMPTY: "email cannot be empty",
    FailureReason.TOO_LONG: f"email is too long (max {MAX_EMAIL_LENGTH} characters)",
    FailureReason.INVALID_FORMAT: "invalid email format",
    FailureReason.INVALID_LOCAL_PART: "email local part is invalid",
    FailureReason.INVALID_DOMAIN: "email domain is invalid",
    FailureReason.INVALID_DOMAIN_NO_DOT: "email domain must contain at least one dot",
}


class EmailValidationError(ValueError):
    """Raised when an email address is rejected. Carries the failure reason."""

    def __init__(self, reason: FailureReason):
        self.reason = reason
        self.message = FAILURE_MESSAGES[reason]
        super().__init__(self.message)


def _parse_mailbox(value: str) -> str | None:
    """Parse a single RFC 5322 mailbox and return its addr-spec, or None."""
    try:
        address_list, _ = parser.get_address_list(value)
        header = _header_factory("to", value)
    except _PARSE_ERRORS:
        return None

    # Any defect means the parser had to recover from invalid syntax
    if header.defects:
        return None
    # A separator means a list, even when the other members are empty
    if any(token.token_type == "list-separator" for token in address_list):
        return None
    # Exactly one mailbox, not wrapped in a group
    if len(header.groups) != 1 or header.groups[0].display_name is not None:
        return None
    if len(header.addresses) != 1:
        return None

    address = header.addresses[0]
    if not address.username or not address.domain:
        return None
    # No IDNA or SMTPUTF8, so both halves must already be ASCII
    if not address.username.isascii() or not address.domain.isascii():
        return None

    local_part = address.username
    if not _DOT_ATOM.match(local_part):
        local_part = '"' + quote(local_part) + '"'
    return f"{local_part}@{address.domain}"


def normalize_email(raw: str | None) -> CanonicalEmail:
    """Validate *raw* and return it in canonical lowercase form.

    Raises:
        EmailValidationError: with the reason of the first rule the input breaks
    """
    email = (raw or "").strip()

    if not email:
        raise EmailValidationError(FailureReason.EMPTY)

    if len(email) > MAX_EMAIL_LENGTH:
        raise EmailValidationError(FailureReason.TOO_LONG)

    # Accepts "Name <addr>" and keeps only the address
    address = _parse_mailbox(email)
    if address is None:
        raise EmailValidationError(FailureReason.INVALID_FORMAT)

    parts = address.split("@")
    if len(parts) != 2:
        raise EmailValidationError(FailureReason.INVALID_FORMAT)
    local_part, domain = parts

    if not local_part or len(local_part) > MAX_LOCAL_PART_LENGTH:
        raise EmailValidationError(FailureReason.INVALID_LOCAL_PART)

    if not domain or len(domain) > MAX_DOMAIN_LENGTH:
        raise EmailValidationError(FailureReason.INVALID_DOMAIN)

    if "." not in domain:
        raise EmailValidationError(FailureReason.INVALID_DOMAIN_NO_DOT)

    return CanonicalEmail(address.lower())
