"""
Boundary Validators
===================
Stateless string checks used to sanitise input before it reaches the core.
"""

import ipaddress
import re
import uuid
from typing import Optional
from urllib.parse import urlparse

_BASE64_RE = re.compile(r'^[A-Za-z0-9+/]*={0,2}$')
_EMAIL_RE = re.compile(r'^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$')
_NUMERIC_RE = re.compile(r'^\d+$')
_CODE_SEPARATORS_RE = re.compile(r'[\s-]')


def is_base64(value: Optional[str]) -> bool:
    """True if value is a padded standard Base64 string."""
    if not value or not value.strip():
        return False
    value = value.strip()
    return len(value) % 4 == 0 and bool(_BASE64_RE.match(value))


def is_guid(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def is_email(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(_EMAIL_RE.match(value))


def is_numeric(value: Optional[str]) -> bool:
    if not value:
        return False
    return bool(_NUMERIC_RE.match(value))


def is_ip_address(value: Optional[str]) -> bool:
    if not value:
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def is_url(value: Optional[str]) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not value:
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def extract_email_domain(email: str) -> str:
    """
    Return the domain part of an email address.

    Raises:
        ValueError: If the value is not an email address
    """
    if not is_email(email):
        raise ValueError("Not a valid email address")
    return email.rsplit("@", 1)[1].lower()


def normalize_otp_code(code: Optional[str]) -> str:
    """
    Strip the separators users type into codes ("123 456", "123-456").

    Args:
        code: Raw submitted code

    Returns:
        Code with whitespace and dashes removed ("" for None)
    """
    if code is None:
        return ""
    return _CODE_SEPARATORS_RE.sub("", code)


def is_otp_code(code: Optional[str], digits: int = 6) -> bool:
    """True if the normalised code has exactly ``digits`` ASCII digits."""
    normalized = normalize_otp_code(code)
    return len(normalized) == digits and normalized.isascii() and normalized.isdigit()


def normalize_endpoint(endpoint: str) -> str:
    """
    Canonical form of an endpoint path used as a claim lookup key.

    Leading slash enforced, trailing slash trimmed, surrounding whitespace removed.
    """
    path = endpoint.strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def normalize_operation(operation: str) -> str:
    """Operations are verbs (GET, POST, ...) compared case-insensitively."""
    return operation.strip().upper()
