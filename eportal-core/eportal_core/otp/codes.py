"""
TOTP Code Derivation
====================
Secret generation, RFC 6238 code derivation and constant-time comparison.
"""

import base64
import hashlib
import hmac
import math
import secrets
from typing import Dict, Optional

import pyotp

from eportal_core.errors import InvalidStateError
from eportal_core.config import MIN_SECRET_BYTES

DIGESTS: Dict[str, object] = {
    "SHA1": hashlib.sha1,
    "SHA256": hashlib.sha256,
    "SHA512": hashlib.sha512,
}


def generate_secret(length: int = MIN_SECRET_BYTES) -> bytes:
    """
    Generate a cryptographically random shared secret.

    Args:
        length: Secret size in bytes (at least 20 = 160 bits)

    Returns:
        Raw secret bytes
    """
    if length < MIN_SECRET_BYTES:
        raise ValueError(f"Secret must be at least {MIN_SECRET_BYTES} bytes")
    return secrets.token_bytes(length)


def secret_to_base32(secret: bytes) -> str:
    """Unpadded Base32, the form authenticator apps expect."""
    return base64.b32encode(secret).decode("ascii").rstrip("=")


def check_secret(secret: bytes) -> None:
    """Raise InvalidStateError for a stored secret that cannot be used."""
    if not isinstance(secret, (bytes, bytearray)) or len(secret) < MIN_SECRET_BYTES:
        raise InvalidStateError("Stored OTP secret is malformed or too short")


def time_step(timestamp: float, step_seconds: int = 30) -> int:
    """Counter for a Unix timestamp: floor(timestamp / step_seconds)."""
    return int(math.floor(timestamp / step_seconds))


def derive_code(
    secret: bytes,
    counter: int,
    digits: int = 6,
    algorithm: str = "SHA1",
) -> str:
    """
    HOTP value of a counter, zero-padded to ``digits``.

    Args:
        secret: Raw secret bytes
        counter: 64-bit moving factor (the time step for TOTP)
        digits: Code length
        algorithm: SHA1, SHA256 or SHA512

    Returns:
        Decimal code string
    """
    hotp = pyotp.HOTP(
        secret_to_base32(secret),
        digits=digits,
        digest=DIGESTS[algorithm],
    )
    return hotp.at(counter)


def codes_match(expected: str, submitted: str) -> bool:
    """Constant-time comparison of two codes."""
    return hmac.compare_digest(expected.encode("ascii"), submitted.encode("ascii"))


def build_provisioning_uri(
    secret: bytes,
    account_name: str,
    issuer: str,
    digits: int = 6,
    step_seconds: int = 30,
    algorithm: str = "SHA1",
    image: Optional[str] = None,
) -> str:
    """
    Build an otpauth:// URI for QR-code enrollment.

    Args:
        secret: Raw secret bytes
        account_name: Label shown in the authenticator app
        issuer: Issuer shown in the authenticator app
        digits: Code length
        step_seconds: TOTP period
        algorithm: HMAC algorithm name
        image: Optional logo URL understood by some apps

    Returns:
        Provisioning URI
    """
    totp = pyotp.TOTP(
        secret_to_base32(secret),
        digits=digits,
        digest=DIGESTS[algorithm],
        interval=step_seconds,
    )
    return totp.provisioning_uri(name=account_name, issuer_name=issuer, image=image)
