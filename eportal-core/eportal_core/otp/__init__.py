"""
TOTP Engine
===========
Time-based one-time passwords (RFC 6238) with windowed validation,
replay protection and failure throttling.
"""

from .models import RejectionReason, ValidationResult, COUNTED_FAILURES
from .codes import (
    generate_secret,
    secret_to_base32,
    time_step,
    derive_code,
    codes_match,
    build_provisioning_uri,
)
from .engine import TOTPEngine
from .verifier import OTPVerifier

__all__ = [
    # Models
    "RejectionReason",
    "ValidationResult",
    "COUNTED_FAILURES",
    # Codes
    "generate_secret",
    "secret_to_base32",
    "time_step",
    "derive_code",
    "codes_match",
    "build_provisioning_uri",
    # Engine
    "TOTPEngine",
    "OTPVerifier",
]
