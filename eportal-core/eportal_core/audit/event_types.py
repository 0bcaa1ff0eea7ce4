"""
Audit Event Types
=================
Security events emitted by the auth core.
"""

from enum import Enum


class AuditEventType(str, Enum):
    """Audit event types for second-factor and authorization decisions."""
    # Enrollment lifecycle
    OTP_ENROLLMENT_STARTED = "otp.enrollment_started"
    OTP_ENROLLMENT_CONFIRMED = "otp.enrollment_confirmed"
    OTP_REVOKED = "otp.revoked"

    # Code validation
    OTP_VERIFIED = "otp.verified"
    OTP_REJECTED = "otp.rejected"

    # Authorization
    ACCESS_PERMITTED = "access.permitted"
    ACCESS_DENIED = "access.denied"

    # Security
    RATE_LIMIT_HIT = "security.rate_limit"
