"""
Authenticator Enrollment
========================
Begin, confirm and revoke TOTP authenticators.
"""

from .models import EnrollmentTicket, EnrollmentResult
from .machine import EnrollmentManager

__all__ = [
    "EnrollmentTicket",
    "EnrollmentResult",
    "EnrollmentManager",
]
