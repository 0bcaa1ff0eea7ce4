"""
Enrollment Models
=================
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from eportal_core.otp import RejectionReason
from eportal_core.vault import AuthenticatorStatus


@dataclass(frozen=True)
class EnrollmentTicket:
    """
    Provisioning data handed to the user exactly once.

    The secret is not retrievable after this object is discarded.
    """
    user_id: str
    secret_b32: str = field(repr=False)
    provisioning_uri: str = field(repr=False)
    created_at: datetime
    replaced_previous: bool = False


@dataclass(frozen=True)
class EnrollmentResult:
    """Outcome of confirming an enrollment."""
    verified: bool
    reason: Optional[RejectionReason] = None
    status: Optional[AuthenticatorStatus] = None
    retry_after: Optional[int] = None
