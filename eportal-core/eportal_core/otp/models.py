"""
OTP Models
==========
Result types and rejection reasons for TOTP validation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class RejectionReason(str, Enum):
    """Why a submitted code was not accepted."""
    NO_AUTHENTICATOR = "no_authenticator"
    REPLAYED = "replayed"
    THROTTLED = "throttled"
    INVALID_CODE = "invalid_code"
    CONFLICT = "conflict"
    INVALID_STATE = "invalid_state"


# Rejections that count toward the per-user failure limit
COUNTED_FAILURES = frozenset({RejectionReason.INVALID_CODE, RejectionReason.REPLAYED})


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating a submitted code."""
    accepted: bool
    reason: Optional[RejectionReason] = None
    step: Optional[int] = None          # Time step the code matched
    retry_after: Optional[int] = None   # Seconds, set for THROTTLED only

    @classmethod
    def accept(cls, step: int) -> "ValidationResult":
        return cls(accepted=True, step=step)

    @classmethod
    def reject(
        cls,
        reason: RejectionReason,
        step: Optional[int] = None,
        retry_after: Optional[int] = None,
    ) -> "ValidationResult":
        return cls(accepted=False, reason=reason, step=step, retry_after=retry_after)

    @property
    def outcome(self) -> str:
        return "accepted" if self.accepted else self.reason.value
