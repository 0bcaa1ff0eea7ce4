"""
Claim Models
============
Endpoint/operation claims, principals and authorization decisions.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Optional


class Decision(str, Enum):
    PERMIT = "permit"
    DENY = "deny"


class DenyReason(str, Enum):
    """Why access was denied."""
    MAPPING_NOT_FOUND = "mapping_not_found"
    CLAIM_MISMATCH = "claim_mismatch"
    STEP_UP_REQUIRED = "step_up_required"        # Mapping needs a code, none supplied
    STEP_UP_UNAVAILABLE = "step_up_unavailable"  # No verified authenticator to check against
    STEP_UP_FAILED = "step_up_failed"


@dataclass(frozen=True)
class ClaimRecord:
    """Grants ``operation`` on ``endpoint`` to principals holding ``id``."""
    id: str
    endpoint: str
    operation: str
    step_up_required: bool = False
    revoked: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self):
        return (self.endpoint, self.operation)

    def revoke(self) -> "ClaimRecord":
        return replace(self, revoked=True)


@dataclass(frozen=True)
class Principal:
    """Authenticated caller as supplied by the identity layer."""
    user_id: str
    claims: FrozenSet[str] = frozenset()

    def holds(self, claim_id: str) -> bool:
        return claim_id in self.claims


@dataclass(frozen=True)
class AuthorizationDecision:
    """Result of an authorization check."""
    decision: Decision
    reason: Optional[DenyReason] = None
    claim_id: Optional[str] = None
    detail: Optional[str] = None        # Underlying OTP rejection reason, if any
    retry_after: Optional[int] = None

    @property
    def permitted(self) -> bool:
        return self.decision == Decision.PERMIT

    @classmethod
    def permit(cls, claim_id: str) -> "AuthorizationDecision":
        return cls(decision=Decision.PERMIT, claim_id=claim_id)

    @classmethod
    def deny(
        cls,
        reason: DenyReason,
        claim_id: Optional[str] = None,
        detail: Optional[str] = None,
        retry_after: Optional[int] = None,
    ) -> "AuthorizationDecision":
        return cls(
            decision=Decision.DENY,
            reason=reason,
            claim_id=claim_id,
            detail=detail,
            retry_after=retry_after,
        )
