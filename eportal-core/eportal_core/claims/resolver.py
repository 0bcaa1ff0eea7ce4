"""
Claim Resolver
==============
Permit or deny a principal's request for an (endpoint, operation) pair.

Unmapped endpoints are denied. Mappings flagged step-up-required also
need a fresh TOTP code from the principal's verified authenticator.
"""

from typing import Optional

import structlog

from eportal_core.audit import AuditEventType, AuditLogger
from eportal_core.metrics import record_decision
from eportal_core.otp import OTPVerifier, RejectionReason
from eportal_core.validation import normalize_otp_code
from .models import AuthorizationDecision, DenyReason, Principal
from .store import ClaimStore

logger = structlog.get_logger(__name__)


class ClaimResolver:
    """
    Evaluates principal claims against the claim store.

    Example:
        resolver = ClaimResolver(store, verifier)
        decision = resolver.authorize(principal, "/admin/users", "DELETE", step_up_code="123456")
        if not decision.permitted:
            ...
    """

    def __init__(
        self,
        store: ClaimStore,
        verifier: Optional[OTPVerifier] = None,
        audit: Optional[AuditLogger] = None,
    ):
        self.store = store
        self.verifier = verifier
        self.audit = audit

    def authorize(
        self,
        principal: Principal,
        endpoint: str,
        operation: str,
        step_up_code: Optional[str] = None,
        timestamp: Optional[float] = None,
    ) -> AuthorizationDecision:
        """
        Decide whether ``principal`` may perform ``operation`` on ``endpoint``.

        Args:
            principal: Caller identity and claim ids
            endpoint: Requested endpoint path
            operation: Requested operation (HTTP verb)
            step_up_code: TOTP code, required for step-up mappings
            timestamp: Unix timestamp used for step-up validation

        Returns:
            AuthorizationDecision
        """
        record = self.store.find_by_endpoint_operation(endpoint, operation)
        if record is None:
            return self._decide(
                principal, endpoint, operation,
                AuthorizationDecision.deny(DenyReason.MAPPING_NOT_FOUND),
            )

        if not principal.holds(record.id):
            return self._decide(
                principal, endpoint, operation,
                AuthorizationDecision.deny(DenyReason.CLAIM_MISMATCH, claim_id=record.id),
            )

        if not record.step_up_required:
            return self._decide(principal, endpoint, operation, AuthorizationDecision.permit(record.id))

        return self._decide(
            principal, endpoint, operation,
            self._step_up(principal, record.id, step_up_code, timestamp),
        )

    def _step_up(
        self,
        principal: Principal,
        claim_id: str,
        step_up_code: Optional[str],
        timestamp: Optional[float],
    ) -> AuthorizationDecision:
        if self.verifier is None or not self.verifier.has_verified_authenticator(principal.user_id):
            return AuthorizationDecision.deny(DenyReason.STEP_UP_UNAVAILABLE, claim_id=claim_id)

        if not normalize_otp_code(step_up_code):
            return AuthorizationDecision.deny(DenyReason.STEP_UP_REQUIRED, claim_id=claim_id)

        result = self.verifier.verify(principal.user_id, step_up_code, timestamp)
        if result.accepted:
            return AuthorizationDecision.permit(claim_id)

        # Authenticator revoked between the two reads
        if result.reason == RejectionReason.NO_AUTHENTICATOR:
            return AuthorizationDecision.deny(DenyReason.STEP_UP_UNAVAILABLE, claim_id=claim_id)

        return AuthorizationDecision.deny(
            DenyReason.STEP_UP_FAILED,
            claim_id=claim_id,
            detail=result.reason.value,
            retry_after=result.retry_after,
        )

    def _decide(
        self,
        principal: Principal,
        endpoint: str,
        operation: str,
        decision: AuthorizationDecision,
    ) -> AuthorizationDecision:
        reason = decision.reason.value if decision.reason else None
        record_decision(decision.decision.value, reason)

        log = logger.info if decision.permitted else logger.warning
        log(
            "Authorization decided",
            user_id=principal.user_id,
            endpoint=endpoint,
            operation=operation,
            decision=decision.decision.value,
            reason=reason,
            detail=decision.detail,
        )
        if self.audit:
            self.audit.log(
                AuditEventType.ACCESS_PERMITTED if decision.permitted else AuditEventType.ACCESS_DENIED,
                outcome="success" if decision.permitted else "blocked",
                actor_id=principal.user_id,
                resource=f"{operation} {endpoint}",
                payload={"claim_id": decision.claim_id, "reason": reason, "detail": decision.detail},
            )
        return decision
