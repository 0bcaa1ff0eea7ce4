"""
Enrollment State Machine
========================
Lifecycle of a user's authenticator: PENDING -> VERIFIED -> REVOKED,
with PENDING -> REVOKED for abandoned enrollments.

Every transition is a single compare-and-swap on the vault record, so
secret and status always change together.
"""

import time
from datetime import datetime, timezone
from typing import Optional

import structlog

from eportal_core.audit import AuditEventType, AuditLogger
from eportal_core.errors import AlreadyEnrolledError, EnrollmentConflictError
from eportal_core.metrics import record_transition
from eportal_core.otp import (
    OTPVerifier,
    RejectionReason,
    generate_secret,
    secret_to_base32,
)
from eportal_core.vault import Authenticator, AuthenticatorStatus
from .models import EnrollmentResult, EnrollmentTicket

logger = structlog.get_logger(__name__)

# Re-read and retry once when a revocation loses a CAS race
REVOKE_ATTEMPTS = 2


class EnrollmentManager:
    """
    Drives authenticator enrollment, confirmation and revocation.

    Example:
        manager = EnrollmentManager(verifier)
        ticket = manager.begin_enrollment("42", account_name="jane@example.com")
        # user scans ticket.provisioning_uri, then types a code
        result = manager.confirm_enrollment("42", "492039")
    """

    def __init__(self, verifier: OTPVerifier, audit: Optional[AuditLogger] = None):
        self.verifier = verifier
        self.engine = verifier.engine
        self.vault = verifier.vault
        self.audit = audit or verifier.audit

    def status(self, user_id: str) -> Optional[AuthenticatorStatus]:
        """Current lifecycle state, or None if the user never enrolled."""
        authenticator = self.vault.get(user_id)
        return authenticator.status if authenticator else None

    def begin_enrollment(
        self,
        user_id: str,
        account_name: Optional[str] = None,
        reenroll: bool = False,
    ) -> EnrollmentTicket:
        """
        Create a fresh PENDING authenticator and return its secret once.

        Any previous record is replaced in the same write, so an old
        VERIFIED secret never coexists with the new PENDING one.

        Args:
            user_id: User enrolling
            account_name: Label for the authenticator app (defaults to user_id)
            reenroll: Explicitly replace a VERIFIED authenticator

        Returns:
            EnrollmentTicket carrying the secret and provisioning URI

        Raises:
            AlreadyEnrolledError: A VERIFIED authenticator exists and reenroll is False
            EnrollmentConflictError: Another request changed the record concurrently
        """
        current = self.vault.get(user_id)
        if current is not None and current.verified and not reenroll:
            logger.warning("Enrollment refused, already enrolled", user_id=user_id)
            raise AlreadyEnrolledError(user_id)

        now = datetime.now(timezone.utc)
        secret = generate_secret(self.engine.config.secret_bytes)
        pending = Authenticator(
            user_id=user_id,
            secret_key=secret,
            status=AuthenticatorStatus.PENDING,
            created_at=now,
        )

        if current is None:
            stored = self.vault.put_if_absent(pending)
        else:
            stored = self.vault.compare_and_swap(user_id, current.version, pending)
        if not stored:
            raise EnrollmentConflictError(user_id, "begin_enrollment")

        replaced = current is not None and current.is_active
        # New secret, new replay history
        self.verifier.replay_store.clear(user_id)
        self.verifier.limiter.reset(user_id)

        record_transition("enrolled")
        if replaced:
            record_transition(f"{current.status.value}_replaced")
        logger.info(
            "OTP enrollment started",
            user_id=user_id,
            replaced_status=current.status.value if current else None,
        )
        if self.audit:
            self.audit.log(
                AuditEventType.OTP_ENROLLMENT_STARTED,
                actor_id=user_id,
                resource="authenticator",
                payload={"reenroll": reenroll, "replaced": replaced},
            )

        return EnrollmentTicket(
            user_id=user_id,
            secret_b32=secret_to_base32(secret),
            provisioning_uri=self.engine.provisioning_uri(secret, account_name or user_id),
            created_at=now,
            replaced_previous=replaced,
        )

    def confirm_enrollment(
        self,
        user_id: str,
        submitted_code: Optional[str],
        timestamp: Optional[float] = None,
    ) -> EnrollmentResult:
        """
        Move a PENDING authenticator to VERIFIED if the code validates.

        On any rejection the record is left untouched.

        Args:
            user_id: User confirming
            submitted_code: First code from the authenticator app
            timestamp: Unix timestamp of the attempt (defaults to now)

        Returns:
            EnrollmentResult; CONFLICT when the record is not PENDING anymore
            or a concurrent confirmation won
        """
        now = time.time() if timestamp is None else timestamp
        current = self.vault.get(user_id)

        if current is None or current.status == AuthenticatorStatus.REVOKED:
            return EnrollmentResult(verified=False, reason=RejectionReason.NO_AUTHENTICATOR)
        if current.status != AuthenticatorStatus.PENDING:
            logger.info("Enrollment already confirmed", user_id=user_id)
            return EnrollmentResult(
                verified=False,
                reason=RejectionReason.CONFLICT,
                status=current.status,
            )

        last_step = self.verifier.replay_store.get(user_id, now)
        result = self.verifier.evaluate(
            user_id, current, submitted_code, now, last_step, purpose="enrollment"
        )
        if not result.accepted:
            return EnrollmentResult(
                verified=False,
                reason=result.reason,
                status=current.status,
                retry_after=result.retry_after,
            )

        verified = current.transition(
            AuthenticatorStatus.VERIFIED,
            datetime.fromtimestamp(now, tz=timezone.utc),
        )
        if not self.vault.compare_and_swap(user_id, current.version, verified):
            logger.warning("Enrollment confirmation lost race", user_id=user_id)
            return EnrollmentResult(
                verified=False,
                reason=RejectionReason.CONFLICT,
                status=current.status,
            )

        if not self.verifier.consume(user_id, last_step, result.step, now):
            # Record is VERIFIED already; the step was consumed by someone else
            logger.warning("Enrollment step consumed concurrently", user_id=user_id)
        self.verifier.record_success(user_id, result, now, purpose="enrollment")

        record_transition("pending_to_verified")
        logger.info("OTP enrollment confirmed", user_id=user_id)
        if self.audit:
            self.audit.log(
                AuditEventType.OTP_ENROLLMENT_CONFIRMED,
                actor_id=user_id,
                resource="authenticator",
            )
        return EnrollmentResult(verified=True, status=AuthenticatorStatus.VERIFIED)

    def revoke(self, user_id: str) -> bool:
        """
        Revoke the user's authenticator. Idempotent.

        Returns:
            True if a PENDING or VERIFIED record was revoked, False if there
            was nothing to revoke

        Raises:
            EnrollmentConflictError: The record kept changing under us
        """
        for _ in range(REVOKE_ATTEMPTS):
            current = self.vault.get(user_id)
            if current is None or current.status == AuthenticatorStatus.REVOKED:
                return False

            revoked = current.transition(
                AuthenticatorStatus.REVOKED,
                datetime.now(timezone.utc),
            )
            if self.vault.compare_and_swap(user_id, current.version, revoked):
                break
        else:
            raise EnrollmentConflictError(user_id, "revoke")

        self.verifier.replay_store.clear(user_id)
        self.verifier.limiter.reset(user_id)

        record_transition(f"{current.status.value}_to_revoked")
        logger.info("OTP authenticator revoked", user_id=user_id, previous_status=current.status.value)
        if self.audit:
            self.audit.log(
                AuditEventType.OTP_REVOKED,
                actor_id=user_id,
                resource="authenticator",
                payload={"previous_status": current.status.value},
            )
        return True
