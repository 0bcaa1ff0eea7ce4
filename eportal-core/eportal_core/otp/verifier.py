"""
OTP Verifier
============
Validates a user's submitted code against the vault record, with
throttling and atomic replay-step consumption.
"""

import time
from typing import Optional

import structlog

from eportal_core.audit import AuditEventType, AuditLogger
from eportal_core.metrics import record_validation
from eportal_core.rate_limit import FailureLimiter
from eportal_core.replay import ReplayStore
from eportal_core.vault import Authenticator, AuthenticatorStatus, SecretVault
from .engine import TOTPEngine
from .models import COUNTED_FAILURES, RejectionReason, ValidationResult

logger = structlog.get_logger(__name__)

# Attempts to advance the replay step before giving up
CAS_ATTEMPTS = 2


class OTPVerifier:
    """
    Storage-aware wrapper around TOTPEngine.

    The engine stays pure; this class reads the authenticator and the
    last consumed step, and performs the only writes (step advance and
    failure counters).
    """

    def __init__(
        self,
        engine: TOTPEngine,
        vault: SecretVault,
        replay_store: ReplayStore,
        limiter: FailureLimiter,
        audit: Optional[AuditLogger] = None,
    ):
        self.engine = engine
        self.vault = vault
        self.replay_store = replay_store
        self.limiter = limiter
        self.audit = audit

    @property
    def replay_ttl(self) -> int:
        return self.engine.config.validity_window_seconds

    def has_verified_authenticator(self, user_id: str) -> bool:
        authenticator = self.vault.get(user_id)
        return authenticator is not None and authenticator.verified

    def verify(
        self,
        user_id: str,
        submitted_code: Optional[str],
        timestamp: Optional[float] = None,
    ) -> ValidationResult:
        """
        Validate a code for a user's verified authenticator and consume it.

        Args:
            user_id: User submitting the code
            submitted_code: Code typed by the user
            timestamp: Unix timestamp of the attempt (defaults to now)

        Returns:
            ValidationResult
        """
        now = time.time() if timestamp is None else timestamp
        authenticator = self.vault.get(user_id)
        if authenticator is None or not authenticator.verified:
            return self._finish(user_id, ValidationResult.reject(RejectionReason.NO_AUTHENTICATOR), now)

        for attempt in range(CAS_ATTEMPTS):
            last_step = self.replay_store.get(user_id, now)
            result = self.evaluate(user_id, authenticator, submitted_code, now, last_step)
            if not result.accepted:
                return result

            if self.consume(user_id, last_step, result.step, now):
                return self._finish(user_id, result, now)

            logger.info("Retrying OTP step consumption", user_id=user_id, attempt=attempt + 1)

        return self._finish(
            user_id,
            ValidationResult.reject(RejectionReason.REPLAYED, step=result.step),
            now,
        )

    def evaluate(
        self,
        user_id: str,
        authenticator: Authenticator,
        submitted_code: Optional[str],
        now: float,
        last_step: Optional[int],
        purpose: str = "step_up",
    ) -> ValidationResult:
        """
        Throttle check plus pure validation, without consuming the step.

        Rejections are recorded here; acceptance is only final once the
        caller has committed it (see ``consume`` and ``record_success``).
        """
        throttle = self.limiter.check(user_id, now)
        if not throttle.allowed:
            logger.warning(
                "OTP attempt throttled",
                user_id=user_id,
                failures=throttle.failures,
                retry_after=throttle.retry_after,
            )
            if self.audit:
                self.audit.log(
                    AuditEventType.RATE_LIMIT_HIT,
                    outcome="blocked",
                    actor_id=user_id,
                    payload={"retry_after": throttle.retry_after},
                )
            result = ValidationResult.reject(
                RejectionReason.THROTTLED,
                retry_after=throttle.retry_after,
            )
            record_validation(result.outcome, purpose)
            return result

        usable = authenticator.status in (AuthenticatorStatus.PENDING, AuthenticatorStatus.VERIFIED)
        result = self.engine.validate(
            authenticator.secret_key if usable else None,
            submitted_code,
            now,
            last_step,
        )
        if not result.accepted:
            self._finish(user_id, result, now, purpose)
        return result

    def consume(
        self,
        user_id: str,
        expected_step: Optional[int],
        new_step: int,
        now: float,
    ) -> bool:
        """Atomically advance the consumed step. False if another request won."""
        return self.replay_store.advance(
            user_id,
            expected_step,
            new_step,
            self.replay_ttl,
            now,
        )

    def record_success(
        self,
        user_id: str,
        result: ValidationResult,
        now: float,
        purpose: str = "step_up",
    ) -> None:
        self._finish(user_id, result, now, purpose)

    def _finish(
        self,
        user_id: str,
        result: ValidationResult,
        now: float,
        purpose: str = "step_up",
    ) -> ValidationResult:
        record_validation(result.outcome, purpose)

        if result.accepted:
            self.limiter.reset(user_id)
            logger.info("OTP accepted", user_id=user_id, step=result.step, purpose=purpose)
            if self.audit:
                self.audit.log(
                    AuditEventType.OTP_VERIFIED,
                    actor_id=user_id,
                    payload={"step": result.step, "purpose": purpose},
                )
            return result

        if result.reason in COUNTED_FAILURES:
            throttle = self.limiter.record_failure(user_id, now)
            logger.warning(
                "OTP rejected",
                user_id=user_id,
                reason=result.reason.value,
                failures=throttle.failures,
                purpose=purpose,
            )
        elif result.reason == RejectionReason.INVALID_STATE:
            logger.error("OTP rejected, authenticator state invalid", user_id=user_id)
        else:
            logger.info("OTP rejected", user_id=user_id, reason=result.reason.value, purpose=purpose)

        if self.audit:
            self.audit.log(
                AuditEventType.OTP_REJECTED,
                outcome="failure",
                actor_id=user_id,
                payload={"reason": result.reason.value, "purpose": purpose},
            )
        return result
