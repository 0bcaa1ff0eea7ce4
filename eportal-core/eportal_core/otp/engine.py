"""
TOTP Engine
===========
Pure code generation and windowed validation.

Nothing in this module touches storage. The replay step and failure
counters are advanced by OTPVerifier around these calls.
"""

from typing import Optional

import structlog

from eportal_core.config import AuthCoreConfig
from eportal_core.errors import InvalidStateError
from eportal_core.validation import normalize_otp_code, is_otp_code
from .codes import (
    build_provisioning_uri,
    check_secret,
    codes_match,
    derive_code,
    time_step,
)
from .models import RejectionReason, ValidationResult

logger = structlog.get_logger(__name__)


class TOTPEngine:
    """
    RFC 6238 code generation and validation.

    Example:
        engine = TOTPEngine(AuthCoreConfig())
        code = engine.generate(secret, 1000)
        result = engine.validate(secret, code, 1000, last_consumed_step=None)
        assert result.accepted and result.step == 33
    """

    def __init__(self, config: Optional[AuthCoreConfig] = None):
        self.config = config or AuthCoreConfig()

    def step_for(self, timestamp: float) -> int:
        return time_step(timestamp, self.config.step_seconds)

    def generate(self, secret: bytes, timestamp: float) -> str:
        """
        Generate the code for the step containing ``timestamp``.

        Args:
            secret: Raw secret bytes
            timestamp: Unix timestamp in seconds

        Returns:
            Decimal code of ``config.digits`` length

        Raises:
            ValueError: If ``timestamp`` is before the Unix epoch
        """
        if timestamp < 0:
            raise ValueError("timestamp must not be negative")
        check_secret(secret)
        return derive_code(
            secret,
            self.step_for(timestamp),
            digits=self.config.digits,
            algorithm=self.config.algorithm,
        )

    def validate(
        self,
        secret: Optional[bytes],
        submitted_code: Optional[str],
        timestamp: float,
        last_consumed_step: Optional[int] = None,
    ) -> ValidationResult:
        """
        Validate a submitted code against a secret.

        Every candidate step in the tolerance window is compared so the
        time taken does not depend on which step (if any) matched.

        Args:
            secret: Raw secret of a pending or verified authenticator, or None
            submitted_code: Code typed by the user
            timestamp: Unix timestamp of the attempt
            last_consumed_step: Highest step already accepted for this user

        Returns:
            ValidationResult, accepted with the matched step or rejected with a reason
        """
        if secret is None:
            return ValidationResult.reject(RejectionReason.NO_AUTHENTICATOR)

        try:
            check_secret(secret)
        except InvalidStateError:
            logger.error("Stored OTP secret unusable", secret_length=len(secret or b""))
            return ValidationResult.reject(RejectionReason.INVALID_STATE)

        code = normalize_otp_code(submitted_code)
        if not is_otp_code(code, self.config.digits):
            return ValidationResult.reject(RejectionReason.INVALID_CODE)

        if timestamp < 0:
            return ValidationResult.reject(RejectionReason.INVALID_CODE)

        current = self.step_for(timestamp)
        tolerance = self.config.tolerance_steps
        matched: Optional[int] = None

        # HOTP counters start at 0
        for candidate in range(max(0, current - tolerance), current + tolerance + 1):
            expected = derive_code(
                secret,
                candidate,
                digits=self.config.digits,
                algorithm=self.config.algorithm,
            )
            # No early exit, keep the latest matching step
            if codes_match(expected, code):
                matched = candidate

        if matched is None:
            return ValidationResult.reject(RejectionReason.INVALID_CODE)

        if last_consumed_step is not None and matched <= last_consumed_step:
            return ValidationResult.reject(RejectionReason.REPLAYED, step=matched)

        return ValidationResult.accept(matched)

    def provisioning_uri(self, secret: bytes, account_name: str) -> str:
        """otpauth:// URI with this engine's issuer, digits, period and algorithm."""
        return build_provisioning_uri(
            secret,
            account_name,
            issuer=self.config.issuer,
            digits=self.config.digits,
            step_seconds=self.config.step_seconds,
            algorithm=self.config.algorithm,
        )
