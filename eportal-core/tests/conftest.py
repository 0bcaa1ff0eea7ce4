"""
Shared fixtures for eportal-core tests.
"""

from datetime import datetime, timezone

import pytest

from eportal_core.audit import AuditLogger
from eportal_core.claims import ClaimResolver, InMemoryClaimStore
from eportal_core.config import AuthCoreConfig
from eportal_core.enrollment import EnrollmentManager
from eportal_core.otp import OTPVerifier, TOTPEngine
from eportal_core.rate_limit import InMemoryFailureLimiter
from eportal_core.replay import InMemoryReplayStore
from eportal_core.vault import Authenticator, AuthenticatorStatus, InMemorySecretVault

# RFC 4226 / RFC 6238 reference secret
RFC_SECRET = b"12345678901234567890"


def wrong_code(engine: TOTPEngine, secret: bytes, timestamp: float) -> str:
    """A well-formed code that matches no step in the tolerance window."""
    step = engine.step_for(timestamp)
    tolerance = engine.config.tolerance_steps
    valid = {
        engine.generate(secret, (s * engine.config.step_seconds))
        for s in range(step - tolerance, step + tolerance + 1)
    }
    for candidate in range(10 ** engine.config.digits):
        code = str(candidate).zfill(engine.config.digits)
        if code not in valid:
            return code
    raise AssertionError("no free code")


@pytest.fixture
def config():
    return AuthCoreConfig()


@pytest.fixture
def engine(config):
    return TOTPEngine(config)


@pytest.fixture
def vault():
    return InMemorySecretVault()


@pytest.fixture
def replay_store():
    return InMemoryReplayStore()


@pytest.fixture
def limiter(config):
    return InMemoryFailureLimiter(
        max_failures=config.throttle_max_failures,
        window=config.throttle_window_seconds,
    )


@pytest.fixture
def audit():
    return AuditLogger("eportal-test")


@pytest.fixture
def verifier(engine, vault, replay_store, limiter, audit):
    return OTPVerifier(engine, vault, replay_store, limiter, audit=audit)


@pytest.fixture
def manager(verifier):
    return EnrollmentManager(verifier)


@pytest.fixture
def claim_store():
    return InMemoryClaimStore()


@pytest.fixture
def resolver(claim_store, verifier, audit):
    return ClaimResolver(claim_store, verifier, audit=audit)


@pytest.fixture
def enrolled_user(vault):
    """User "42" holding a VERIFIED authenticator with the RFC secret."""
    vault.put_if_absent(Authenticator(
        user_id="42",
        secret_key=RFC_SECRET,
        status=AuthenticatorStatus.VERIFIED,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    ))
    return "42"
