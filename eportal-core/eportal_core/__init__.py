"""
EPortal Auth Core
=================
Endpoint claim authorization and TOTP second-factor authentication.
"""

__version__ = "0.1.0"

# Configuration
from eportal_core.config import AuthCoreConfig

# Errors
from eportal_core.errors import (
    AuthCoreError,
    AlreadyEnrolledError,
    ConfigurationError,
    DuplicateClaimError,
    EnrollmentConflictError,
    InvalidStateError,
    VaultBackendError,
)

# OTP
from eportal_core.otp import (
    TOTPEngine,
    OTPVerifier,
    RejectionReason,
    ValidationResult,
    generate_secret,
)

# Vault
from eportal_core.vault import (
    Authenticator,
    AuthenticatorStatus,
    SecretVault,
    InMemorySecretVault,
    HvacSecretVault,
)

# Replay / throttling
from eportal_core.replay import InMemoryReplayStore, RedisReplayStore
from eportal_core.rate_limit import InMemoryFailureLimiter, RedisFailureLimiter, ThrottleInfo

# Enrollment
from eportal_core.enrollment import EnrollmentManager, EnrollmentTicket, EnrollmentResult

# Claims
from eportal_core.claims import (
    ClaimRecord,
    ClaimResolver,
    ClaimStore,
    InMemoryClaimStore,
    Principal,
    Decision,
    DenyReason,
    AuthorizationDecision,
)

# Audit
from eportal_core.audit import AuditLogger, AuditEventType, verify_chain_integrity

# Assembly
from eportal_core.core import AuthCore, create_auth_core

__all__ = [
    # Configuration
    "AuthCoreConfig",
    # Errors
    "AuthCoreError",
    "AlreadyEnrolledError",
    "ConfigurationError",
    "DuplicateClaimError",
    "EnrollmentConflictError",
    "InvalidStateError",
    "VaultBackendError",
    # OTP
    "TOTPEngine",
    "OTPVerifier",
    "RejectionReason",
    "ValidationResult",
    "generate_secret",
    # Vault
    "Authenticator",
    "AuthenticatorStatus",
    "SecretVault",
    "InMemorySecretVault",
    "HvacSecretVault",
    # Replay / throttling
    "InMemoryReplayStore",
    "RedisReplayStore",
    "InMemoryFailureLimiter",
    "RedisFailureLimiter",
    "ThrottleInfo",
    # Enrollment
    "EnrollmentManager",
    "EnrollmentTicket",
    "EnrollmentResult",
    # Claims
    "ClaimRecord",
    "ClaimResolver",
    "ClaimStore",
    "InMemoryClaimStore",
    "Principal",
    "Decision",
    "DenyReason",
    "AuthorizationDecision",
    # Audit
    "AuditLogger",
    "AuditEventType",
    "verify_chain_integrity",
    # Assembly
    "AuthCore",
    "create_auth_core",
]
