"""
Core Exceptions
===============
Exceptions raised for caller-intent errors and corrupted state.

Validation and authorization outcomes are returned as result objects,
not raised. Nothing here ever carries secret material in its message.
"""

from typing import Optional


class AuthCoreError(Exception):
    """Base class for all auth core errors."""

    code = "AUTH_CORE_ERROR"

    def __init__(self, message: str, user_id: Optional[str] = None):
        self.user_id = user_id
        super().__init__(message)


class ConfigurationError(AuthCoreError):
    """Raised when configuration values are missing or out of range."""

    code = "CONFIG_ERROR"


class AlreadyEnrolledError(AuthCoreError):
    """Raised when enrollment is requested for a user with a verified authenticator."""

    code = "ALREADY_ENROLLED"

    def __init__(self, user_id: str):
        super().__init__(
            f"User '{user_id}' already has a verified authenticator. "
            "Request re-enrollment explicitly to replace it.",
            user_id=user_id,
        )


class EnrollmentConflictError(AuthCoreError):
    """Raised when a concurrent writer changed the authenticator record first."""

    code = "CONFLICT"

    def __init__(self, user_id: str, operation: str):
        self.operation = operation
        super().__init__(
            f"Authenticator for '{user_id}' was modified concurrently during {operation}",
            user_id=user_id,
        )


class InvalidStateError(AuthCoreError):
    """Raised when a stored record is corrupted or a transition is not allowed."""

    code = "INVALID_STATE"


class DuplicateClaimError(AuthCoreError):
    """Raised when an active claim already maps the same endpoint and operation."""

    code = "DUPLICATE_CLAIM"

    def __init__(self, endpoint: str, operation: str):
        self.endpoint = endpoint
        self.operation = operation
        super().__init__(f"An active claim already exists for {operation} {endpoint}")


class VaultBackendError(AuthCoreError):
    """Raised when the secret vault backend cannot be reached or answers unexpectedly."""

    code = "VAULT_ERROR"
