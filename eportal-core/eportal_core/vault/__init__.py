"""
Secret Vault
============
Authenticator records and the storage backends that hold them.
"""

from .models import (
    Authenticator,
    AuthenticatorStatus,
    ALLOWED_TRANSITIONS,
    can_transition,
)
from .base import SecretVault
from .in_memory import InMemorySecretVault
from .hvac_vault import HvacSecretVault

__all__ = [
    # Models
    "Authenticator",
    "AuthenticatorStatus",
    "ALLOWED_TRANSITIONS",
    "can_transition",
    # Backends
    "SecretVault",
    "InMemorySecretVault",
    "HvacSecretVault",
]
