"""
Endpoint Operation Claims
=========================
Claim mapping, principals and the resolver that authorizes requests.
"""

from .models import (
    ClaimRecord,
    Principal,
    Decision,
    DenyReason,
    AuthorizationDecision,
)
from .store import ClaimStore, InMemoryClaimStore
from .resolver import ClaimResolver

__all__ = [
    # Models
    "ClaimRecord",
    "Principal",
    "Decision",
    "DenyReason",
    "AuthorizationDecision",
    # Store
    "ClaimStore",
    "InMemoryClaimStore",
    # Resolver
    "ClaimResolver",
]
