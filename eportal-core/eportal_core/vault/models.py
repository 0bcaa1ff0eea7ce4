"""
Authenticator Models
====================
The per-user TOTP authenticator record and its lifecycle states.
"""

import base64
import binascii
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional

from eportal_core.errors import InvalidStateError


class AuthenticatorStatus(str, Enum):
    """Lifecycle states of an authenticator."""
    PENDING = "pending"      # Enrolled, waiting for the first valid code
    VERIFIED = "verified"    # Usable for second-factor checks
    REVOKED = "revoked"      # Terminal


ALLOWED_TRANSITIONS: Dict[AuthenticatorStatus, FrozenSet[AuthenticatorStatus]] = {
    AuthenticatorStatus.PENDING: frozenset({
        AuthenticatorStatus.VERIFIED,
        AuthenticatorStatus.REVOKED,
    }),
    AuthenticatorStatus.VERIFIED: frozenset({AuthenticatorStatus.REVOKED}),
    AuthenticatorStatus.REVOKED: frozenset(),
}


def can_transition(current: AuthenticatorStatus, target: AuthenticatorStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


@dataclass(frozen=True)
class Authenticator:
    """
    A user's TOTP authenticator.

    ``version`` is assigned by the vault on every write and is the
    compare-and-swap token for the next one.
    """
    user_id: str
    secret_key: bytes = field(repr=False)
    status: AuthenticatorStatus
    created_at: datetime
    verified_at: Optional[datetime] = None
    revoked_at: Optional[datetime] = None
    version: int = 0

    @property
    def verified(self) -> bool:
        return self.status == AuthenticatorStatus.VERIFIED

    @property
    def is_active(self) -> bool:
        """Pending or verified, i.e. not revoked."""
        return self.status != AuthenticatorStatus.REVOKED

    def transition(self, target: AuthenticatorStatus, at: datetime) -> "Authenticator":
        """
        Copy of this record moved to ``target``.

        Raises:
            InvalidStateError: If the lifecycle does not allow the move
        """
        if not can_transition(self.status, target):
            raise InvalidStateError(
                f"Cannot move authenticator from {self.status.value} to {target.value}",
                user_id=self.user_id,
            )
        if target == AuthenticatorStatus.VERIFIED:
            return replace(self, status=target, verified_at=at)
        return replace(self, status=target, revoked_at=at)

    def to_storage_dict(self) -> Dict[str, Any]:
        """Serialise for a vault backend. Never use this for logs or responses."""
        return {
            "user_id": self.user_id,
            "secret_key": base64.b64encode(self.secret_key).decode("ascii"),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "verified_at": self.verified_at.isoformat() if self.verified_at else None,
            "revoked_at": self.revoked_at.isoformat() if self.revoked_at else None,
        }

    @classmethod
    def from_storage_dict(cls, data: Dict[str, Any], version: int) -> "Authenticator":
        """
        Rebuild a record read from a vault backend.

        Raises:
            InvalidStateError: If the stored record is corrupted
        """
        try:
            return cls(
                user_id=str(data["user_id"]),
                secret_key=base64.b64decode(data["secret_key"], validate=True),
                status=AuthenticatorStatus(data["status"]),
                created_at=datetime.fromisoformat(data["created_at"]),
                verified_at=_parse_optional(data.get("verified_at")),
                revoked_at=_parse_optional(data.get("revoked_at")),
                version=int(version),
            )
        except (KeyError, ValueError, TypeError, binascii.Error) as e:
            raise InvalidStateError(
                f"Corrupted authenticator record ({type(e).__name__})",
                user_id=data.get("user_id") if isinstance(data, dict) else None,
            ) from None


def _parse_optional(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None
