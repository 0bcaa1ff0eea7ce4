"""
Secret Vault Interface
======================
Storage contract for authenticator records.
"""

from typing import Optional, Protocol

from .models import Authenticator


class SecretVault(Protocol):
    """
    Per-user authenticator storage with compare-and-swap writes.

    Implementations assign ``Authenticator.version`` on every successful
    write; callers pass the version they read back as ``expected_version``.
    """

    def get(self, user_id: str) -> Optional[Authenticator]:
        """Current record for the user, or None."""
        ...

    def put_if_absent(self, authenticator: Authenticator) -> bool:
        """Store a record only if the user has none. True on success."""
        ...

    def compare_and_swap(
        self,
        user_id: str,
        expected_version: int,
        new_state: Authenticator,
    ) -> bool:
        """Replace the record only if its version still equals ``expected_version``."""
        ...
