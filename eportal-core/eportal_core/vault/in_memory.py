"""
In-Memory Secret Vault
======================
Process-local authenticator storage for development and testing.
"""

import threading
from dataclasses import replace
from typing import Dict, Optional

import structlog

from .models import Authenticator

logger = structlog.get_logger(__name__)


class InMemorySecretVault:
    """
    Thread-safe in-memory vault.

    For development and testing only.
    Use HvacSecretVault in production.
    """

    def __init__(self):
        self._records: Dict[str, Authenticator] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> Optional[Authenticator]:
        with self._lock:
            return self._records.get(user_id)

    def put_if_absent(self, authenticator: Authenticator) -> bool:
        with self._lock:
            if authenticator.user_id in self._records:
                return False
            self._records[authenticator.user_id] = replace(authenticator, version=1)
            return True

    def compare_and_swap(
        self,
        user_id: str,
        expected_version: int,
        new_state: Authenticator,
    ) -> bool:
        with self._lock:
            current = self._records.get(user_id)
            if current is None or current.version != expected_version:
                logger.info(
                    "Vault CAS conflict",
                    user_id=user_id,
                    expected_version=expected_version,
                    actual_version=current.version if current else None,
                )
                return False
            self._records[user_id] = replace(new_state, version=expected_version + 1)
            return True

    def __len__(self) -> int:
        return len(self._records)
