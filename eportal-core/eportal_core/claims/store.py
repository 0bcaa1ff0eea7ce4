"""
Claim Store
===========
Lookup of claim records by id and by (endpoint, operation).
"""

import threading
import uuid
from typing import Dict, List, Optional, Protocol, Tuple

import structlog

from eportal_core.errors import DuplicateClaimError
from eportal_core.validation import normalize_endpoint, normalize_operation
from .models import ClaimRecord

logger = structlog.get_logger(__name__)


class ClaimStore(Protocol):
    """Read side of the claim mapping used by the resolver."""

    def get(self, claim_id: str) -> Optional[ClaimRecord]:
        ...

    def find_by_endpoint_operation(self, endpoint: str, operation: str) -> Optional[ClaimRecord]:
        """Active (non-revoked) record for the pair, or None."""
        ...


class InMemoryClaimStore:
    """
    In-memory claim store with administrative create/revoke.

    Endpoints and operations are normalised on the way in and on lookup.
    """

    def __init__(self):
        self._records: Dict[str, ClaimRecord] = {}
        self._active: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def get(self, claim_id: str) -> Optional[ClaimRecord]:
        return self._records.get(claim_id)

    def find_by_endpoint_operation(self, endpoint: str, operation: str) -> Optional[ClaimRecord]:
        key = (normalize_endpoint(endpoint), normalize_operation(operation))
        claim_id = self._active.get(key)
        return self._records.get(claim_id) if claim_id else None

    def create(
        self,
        endpoint: str,
        operation: str,
        step_up_required: bool = False,
        claim_id: Optional[str] = None,
    ) -> ClaimRecord:
        """
        Add a claim mapping.

        Raises:
            DuplicateClaimError: An active record already maps the pair
        """
        record = ClaimRecord(
            id=claim_id or str(uuid.uuid4()),
            endpoint=normalize_endpoint(endpoint),
            operation=normalize_operation(operation),
            step_up_required=step_up_required,
        )
        with self._lock:
            if record.key in self._active:
                raise DuplicateClaimError(record.endpoint, record.operation)
            if record.id in self._records:
                raise DuplicateClaimError(record.endpoint, record.operation)
            self._records[record.id] = record
            self._active[record.key] = record.id

        logger.info(
            "Claim created",
            claim_id=record.id,
            endpoint=record.endpoint,
            operation=record.operation,
            step_up_required=step_up_required,
        )
        return record

    def revoke(self, claim_id: str) -> bool:
        """Soft-revoke a record. Returns False if unknown or already revoked."""
        with self._lock:
            record = self._records.get(claim_id)
            if record is None or record.revoked:
                return False
            self._records[claim_id] = record.revoke()
            self._active.pop(record.key, None)

        logger.info("Claim revoked", claim_id=claim_id)
        return True

    def active(self) -> List[ClaimRecord]:
        return [self._records[claim_id] for claim_id in self._active.values()]
