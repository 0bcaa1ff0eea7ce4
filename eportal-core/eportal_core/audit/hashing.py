"""
Audit Hashing
=============
Hash chaining and chain verification for audit events.
"""

import json
import hashlib
from typing import Any, Dict, List, Optional, Tuple

import structlog

from .models import AuditEvent

logger = structlog.get_logger(__name__)


def compute_event_hash(previous_hash: Optional[str], fields: Dict[str, Any]) -> str:
    """
    SHA-256 over the previous hash and the event's canonical JSON.

    Args:
        previous_hash: Hash of the previous event (None for the first event)
        fields: Event fields except ``id``, ``hash`` and ``previous_hash``

    Returns:
        Hex digest
    """
    canonical = json.dumps(
        {"previous_hash": previous_hash, **fields},
        sort_keys=True,
        separators=(',', ':'),
        default=str,
    )
    return hashlib.sha256(canonical.encode()).hexdigest()


def hashed_fields(event: AuditEvent) -> Dict[str, Any]:
    return {
        "timestamp": event.timestamp.isoformat(),
        "service": event.service,
        "event_type": event.event_type,
        "actor_id": event.actor_id,
        "resource": event.resource,
        "outcome": event.outcome,
        "payload": event.payload,
    }


def verify_chain_integrity(events: List[AuditEvent]) -> Tuple[bool, Optional[int]]:
    """
    Verify a chronologically ordered list of events.

    Returns:
        Tuple of (is_valid, first_invalid_index)
    """
    previous_hash: Optional[str] = None

    for i, event in enumerate(events):
        if event.previous_hash != previous_hash:
            logger.warning("Audit chain linkage broken", event_id=event.id, index=i)
            return False, i

        if event.hash != compute_event_hash(event.previous_hash, hashed_fields(event)):
            logger.warning("Audit chain integrity violation", event_id=event.id, index=i)
            return False, i

        previous_hash = event.hash

    return True, None
