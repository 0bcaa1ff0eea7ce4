"""
Audit Logger
=============
Buffers hash-chained audit events for a sink owned by the host service.
"""

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

import structlog

from .event_types import AuditEventType
from .models import AuditEvent
from .hashing import compute_event_hash

logger = structlog.get_logger(__name__)


class AuditLogger:
    """
    Hash-chained audit log.

    Example:
        audit = AuditLogger("eportal-admin")
        audit.log(AuditEventType.OTP_REVOKED, actor_id="42")
        persist(audit.flush())
    """

    def __init__(self, service_name: str, previous_hash: Optional[str] = None):
        self.service_name = service_name
        self._previous_hash = previous_hash
        self._buffer: List[AuditEvent] = []
        self._lock = threading.Lock()

    def log(
        self,
        event_type: Union[AuditEventType, str],
        outcome: str = "success",
        actor_id: Optional[str] = None,
        resource: Optional[str] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> AuditEvent:
        """
        Append an event to the chain.

        Args:
            event_type: Type of event
            outcome: "success", "failure" or "blocked"
            actor_id: User the event concerns
            resource: Affected resource
            payload: Additional event data (must not contain secrets)

        Returns:
            The created AuditEvent
        """
        event_type_str = (
            event_type.value if isinstance(event_type, AuditEventType)
            else event_type
        )
        fields = {
            "timestamp": datetime.now(timezone.utc),
            "service": self.service_name,
            "event_type": event_type_str,
            "actor_id": actor_id,
            "resource": resource,
            "outcome": outcome,
            "payload": payload or {},
        }

        with self._lock:
            event_hash = compute_event_hash(
                self._previous_hash,
                {**fields, "timestamp": fields["timestamp"].isoformat()},
            )
            event = AuditEvent(
                id=str(uuid.uuid4()),
                hash=event_hash,
                previous_hash=self._previous_hash,
                **fields,
            )
            self._previous_hash = event_hash
            self._buffer.append(event)

        logger.info(
            "Audit event logged",
            event_id=event.id,
            event_type=event.event_type,
            outcome=outcome,
        )
        return event

    @property
    def pending(self) -> List[AuditEvent]:
        return list(self._buffer)

    def flush(self) -> List[AuditEvent]:
        """Get and clear buffered events."""
        with self._lock:
            events, self._buffer = self._buffer, []
        return events
