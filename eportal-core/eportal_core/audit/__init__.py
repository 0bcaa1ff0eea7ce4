"""
Audit Logging Module
====================
Append-only, tamper-evident trail of enrollment and authorization events.
"""

from .event_types import AuditEventType
from .models import AuditEvent
from .hashing import compute_event_hash, verify_chain_integrity
from .logger import AuditLogger

__all__ = [
    "AuditEventType",
    "AuditEvent",
    "compute_event_hash",
    "verify_chain_integrity",
    "AuditLogger",
]
