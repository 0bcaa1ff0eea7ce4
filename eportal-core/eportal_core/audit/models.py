"""
Audit Models
=============
"""

from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict


@dataclass(frozen=True)
class AuditEvent:
    """A hash-chained audit entry."""
    id: str
    timestamp: datetime
    service: str
    event_type: str
    actor_id: Optional[str]
    resource: Optional[str]   # "GET /admin/users", "authenticator", ...
    outcome: str              # "success", "failure", "blocked"
    payload: Dict[str, Any]
    hash: str
    previous_hash: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        d = asdict(self)
        d['timestamp'] = self.timestamp.isoformat()
        return d
