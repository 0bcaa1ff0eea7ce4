"""
Unit Tests for Audit Logging
============================
"""

from dataclasses import replace


class TestAuditLogger:
    """Tests for the hash-chained audit log."""

    def test_events_are_chained(self):
        from eportal_core.audit import AuditEventType, AuditLogger

        audit = AuditLogger("test-service")
        first = audit.log(AuditEventType.OTP_VERIFIED, actor_id="1")
        second = audit.log(AuditEventType.OTP_REVOKED, actor_id="1")

        assert first.previous_hash is None
        assert second.previous_hash == first.hash
        assert first.service == "test-service"

    def test_flush_clears_buffer(self):
        from eportal_core.audit import AuditEventType, AuditLogger

        audit = AuditLogger("test-service")
        audit.log(AuditEventType.ACCESS_DENIED, outcome="failure")

        assert len(audit.pending) == 1
        assert len(audit.flush()) == 1
        assert audit.pending == []

    def test_chain_continues_from_previous_hash(self):
        from eportal_core.audit import AuditLogger

        audit = AuditLogger("test-service", previous_hash="abc")
        assert audit.log("custom.event").previous_hash == "abc"

    def test_to_dict(self):
        from eportal_core.audit import AuditEventType, AuditLogger

        event = AuditLogger("svc").log(AuditEventType.ACCESS_PERMITTED, payload={"claim_id": "x"})
        data = event.to_dict()

        assert isinstance(data["timestamp"], str)
        assert data["payload"] == {"claim_id": "x"}


class TestChainIntegrity:
    """Tests for tamper detection."""

    def _events(self):
        from eportal_core.audit import AuditEventType, AuditLogger

        audit = AuditLogger("svc")
        audit.log(AuditEventType.OTP_ENROLLMENT_STARTED, actor_id="1")
        audit.log(AuditEventType.OTP_ENROLLMENT_CONFIRMED, actor_id="1")
        audit.log(AuditEventType.ACCESS_PERMITTED, actor_id="1")
        return audit.flush()

    def test_valid_chain(self):
        from eportal_core.audit import verify_chain_integrity

        assert verify_chain_integrity(self._events()) == (True, None)
        assert verify_chain_integrity([]) == (True, None)

    def test_modified_event_detected(self):
        from eportal_core.audit import verify_chain_integrity

        events = self._events()
        events[1] = replace(events[1], outcome="failure")

        assert verify_chain_integrity(events) == (False, 1)

    def test_removed_event_detected(self):
        from eportal_core.audit import verify_chain_integrity

        events = self._events()
        del events[1]

        assert verify_chain_integrity(events) == (False, 1)
