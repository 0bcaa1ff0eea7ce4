"""
Unit Tests for Claim Store and Resolver
=======================================
"""

import pytest

from conftest import RFC_SECRET, wrong_code


class TestClaimStore:
    """Tests for the in-memory claim store."""

    def test_create_and_find(self, claim_store):
        record = claim_store.create("/admin/users/", "get", claim_id="users.read")

        assert record.endpoint == "/admin/users"
        assert record.operation == "GET"
        assert claim_store.get("users.read") == record
        assert claim_store.find_by_endpoint_operation("admin/users", "GET") == record

    def test_duplicate_pair_rejected(self, claim_store):
        from eportal_core.errors import DuplicateClaimError

        claim_store.create("/admin/users", "GET")
        with pytest.raises(DuplicateClaimError):
            claim_store.create("/admin/users/", "get")

    def test_revoked_record_not_found(self, claim_store):
        record = claim_store.create("/admin/users", "GET")

        assert claim_store.revoke(record.id) is True
        assert claim_store.revoke(record.id) is False
        assert claim_store.find_by_endpoint_operation("/admin/users", "GET") is None
        assert claim_store.get(record.id).revoked is True

    def test_pair_reusable_after_revocation(self, claim_store):
        old = claim_store.create("/admin/users", "GET")
        claim_store.revoke(old.id)
        new = claim_store.create("/admin/users", "GET")

        assert claim_store.find_by_endpoint_operation("/admin/users", "GET") == new
        assert [r.id for r in claim_store.active()] == [new.id]


class TestResolver:
    """Tests for authorization decisions."""

    def test_unmapped_endpoint_denied(self, resolver):
        from eportal_core.claims import DenyReason, Principal

        decision = resolver.authorize(Principal("1", frozenset({"anything"})), "/nowhere", "GET")

        assert decision.permitted is False
        assert decision.reason == DenyReason.MAPPING_NOT_FOUND

    def test_claim_mismatch(self, resolver, claim_store):
        from eportal_core.claims import DenyReason, Principal

        claim_store.create("/admin/users", "GET", claim_id="users.read")
        decision = resolver.authorize(Principal("1", frozenset({"users.write"})), "/admin/users", "GET")

        assert decision.reason == DenyReason.CLAIM_MISMATCH
        assert decision.claim_id == "users.read"

    def test_permit(self, resolver, claim_store):
        from eportal_core.claims import Decision, Principal

        claim_store.create("/admin/users", "GET", claim_id="users.read")
        decision = resolver.authorize(Principal("1", frozenset({"users.read"})), "/admin/users/", "get")

        assert decision.decision == Decision.PERMIT
        assert decision.claim_id == "users.read"

    def test_revoked_mapping_denied(self, resolver, claim_store):
        from eportal_core.claims import DenyReason, Principal

        claim_store.create("/admin/users", "GET", claim_id="users.read")
        claim_store.revoke("users.read")

        decision = resolver.authorize(Principal("1", frozenset({"users.read"})), "/admin/users", "GET")
        assert decision.reason == DenyReason.MAPPING_NOT_FOUND


class TestStepUp:
    """Tests for step-up protected mappings."""

    @pytest.fixture
    def principal(self, enrolled_user):
        from eportal_core.claims import Principal

        return Principal(enrolled_user, frozenset({"users.delete"}))

    @pytest.fixture(autouse=True)
    def mapping(self, claim_store):
        return claim_store.create("/admin/users", "DELETE", step_up_required=True, claim_id="users.delete")

    def test_permit_with_valid_code(self, resolver, engine, principal):
        code = engine.generate(RFC_SECRET, 1000)
        decision = resolver.authorize(principal, "/admin/users", "DELETE", step_up_code=code, timestamp=1000)

        assert decision.permitted

    def test_code_missing(self, resolver, principal):
        from eportal_core.claims import DenyReason

        decision = resolver.authorize(principal, "/admin/users", "DELETE")
        assert decision.reason == DenyReason.STEP_UP_REQUIRED

    def test_no_verified_authenticator(self, resolver):
        from eportal_core.claims import DenyReason, Principal

        principal = Principal("no-2fa", frozenset({"users.delete"}))
        decision = resolver.authorize(principal, "/admin/users", "DELETE", step_up_code="123456", timestamp=1000)

        assert decision.reason == DenyReason.STEP_UP_UNAVAILABLE

    def test_resolver_without_verifier(self, claim_store, principal):
        from eportal_core.claims import ClaimResolver, DenyReason

        decision = ClaimResolver(claim_store).authorize(principal, "/admin/users", "DELETE", step_up_code="123456")
        assert decision.reason == DenyReason.STEP_UP_UNAVAILABLE

    def test_wrong_code(self, resolver, engine, principal):
        from eportal_core.claims import DenyReason

        bad = wrong_code(engine, RFC_SECRET, 1000)
        decision = resolver.authorize(principal, "/admin/users", "DELETE", step_up_code=bad, timestamp=1000)

        assert decision.reason == DenyReason.STEP_UP_FAILED
        assert decision.detail == "invalid_code"

    def test_replayed_code(self, resolver, engine, principal):
        from eportal_core.claims import DenyReason

        code = engine.generate(RFC_SECRET, 1000)
        resolver.authorize(principal, "/admin/users", "DELETE", step_up_code=code, timestamp=1000)
        decision = resolver.authorize(principal, "/admin/users", "DELETE", step_up_code=code, timestamp=1010)

        assert decision.reason == DenyReason.STEP_UP_FAILED
        assert decision.detail == "replayed"

    def test_throttled_carries_retry_after(self, resolver, engine, principal):
        bad = wrong_code(engine, RFC_SECRET, 1000)
        for _ in range(5):
            resolver.authorize(principal, "/admin/users", "DELETE", step_up_code=bad, timestamp=1000)

        code = engine.generate(RFC_SECRET, 1000)
        decision = resolver.authorize(principal, "/admin/users", "DELETE", step_up_code=code, timestamp=1000)

        assert decision.detail == "throttled"
        assert decision.retry_after == 900

    def test_claim_checked_before_step_up(self, resolver, enrolled_user):
        from eportal_core.claims import DenyReason, Principal

        decision = resolver.authorize(Principal(enrolled_user), "/admin/users", "DELETE")
        assert decision.reason == DenyReason.CLAIM_MISMATCH

    def test_decisions_audited(self, resolver, audit, principal):
        from eportal_core.audit import AuditEventType

        resolver.authorize(principal, "/admin/users", "DELETE")
        event = audit.flush()[-1]

        assert event.event_type == AuditEventType.ACCESS_DENIED.value
        assert event.resource == "DELETE /admin/users"
        assert event.payload["reason"] == "step_up_required"
