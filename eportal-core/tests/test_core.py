"""
End-to-End Tests for Auth Core Assembly
=======================================
"""

from unittest.mock import MagicMock


class TestCreateAuthCore:
    """Tests for backend selection and the full enrollment to step-up flow."""

    def test_in_memory_defaults(self):
        from eportal_core import AuthCoreConfig, create_auth_core
        from eportal_core.rate_limit import InMemoryFailureLimiter
        from eportal_core.replay import InMemoryReplayStore
        from eportal_core.vault import InMemorySecretVault

        core = create_auth_core(AuthCoreConfig())

        assert isinstance(core.verifier.vault, InMemorySecretVault)
        assert isinstance(core.verifier.replay_store, InMemoryReplayStore)
        assert isinstance(core.verifier.limiter, InMemoryFailureLimiter)

    def test_redis_client_selects_redis_stores(self):
        from eportal_core import AuthCoreConfig, create_auth_core
        from eportal_core.rate_limit import RedisFailureLimiter
        from eportal_core.replay import RedisReplayStore

        core = create_auth_core(AuthCoreConfig(), redis_client=MagicMock())

        assert isinstance(core.verifier.replay_store, RedisReplayStore)
        assert isinstance(core.verifier.limiter, RedisFailureLimiter)

    def test_vault_addr_selects_hvac(self):
        from eportal_core import AuthCoreConfig, HvacSecretVault, create_auth_core

        core = create_auth_core(AuthCoreConfig(vault_addr="http://vault:8200", vault_token="t"))

        assert isinstance(core.verifier.vault, HvacSecretVault)
        assert core.verifier.vault.mount_point == "eportal"

    def test_enroll_then_step_up(self):
        import base64
        from eportal_core import AuditLogger, AuthCoreConfig, Principal, create_auth_core
        from eportal_core.audit import verify_chain_integrity

        audit = AuditLogger("eportal-test")
        core = create_auth_core(AuthCoreConfig(), audit=audit)
        core.resolver.store.create("/admin/users", "DELETE", step_up_required=True, claim_id="users.delete")

        ticket = core.enrollment.begin_enrollment("7", account_name="jane@example.com")
        secret = base64.b32decode(ticket.secret_b32 + "=" * (-len(ticket.secret_b32) % 8))

        assert core.enrollment.confirm_enrollment("7", core.engine.generate(secret, 1000), timestamp=1000).verified

        principal = Principal("7", frozenset({"users.delete"}))
        code = core.engine.generate(secret, 1030)
        decision = core.resolver.authorize(principal, "/admin/users", "DELETE", step_up_code=code, timestamp=1030)

        assert decision.permitted
        assert verify_chain_integrity(audit.flush()) == (True, None)
