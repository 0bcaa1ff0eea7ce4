"""
Unit Tests for Logging and Metrics
==================================
"""


class TestRedaction:
    """Tests for the structlog redaction processor."""

    def test_sensitive_keys_masked(self):
        from eportal_core.logs import REDACTED, redact_secrets

        event = redact_secrets(None, "info", {
            "event": "OTP rejected",
            "user_id": "42",
            "code": "123456",
            "Secret_Key": "abc",
            "provisioning_uri": "otpauth://totp/x?secret=ABC",
        })

        assert event["user_id"] == "42"
        assert event["code"] == REDACTED
        assert event["Secret_Key"] == REDACTED
        assert event["provisioning_uri"] == REDACTED

    def test_configure_logging(self):
        import structlog
        from eportal_core.logs import configure_logging, redact_secrets

        configure_logging("eportal-test", level="DEBUG", json_output=False)

        assert redact_secrets in structlog.get_config()["processors"]
        structlog.contextvars.clear_contextvars()
        structlog.reset_defaults()


class TestMetrics:
    """Tests for prometheus counters."""

    def test_counters_exposed(self):
        from eportal_core.metrics import (
            get_metrics_text,
            record_decision,
            record_transition,
            record_validation,
        )

        record_validation("accepted")
        record_decision("deny", "claim_mismatch")
        record_transition("pending_to_verified")

        text = get_metrics_text().decode()

        assert 'eportal_otp_validations_total{outcome="accepted",purpose="step_up"}' in text
        assert 'eportal_authorization_decisions_total{decision="deny",reason="claim_mismatch"}' in text
        assert 'eportal_enrollment_transitions_total{transition="pending_to_verified"}' in text

    def test_verification_increments_counter(self, verifier, engine, enrolled_user):
        from conftest import RFC_SECRET
        from eportal_core.metrics import AUTH_CORE_REGISTRY

        def accepted():
            return AUTH_CORE_REGISTRY.get_sample_value(
                "eportal_otp_validations_total",
                {"outcome": "accepted", "purpose": "step_up"},
            ) or 0.0

        before = accepted()
        verifier.verify(enrolled_user, engine.generate(RFC_SECRET, 1000), 1000)

        assert accepted() == before + 1
