"""
Prometheus Metrics
==================
Counters for OTP validation outcomes and authorization decisions.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, generate_latest

# Dedicated registry so embedding services choose whether to expose it
AUTH_CORE_REGISTRY = CollectorRegistry()

OTP_VALIDATIONS = Counter(
    name="eportal_otp_validations_total",
    documentation="OTP validation attempts by outcome",
    labelnames=["outcome", "purpose"],
    registry=AUTH_CORE_REGISTRY,
)

AUTHORIZATION_DECISIONS = Counter(
    name="eportal_authorization_decisions_total",
    documentation="Authorization decisions by result and deny reason",
    labelnames=["decision", "reason"],
    registry=AUTH_CORE_REGISTRY,
)

ENROLLMENT_TRANSITIONS = Counter(
    name="eportal_enrollment_transitions_total",
    documentation="Authenticator lifecycle transitions",
    labelnames=["transition"],
    registry=AUTH_CORE_REGISTRY,
)


def record_validation(outcome: str, purpose: str = "step_up") -> None:
    """
    Record an OTP validation attempt.

    Args:
        outcome: "accepted" or a rejection reason value
        purpose: "step_up" or "enrollment"
    """
    OTP_VALIDATIONS.labels(outcome=outcome, purpose=purpose).inc()


def record_decision(decision: str, reason: Optional[str] = None) -> None:
    AUTHORIZATION_DECISIONS.labels(decision=decision, reason=reason or "none").inc()


def record_transition(transition: str) -> None:
    ENROLLMENT_TRANSITIONS.labels(transition=transition).inc()


def get_metrics_text() -> bytes:
    """Prometheus exposition format for the auth core registry."""
    return generate_latest(AUTH_CORE_REGISTRY)
