"""
Structured Logging
==================
structlog configuration for services embedding the auth core.

Usage:
    from eportal_core.logs import configure_logging

    configure_logging(service_name="eportal-admin", level="INFO")
"""

import logging
import sys
from typing import Any, Dict

import structlog

REDACTED = "[REDACTED]"

# Event keys that may never reach a log sink in clear text
SENSITIVE_KEYS = frozenset({
    "secret",
    "secret_key",
    "secret_b32",
    "code",
    "otp",
    "submitted_code",
    "step_up_code",
    "token",
    "vault_token",
    "provisioning_uri",
})


def redact_secrets(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor that masks secret-bearing keys."""
    for key in list(event_dict.keys()):
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        service_name: Bound into every event as ``service``
        level: Log level name
        json_output: Render JSON lines (production) or console output (development)
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            redact_secrets,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)
