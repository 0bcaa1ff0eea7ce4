"""
Auth Core Assembly
==================
Wires engine, stores, enrollment and resolver from one configuration.
"""

from dataclasses import dataclass
from typing import Optional

import redis
import structlog

from eportal_core.audit import AuditLogger
from eportal_core.claims import ClaimResolver, ClaimStore, InMemoryClaimStore
from eportal_core.config import AuthCoreConfig
from eportal_core.enrollment import EnrollmentManager
from eportal_core.otp import OTPVerifier, TOTPEngine
from eportal_core.rate_limit import (
    FailureLimiter,
    InMemoryFailureLimiter,
    RedisFailureLimiter,
)
from eportal_core.replay import InMemoryReplayStore, RedisReplayStore, ReplayStore
from eportal_core.vault import HvacSecretVault, InMemorySecretVault, SecretVault

logger = structlog.get_logger(__name__)


@dataclass
class AuthCore:
    """The assembled components sharing one set of stores."""
    config: AuthCoreConfig
    engine: TOTPEngine
    verifier: OTPVerifier
    enrollment: EnrollmentManager
    resolver: ClaimResolver


def create_auth_core(
    config: Optional[AuthCoreConfig] = None,
    claim_store: Optional[ClaimStore] = None,
    vault: Optional[SecretVault] = None,
    redis_client=None,
    audit: Optional[AuditLogger] = None,
) -> AuthCore:
    """
    Build an AuthCore.

    Backends are picked from the arguments first, then from configuration:
    Redis for replay and throttling when a client or ``redis_url`` is
    given, HashiCorp Vault when ``vault_addr`` is set, in-memory otherwise.

    Args:
        config: Settings (defaults to ``AuthCoreConfig.from_env()``)
        claim_store: Claim mapping source
        vault: Authenticator storage
        redis_client: Synchronous redis.Redis client
        audit: Audit logger shared by all components

    Returns:
        AuthCore
    """
    config = config or AuthCoreConfig.from_env()

    if redis_client is None and config.redis_url:
        redis_client = redis.Redis.from_url(config.redis_url, decode_responses=True)

    replay_store: ReplayStore
    limiter: FailureLimiter
    if redis_client is not None:
        replay_store = RedisReplayStore(redis_client)
        limiter = RedisFailureLimiter(
            redis_client,
            max_failures=config.throttle_max_failures,
            window=config.throttle_window_seconds,
        )
    else:
        replay_store = InMemoryReplayStore()
        limiter = InMemoryFailureLimiter(
            max_failures=config.throttle_max_failures,
            window=config.throttle_window_seconds,
        )

    if vault is None:
        if config.vault_addr:
            vault = HvacSecretVault(
                url=config.vault_addr,
                token=config.vault_token,
                mount_point=config.vault_mount,
            )
        else:
            logger.warning("No secret vault configured, using in-memory storage")
            vault = InMemorySecretVault()

    engine = TOTPEngine(config)
    verifier = OTPVerifier(engine, vault, replay_store, limiter, audit=audit)

    return AuthCore(
        config=config,
        engine=engine,
        verifier=verifier,
        enrollment=EnrollmentManager(verifier, audit=audit),
        resolver=ClaimResolver(claim_store or InMemoryClaimStore(), verifier, audit=audit),
    )
