"""
Auth Core Configuration
=======================
TOTP, throttling and backend settings read from the environment.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from eportal_core.errors import ConfigurationError

ENV_PREFIX = "EPORTAL_"

SUPPORTED_ALGORITHMS = ("SHA1", "SHA256", "SHA512")

# RFC 4226 recommends at least 160 bits of shared secret
MIN_SECRET_BYTES = 20


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(f"{ENV_PREFIX}{name}", default)


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}")


@dataclass
class AuthCoreConfig:
    """Configuration for the TOTP engine, throttling and storage backends."""
    step_seconds: int = 30
    digits: int = 6
    tolerance_steps: int = 1
    algorithm: str = "SHA1"
    issuer: str = "EPortal"
    secret_bytes: int = MIN_SECRET_BYTES

    # Consecutive failures allowed inside the sliding window
    throttle_max_failures: int = 5
    throttle_window_seconds: int = 900  # 15 minutes

    redis_url: Optional[str] = None
    vault_addr: Optional[str] = None
    vault_token: Optional[str] = field(default=None, repr=False)
    vault_mount: str = "eportal"

    def __post_init__(self):
        self.algorithm = self.algorithm.upper()
        if self.step_seconds <= 0:
            raise ConfigurationError("step_seconds must be positive")
        if not 6 <= self.digits <= 10:
            raise ConfigurationError("digits must be between 6 and 10")
        if self.tolerance_steps < 0:
            raise ConfigurationError("tolerance_steps cannot be negative")
        if self.algorithm not in SUPPORTED_ALGORITHMS:
            raise ConfigurationError(f"Unsupported TOTP algorithm: {self.algorithm}")
        if self.secret_bytes < MIN_SECRET_BYTES:
            raise ConfigurationError(
                f"secret_bytes must be at least {MIN_SECRET_BYTES} (160 bits)"
            )
        if self.throttle_max_failures <= 0 or self.throttle_window_seconds <= 0:
            raise ConfigurationError("throttle limits must be positive")

    @property
    def validity_window_seconds(self) -> int:
        """Seconds during which a single code can be accepted."""
        return (2 * self.tolerance_steps + 1) * self.step_seconds

    @classmethod
    def from_env(cls) -> "AuthCoreConfig":
        """Build configuration from EPORTAL_* environment variables."""
        return cls(
            step_seconds=_env_int("TOTP_STEP_SECONDS", 30),
            digits=_env_int("TOTP_DIGITS", 6),
            tolerance_steps=_env_int("TOTP_TOLERANCE_STEPS", 1),
            algorithm=_env("TOTP_ALGORITHM", "SHA1"),
            issuer=_env("TOTP_ISSUER", "EPortal"),
            secret_bytes=_env_int("SECRET_BYTES", MIN_SECRET_BYTES),
            throttle_max_failures=_env_int("THROTTLE_MAX_FAILURES", 5),
            throttle_window_seconds=_env_int("THROTTLE_WINDOW_SECONDS", 900),
            redis_url=_env("REDIS_URL"),
            vault_addr=_env("VAULT_ADDR"),
            vault_token=_env("VAULT_TOKEN"),
            vault_mount=_env("VAULT_MOUNT", "eportal"),
        )
