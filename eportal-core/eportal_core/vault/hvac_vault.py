"""
HashiCorp Vault Secret Store
============================
Authenticator records kept in a Vault KV v2 mount.

KV v2 versions every write and accepts a ``cas`` parameter, so the
record version doubles as the compare-and-swap token.

Usage:
    from eportal_core.vault import HvacSecretVault

    vault = HvacSecretVault()          # VAULT_ADDR / VAULT_TOKEN from env
    record = vault.get("user-42")
"""

import os
import logging
from typing import Optional

import hvac
from hvac.exceptions import InvalidPath, InvalidRequest, VaultError

from eportal_core.errors import VaultBackendError
from .models import Authenticator

logger = logging.getLogger(__name__)


class HvacSecretVault:
    """SecretVault backed by HashiCorp Vault KV v2."""

    def __init__(
        self,
        url: Optional[str] = None,
        token: Optional[str] = None,
        mount_point: str = "eportal",
        path_prefix: str = "otp-authenticators",
        client: Optional[hvac.Client] = None,
    ):
        self.url = url or os.environ.get("VAULT_ADDR", "http://127.0.0.1:8200")
        self.token = token or os.environ.get("VAULT_TOKEN")
        self.mount_point = mount_point
        self.path_prefix = path_prefix.strip("/")
        self._client = client

    @property
    def client(self) -> hvac.Client:
        """Lazy-loaded Vault client."""
        if self._client is None:
            self._client = hvac.Client(url=self.url, token=self.token)
            if not self._client.is_authenticated():
                raise VaultBackendError("Vault authentication failed. Check VAULT_TOKEN.")
        return self._client

    def _path(self, user_id: str) -> str:
        return f"{self.path_prefix}/{user_id}"

    def get(self, user_id: str) -> Optional[Authenticator]:
        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=self._path(user_id),
                mount_point=self.mount_point,
                raise_on_deleted_version=True,
            )
        except InvalidPath:
            return None
        except VaultError as e:
            logger.error(f"Failed to read authenticator for {user_id}: {type(e).__name__}")
            raise VaultBackendError(f"Vault read failed for {user_id}", user_id=user_id) from None

        data = response["data"]
        return Authenticator.from_storage_dict(data["data"], version=data["metadata"]["version"])

    def put_if_absent(self, authenticator: Authenticator) -> bool:
        # cas=0 only writes when the key does not exist yet
        return self._write(authenticator.user_id, authenticator, cas=0)

    def compare_and_swap(
        self,
        user_id: str,
        expected_version: int,
        new_state: Authenticator,
    ) -> bool:
        return self._write(user_id, new_state, cas=expected_version)

    def _write(self, user_id: str, authenticator: Authenticator, cas: int) -> bool:
        try:
            self.client.secrets.kv.v2.create_or_update_secret(
                path=self._path(user_id),
                secret=authenticator.to_storage_dict(),
                cas=cas,
                mount_point=self.mount_point,
            )
        except InvalidRequest:
            # Vault answers 400 when the check-and-set version does not match
            logger.info(f"Vault CAS conflict for {user_id} (expected version {cas})")
            return False
        except VaultError as e:
            logger.error(f"Failed to write authenticator for {user_id}: {type(e).__name__}")
            raise VaultBackendError(f"Vault write failed for {user_id}", user_id=user_id) from None

        logger.info(f"Authenticator stored for {user_id} ({authenticator.status.value})")
        return True
