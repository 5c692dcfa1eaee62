"""macOS keychain backend.

Uses the ``security`` tool against the user's login keychain. Entries are
generic passwords keyed by (account, service) where the service is the
secret name.
"""

import logging
import os
from typing import Optional

from vaultsign.errors import SecretBackendError, SecretNotFound
from vaultsign.keystore.base import BackendType, CommandSecretBackend, HandleLike, as_handle

logger = logging.getLogger(__name__)


class MacKeychainBackend(CommandSecretBackend):
    """Secrets stored as generic passwords in the macOS keychain."""

    TOOL = "security"

    def __init__(self, account: Optional[str] = None):
        """Initialize keychain backend.

        Args:
            account: Keychain account scope (defaults to $USER)
        """
        super().__init__(BackendType.DARWIN)
        self._account = account

    @property
    def account(self) -> str:
        account = self._account or os.environ.get("USER", "")
        if not account:
            raise SecretBackendError("USER is not set; cannot scope keychain entry")
        return account

    def get(self, handle: HandleLike) -> str:
        handle = as_handle(handle)
        secret = self._run(
            [self.TOOL, "find-generic-password", "-a", self.account, "-s", handle.name, "-w"],
            handle=handle,
        )
        if not secret:
            raise SecretNotFound(f"No secret stored under '{handle}'")
        return secret

    def set(self, handle: HandleLike, mnemonic: str) -> None:
        handle = as_handle(handle)
        # -U updates an existing item in place
        self._run([
            self.TOOL, "add-generic-password",
            "-a", self.account,
            "-s", handle.name,
            "-w", mnemonic,
            "-U",
        ])
        logger.info(f"Stored secret '{handle}' in macOS keychain")
