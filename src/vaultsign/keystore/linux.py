"""Linux Secret Service backend (GNOME Keyring, KWallet) via ``secret-tool``."""

import logging

from vaultsign.errors import SecretNotFound
from vaultsign.keystore.base import BackendType, CommandSecretBackend, HandleLike, as_handle

logger = logging.getLogger(__name__)


class SecretToolBackend(CommandSecretBackend):
    """Secrets stored under attributes ``service=<service> account=<name>``."""

    TOOL = "secret-tool"

    def __init__(self, service: str = "algorand"):
        super().__init__(BackendType.LINUX)
        self.service = service

    def _attributes(self, handle) -> list[str]:
        return ["service", self.service, "account", handle.name]

    def get(self, handle: HandleLike) -> str:
        handle = as_handle(handle)
        secret = self._run([self.TOOL, "lookup", *self._attributes(handle)], handle=handle)
        # secret-tool may exit 0 with empty output when nothing matches
        if not secret:
            raise SecretNotFound(f"No secret stored under '{handle}'")
        return secret

    def set(self, handle: HandleLike, mnemonic: str) -> None:
        handle = as_handle(handle)
        self._run(
            [self.TOOL, "store", "--label", f"Algorand mnemonic ({handle.name})", *self._attributes(handle)],
            input=f"{mnemonic}\n",
        )
        logger.info(f"Stored secret '{handle}' in Secret Service ({self.service})")
