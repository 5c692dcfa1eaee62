"""In-process secret backend for development and tests.

Holds mnemonics in a plain dictionary. Not for production secrets.
"""

import logging
import threading
from typing import Optional

from vaultsign.errors import SecretNotFound
from vaultsign.keystore.base import BackendType, HandleLike, SecretBackend, as_handle

logger = logging.getLogger(__name__)


class InMemoryBackend(SecretBackend):
    """Dictionary-backed secret store."""

    def __init__(self, secrets: Optional[dict[str, str]] = None):
        super().__init__(BackendType.MEMORY)
        self._secrets: dict[str, str] = dict(secrets or {})
        self._lock = threading.Lock()

    def get(self, handle: HandleLike) -> str:
        handle = as_handle(handle)
        with self._lock:
            try:
                return self._secrets[handle.name]
            except KeyError:
                raise SecretNotFound(f"No secret stored under '{handle}'") from None

    def set(self, handle: HandleLike, mnemonic: str) -> None:
        handle = as_handle(handle)
        with self._lock:
            self._secrets[handle.name] = mnemonic
        logger.debug(f"Stored secret '{handle}' in memory")

    def delete(self, handle: HandleLike) -> None:
        """Remove a secret if present."""
        with self._lock:
            self._secrets.pop(as_handle(handle).name, None)

    def __contains__(self, handle: HandleLike) -> bool:
        return as_handle(handle).name in self._secrets
