"""Secret backend dispatch.

Picks the credential store adapter for the running OS. Selection is pure:
no caching and no fallback to a default store. Callers construct the backend
once and inject it into the signer.
"""

import logging
import sys
from typing import Optional

from vaultsign.config import Settings, get_settings
from vaultsign.errors import UnsupportedPlatform
from vaultsign.keystore.base import SecretBackend

logger = logging.getLogger(__name__)


def dispatch_backend(
    platform: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> SecretBackend:
    """Create the secret backend for a platform.

    Args:
        platform: ``sys.platform``-style identifier (defaults to the current one)
        settings: Settings supplying keychain account and service names

    Returns:
        SecretBackend for the platform

    Raises:
        UnsupportedPlatform: If no adapter exists for the platform
    """
    platform = platform or sys.platform
    settings = settings or get_settings()

    if platform == "darwin":
        from vaultsign.keystore.darwin import MacKeychainBackend
        backend = MacKeychainBackend(account=settings.resolve_account())

    elif platform.startswith("linux"):
        from vaultsign.keystore.linux import SecretToolBackend
        backend = SecretToolBackend(service=settings.keyring_service)

    elif platform == "win32":
        from vaultsign.keystore.windows import WindowsCredentialBackend
        backend = WindowsCredentialBackend()

    else:
        raise UnsupportedPlatform(f"Unsupported platform: {platform}")

    logger.info(f"Selected {backend.backend_type.value} secret backend")
    return backend
