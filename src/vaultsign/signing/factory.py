"""Signer factory.

Creates the appropriate signing backend based on configuration. A new signer
is built on every call; signers hold no secret state worth sharing.
"""

import logging
from typing import Optional

from vaultsign.config import Settings, get_settings
from vaultsign.signing.base import SignerBackend, SignerType

logger = logging.getLogger(__name__)


def get_signer_type(settings: Optional[Settings] = None) -> SignerType:
    """Determine which signer to use.

    Priority:
    1. SIGNER_BACKEND setting (explicit)
    2. KMS key id present -> KMS
    3. Default to local secret store

    Raises:
        ValueError: If SIGNER_BACKEND names an unknown backend
    """
    settings = settings or get_settings()
    explicit = settings.signer_backend.lower()

    if explicit:
        if explicit == "kms":
            return SignerType.KMS
        elif explicit == "local":
            return SignerType.LOCAL
        raise ValueError(f"Unknown signer backend: {settings.signer_backend}")

    if settings.has_kms:
        return SignerType.KMS

    return SignerType.LOCAL


def create_signer(
    settings: Optional[Settings] = None,
    platform: Optional[str] = None,
) -> SignerBackend:
    """Build the configured signer.

    Args:
        settings: Settings to use (defaults to the cached environment settings)
        platform: Override for the secret store platform (local signer only)

    Returns:
        SignerBackend instance
    """
    settings = settings or get_settings()
    signer_type = get_signer_type(settings)
    logger.info(f"Initializing {signer_type.value} signer")

    if signer_type == SignerType.KMS:
        from vaultsign.signing.kms import KMSSigner
        return KMSSigner(
            key_id=settings.kms_key_id or "",
            region=settings.aws_region,
            timeout=settings.signing_timeout,
        )

    from vaultsign.keystore.factory import dispatch_backend
    from vaultsign.signing.ephemeral import EphemeralSigner
    return EphemeralSigner(
        dispatch_backend(platform=platform, settings=settings),
        settings.secret_name,
        timeout=settings.signing_timeout,
    )
