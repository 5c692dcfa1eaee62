"""Transaction signing services.

Provides signing implementations that keep no long-lived secret in memory:
- EphemeralSigner: mnemonic fetched from the OS credential store per call
- KMSSigner: AWS KMS-backed Ed25519 signing
"""

from vaultsign.signing.base import SignerBackend, SignerType, SigningCapability
from vaultsign.signing.ephemeral import EphemeralSigner
from vaultsign.signing.factory import create_signer, get_signer_type
from vaultsign.signing.kms import KMSSigner

__all__ = [
    "SignerBackend",
    "SignerType",
    "SigningCapability",
    "EphemeralSigner",
    "KMSSigner",
    "create_signer",
    "get_signer_type",
]
