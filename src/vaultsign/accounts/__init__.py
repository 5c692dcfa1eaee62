"""Account identities for signers.

Binds signing capabilities to addresses, supports rekeyed (delegated)
accounts, and composes threshold multisig identities.
"""

from vaultsign.accounts.address import (
    decode_address,
    encode_address,
    is_valid_address,
    multisig_address,
)
from vaultsign.accounts.identity import SignerIdentity, bind_identity, resolve_identity
from vaultsign.accounts.multisig import (
    MULTISIG_VERSION,
    CompositeSignerIdentity,
    MultisigMetadata,
    MultisigSignature,
    MultisigSigner,
    Subsignature,
    compose_multisig,
)

__all__ = [
    "decode_address",
    "encode_address",
    "is_valid_address",
    "multisig_address",
    "SignerIdentity",
    "bind_identity",
    "resolve_identity",
    "MULTISIG_VERSION",
    "CompositeSignerIdentity",
    "MultisigMetadata",
    "MultisigSignature",
    "MultisigSigner",
    "Subsignature",
    "compose_multisig",
]
