"""Signer identities: an address paired with the capability that signs for it.

An identity's ``address`` is always derived from its own public key. When the
account it acts for has been rekeyed, ``sending_address`` names that account
instead. Whether the ledger really has that rekey on record is checked by the
ledger at submission time, not here.
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from vaultsign.accounts.address import decode_address, encode_address
from vaultsign.crypto import PUBLIC_KEY_LENGTH
from vaultsign.signing.base import SignerBackend, SigningCapability

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SignerIdentity:
    """Address plus the capability that can sign for it.

    Attributes:
        address: Address derived from ``public_key``
        signer: Signing capability (held, not copied)
        public_key: 32-byte Ed25519 public key, None for composites
        sending_address: Account this signer acts for after a rekey
    """
    address: str
    signer: SigningCapability
    public_key: Optional[bytes] = None
    sending_address: Optional[str] = None

    @property
    def authorizing_address(self) -> str:
        """Account on whose behalf signatures are produced."""
        return self.sending_address or self.address

    @property
    def is_rekeyed(self) -> bool:
        return self.sending_address is not None and self.sending_address != self.address

    async def sign(self, data: bytes) -> Any:
        return await self.signer.sign(data)

    def rekeyed_to(self, sending_address: Optional[str]) -> "SignerIdentity":
        """Copy of this identity acting for another account."""
        if sending_address is not None:
            decode_address(sending_address)
        return replace(self, sending_address=sending_address)


def bind_identity(
    signer: SigningCapability,
    public_key: bytes,
    sending_address: Optional[str] = None,
) -> SignerIdentity:
    """Bind a signer and its public key into an identity.

    Args:
        signer: Signing capability
        public_key: 32-byte Ed25519 public key of the signer
        sending_address: Rekeyed account the signer authorizes, if any

    Raises:
        ValueError: If the public key has the wrong length
        InvalidAddress: If ``sending_address`` is not a valid address
    """
    public_key = bytes(public_key)
    if len(public_key) != PUBLIC_KEY_LENGTH:
        raise ValueError(f"Public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}")
    if sending_address is not None:
        decode_address(sending_address)

    identity = SignerIdentity(
        address=encode_address(public_key),
        signer=signer,
        public_key=public_key,
        sending_address=sending_address,
    )
    if identity.is_rekeyed:
        logger.info(f"Bound {identity.address} to sign for {sending_address}")
    return identity


async def resolve_identity(
    signer: SignerBackend,
    sending_address: Optional[str] = None,
) -> SignerIdentity:
    """Fetch the signer's public key and bind it."""
    public_key = await signer.get_public_key()
    return bind_identity(signer, public_key, sending_address=sending_address)
