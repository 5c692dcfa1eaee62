"""Threshold (multisig) composition of signer identities.

A multisig account is defined by (version, threshold, ordered member
addresses). Its address depends only on that metadata, never on which
members happen to have a signer available locally. Members whose keys are
held elsewhere are simply absent; signing succeeds as long as at least
``threshold`` members are present.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Sequence

from vaultsign.accounts.address import decode_address, multisig_address
from vaultsign.accounts.identity import SignerIdentity
from vaultsign.errors import InsufficientSignatures, InvalidThreshold, UnknownMember
from vaultsign.signing.base import SignerType

logger = logging.getLogger(__name__)

MULTISIG_VERSION = 1


@dataclass(frozen=True)
class MultisigMetadata:
    """Parameters that define a multisig account.

    Attributes:
        version: Multisig format version
        threshold: Number of member signatures required
        addresses: Member addresses; order is part of the account identity
    """
    version: int
    threshold: int
    addresses: tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(self, "addresses", tuple(self.addresses))

    def validate(self) -> None:
        """Check threshold bounds and member address syntax.

        Raises:
            InvalidThreshold: If threshold is not within 1..len(addresses)
            InvalidAddress: If a member address does not decode
        """
        if not 1 <= self.threshold <= len(self.addresses):
            raise InvalidThreshold(
                f"Threshold {self.threshold} invalid for {len(self.addresses)} members"
            )
        if not 0 < self.version < 256 or self.threshold > 255:
            raise ValueError("Version and threshold must fit in one byte")
        for address in self.addresses:
            decode_address(address)

    @property
    def address(self) -> str:
        return multisig_address(self.version, self.threshold, self.addresses)

    @property
    def public_keys(self) -> list[bytes]:
        return [decode_address(address) for address in self.addresses]


@dataclass
class Subsignature:
    """One member slot of a multisig signature."""
    public_key: bytes
    signature: Optional[bytes] = None


@dataclass
class MultisigSignature:
    """Collected member signatures, one slot per member in metadata order."""
    version: int
    threshold: int
    subsignatures: list[Subsignature] = field(default_factory=list)

    @property
    def signed_count(self) -> int:
        return sum(1 for sub in self.subsignatures if sub.signature is not None)


SignaturePackager = Callable[[MultisigMetadata, dict[str, bytes]], Any]


def package_subsignatures(metadata: MultisigMetadata, shares: dict[str, bytes]) -> MultisigSignature:
    """Default packager: lay signature shares out in member order."""
    return MultisigSignature(
        version=metadata.version,
        threshold=metadata.threshold,
        subsignatures=[
            Subsignature(public_key=decode_address(address), signature=shares.get(address))
            for address in metadata.addresses
        ],
    )


class MultisigSigner:
    """Signing capability that gathers threshold signatures from members."""

    signer_type = SignerType.MULTI_SIG

    def __init__(
        self,
        metadata: MultisigMetadata,
        members: Sequence[SignerIdentity],
        packager: Optional[SignaturePackager] = None,
    ):
        self.metadata = metadata
        self.packager = packager or package_subsignatures
        by_address = {}
        for member in members:
            by_address.setdefault(member.address, member)
        # Sign in member order, not in the order identities were supplied
        self.members = [by_address[a] for a in dict.fromkeys(metadata.addresses) if a in by_address]

    async def sign(self, data: bytes) -> Any:
        """Collect ``threshold`` member signatures and package them.

        A member that fails to sign is skipped and the next one is asked.

        Raises:
            InsufficientSignatures: If fewer than ``threshold`` members are
                present, or too many of them failed to sign
        """
        threshold = self.metadata.threshold
        if len(self.members) < threshold:
            raise InsufficientSignatures(
                f"Need {threshold} signers, only {len(self.members)} available"
            )

        shares: dict[str, bytes] = {}
        last_error: Optional[Exception] = None
        for position, member in enumerate(self.members):
            # Stop once the members left cannot make up the shortfall
            if len(shares) + len(self.members) - position < threshold:
                break
            try:
                shares[member.address] = await member.sign(data)
            except Exception as e:
                logger.warning(f"Multisig member {member.address} failed to sign: {e}")
                last_error = e
                continue
            if len(shares) >= threshold:
                break

        if len(shares) < threshold:
            raise InsufficientSignatures(
                f"Collected {len(shares)} of {threshold} required signatures"
            ) from last_error

        logger.debug(f"Collected {len(shares)}/{threshold} multisig signatures")
        return self.packager(self.metadata, shares)

    async def __call__(self, data: bytes) -> Any:
        return await self.sign(data)

    def __repr__(self) -> str:
        return (
            f"MultisigSigner(threshold={self.metadata.threshold}, "
            f"members={len(self.members)}/{len(self.metadata.addresses)})"
        )


@dataclass(frozen=True)
class CompositeSignerIdentity(SignerIdentity):
    """Signer identity for a multisig account."""
    metadata: Optional[MultisigMetadata] = None


def compose_multisig(
    metadata: MultisigMetadata,
    members: Sequence[SignerIdentity],
    packager: Optional[SignaturePackager] = None,
    sending_address: Optional[str] = None,
) -> CompositeSignerIdentity:
    """Combine member identities into one threshold identity.

    Args:
        metadata: Version, threshold and ordered member addresses
        members: Identities available locally (any subset of the members)
        packager: Builds the ledger-specific multisig signature from shares
        sending_address: Rekeyed account the multisig authorizes, if any

    Raises:
        InvalidThreshold: If the threshold is out of range
        UnknownMember: If an identity's address is not a member
    """
    metadata.validate()

    member_set = set(metadata.addresses)
    for member in members:
        if member.address not in member_set:
            raise UnknownMember(f"{member.address} is not a member of this multisig")

    if sending_address is not None:
        decode_address(sending_address)

    address = metadata.address
    logger.info(
        f"Composed {metadata.threshold}-of-{len(metadata.addresses)} multisig {address} "
        f"with {len(members)} local signers"
    )
    return CompositeSignerIdentity(
        address=address,
        signer=MultisigSigner(metadata, members, packager=packager),
        public_key=None,
        sending_address=sending_address,
        metadata=metadata,
    )
