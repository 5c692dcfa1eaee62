"""Algorand address encoding.

Address format: base32 (no padding) of public key || last 4 bytes of
SHA-512/256(public key), 58 characters. Multisig addresses use the same
encoding over SHA-512/256 of the multisig preimage. Encoding and checksums
come from py-algorand-sdk; this module adds length checks and maps its
errors onto ``InvalidAddress``.
"""

from typing import Sequence

from algosdk import encoding as algo_encoding

from vaultsign.crypto import PUBLIC_KEY_LENGTH
from vaultsign.errors import InvalidAddress

ADDRESS_LENGTH = 58
MULTISIG_PREFIX = b"MultisigAddr"


def encode_address(public_key: bytes) -> str:
    """Encode a 32-byte public key (or multisig digest) as an address."""
    public_key = bytes(public_key)
    if len(public_key) != PUBLIC_KEY_LENGTH:
        raise ValueError(f"Public key must be {PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}")
    return algo_encoding.encode_address(public_key)


def decode_address(address: str) -> bytes:
    """Decode an address into its 32-byte public key.

    Raises:
        InvalidAddress: On wrong length, bad base32 or checksum mismatch
    """
    if not isinstance(address, str) or len(address) != ADDRESS_LENGTH:
        raise InvalidAddress(f"Address must be {ADDRESS_LENGTH} characters: {address!r}")

    try:
        return bytes(algo_encoding.decode_address(address))
    except Exception as e:
        raise InvalidAddress(f"Invalid address {address}: {type(e).__name__}") from e


def is_valid_address(address: str) -> bool:
    try:
        decode_address(address)
        return True
    except InvalidAddress:
        return False


def multisig_address(version: int, threshold: int, addresses: Sequence[str]) -> str:
    """Compute the address of a multisig account.

    Member order is part of the preimage: reordering yields another address.
    """
    preimage = MULTISIG_PREFIX + bytes([version, threshold])
    preimage += b"".join(decode_address(address) for address in addresses)
    return encode_address(algo_encoding.checksum(preimage))
