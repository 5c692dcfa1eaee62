"""Cryptographic primitives for ephemeral Ed25519 signing.

Covers:
- Algorand 25-word mnemonic <-> 32-byte seed conversion (py-algorand-sdk)
- Ed25519 key material derivation from a seed (PyNaCl)
- Signature verification
- Zeroization of mutable secret buffers

Seeds and expanded private keys are always handled as ``bytearray`` so they
can be overwritten once the signing call that produced them is done.
"""

import base64
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Union

from algosdk import mnemonic as algo_mnemonic
from nacl.bindings import crypto_sign, crypto_sign_seed_keypair
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from vaultsign.errors import InvalidMnemonic, VerificationFailure

logger = logging.getLogger(__name__)

SEED_LENGTH = 32
PUBLIC_KEY_LENGTH = 32
SIGNATURE_LENGTH = 64
MNEMONIC_LENGTH = 25

BytesLike = Union[bytes, bytearray, memoryview]


def zeroize(buffer: bytearray) -> None:
    """Overwrite a mutable buffer with zeros in place."""
    buffer[:] = bytes(len(buffer))


@contextmanager
def scrubbed(*buffers: bytearray) -> Iterator[None]:
    """Zeroize the given buffers on every exit path of the block."""
    try:
        yield
    finally:
        for buffer in buffers:
            zeroize(buffer)


def _normalize_phrase(mnemonic: str) -> str:
    return " ".join(mnemonic.lower().split()) if mnemonic else ""


def mnemonic_from_seed(seed: BytesLike) -> str:
    """Encode a 32-byte seed as a 25-word mnemonic.

    Args:
        seed: Raw seed bytes

    Returns:
        Space-separated mnemonic, checksum word last

    Raises:
        ValueError: If the seed is not 32 bytes
    """
    if len(seed) != SEED_LENGTH:
        raise ValueError(f"Seed must be {SEED_LENGTH} bytes, got {len(seed)}")

    key = generate_key_material(seed)
    with scrubbed(key.private_key):
        return algo_mnemonic.from_private_key(base64.b64encode(key.private_key).decode())


def seed_from_mnemonic(mnemonic: str) -> bytearray:
    """Decode a 25-word mnemonic into its 32-byte seed.

    The caller owns the returned buffer and must zeroize it.

    Args:
        mnemonic: Mnemonic phrase; case and surrounding whitespace are ignored

    Returns:
        Seed as a mutable 32-byte buffer

    Raises:
        InvalidMnemonic: Wrong word count, unknown word or checksum mismatch
    """
    phrase = _normalize_phrase(mnemonic)
    words = phrase.split()
    if len(words) != MNEMONIC_LENGTH:
        raise InvalidMnemonic(f"Mnemonic must have {MNEMONIC_LENGTH} words, got {len(words)}")

    try:
        encoded = algo_mnemonic.to_private_key(phrase)
    except Exception as e:
        # algosdk reports unknown words and bad checksums with unrelated types
        raise InvalidMnemonic(f"Mnemonic rejected: {type(e).__name__}") from e

    private_key = bytearray(base64.b64decode(encoded))
    with scrubbed(private_key):
        return bytearray(private_key[:SEED_LENGTH])


@dataclass
class KeyMaterial:
    """Ed25519 keypair derived from a seed.

    Attributes:
        public_key: 32-byte public key
        private_key: 64-byte expanded secret key (seed || public key)
    """
    public_key: bytes
    private_key: bytearray

    def sign(self, message: BytesLike) -> bytes:
        """Produce a detached 64-byte signature."""
        signed = crypto_sign(bytes(message), bytes(self.private_key))
        return signed[:SIGNATURE_LENGTH]

    def wipe(self) -> None:
        zeroize(self.private_key)

    def __repr__(self) -> str:
        return f"KeyMaterial(public_key={self.public_key.hex()})"


def generate_key_material(seed: BytesLike) -> KeyMaterial:
    """Derive Ed25519 key material from a 32-byte seed.

    Raises:
        ValueError: If the seed is not 32 bytes
    """
    if len(seed) != SEED_LENGTH:
        raise ValueError(f"Seed must be {SEED_LENGTH} bytes, got {len(seed)}")

    public_key, secret_key = crypto_sign_seed_keypair(bytes(seed))
    return KeyMaterial(public_key=public_key, private_key=bytearray(secret_key))


def verify_signature(signature: BytesLike, message: BytesLike, public_key: BytesLike) -> bool:
    """Check an Ed25519 signature.

    Returns:
        True if valid; False for any bad signature, message or key
    """
    try:
        VerifyKey(bytes(public_key)).verify(bytes(message), bytes(signature))
        return True
    except (BadSignatureError, ValueError, TypeError):
        return False


def require_valid_signature(signature: BytesLike, message: BytesLike, public_key: BytesLike) -> None:
    """Raise VerificationFailure unless the signature verifies."""
    if not verify_signature(signature, message, public_key):
        raise VerificationFailure(
            f"Signature does not verify against public key {bytes(public_key).hex()}"
        )
