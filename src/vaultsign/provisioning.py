"""Provisioning helpers: put a fresh mnemonic into a secret store and check
that a signer built on it round-trips a signature.
"""

import logging
import secrets
from typing import Optional

from vaultsign.crypto import (
    SEED_LENGTH,
    generate_key_material,
    mnemonic_from_seed,
    require_valid_signature,
    scrubbed,
)
from vaultsign.keystore.base import HandleLike, SecretBackend, as_handle
from vaultsign.signing.base import SignerBackend

logger = logging.getLogger(__name__)

SELF_TEST_MESSAGE = bytes([1, 2, 3])


def provision_mnemonic(
    backend: SecretBackend,
    handle: HandleLike,
    seed: Optional[bytearray] = None,
) -> bytes:
    """Store a mnemonic for a new (or given) seed.

    The seed buffer is zeroized before returning, including one passed in.

    Args:
        backend: Secret store to write to
        handle: Name to store the mnemonic under
        seed: 32-byte seed to use; a random one is generated when omitted

    Returns:
        32-byte public key of the provisioned account
    """
    handle = as_handle(handle)
    if seed is None:
        seed = bytearray(secrets.token_bytes(SEED_LENGTH))

    with scrubbed(seed):
        key = generate_key_material(seed)
        key.wipe()
        backend.set(handle, mnemonic_from_seed(seed))

    logger.info(f"Provisioned '{handle}' with public key {key.public_key.hex()}")
    return key.public_key


async def self_test(
    signer: SignerBackend,
    public_key: Optional[bytes] = None,
    message: bytes = SELF_TEST_MESSAGE,
) -> bytes:
    """Sign a probe message and verify it.

    Args:
        signer: Signer to exercise
        public_key: Expected public key (fetched from the signer when omitted)
        message: Probe bytes

    Returns:
        The verified signature

    Raises:
        VerificationFailure: If the signature does not verify
    """
    if public_key is None:
        public_key = await signer.get_public_key()

    signature = await signer.sign(message)
    require_valid_signature(signature, message, public_key)
    logger.info(f"Self-test passed for {signer!r}")
    return signature
