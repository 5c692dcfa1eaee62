"""Ephemeral-secret signing backend.

Nothing secret is kept between calls. Each ``sign`` fetches the mnemonic from
the secret store, derives the seed and Ed25519 key material, signs, and
zeroizes the seed and expanded private key before control returns to the
caller, whether signing succeeded or raised.

The mnemonic string returned by the store is immutable and cannot be
scrubbed; only the buffers derived from it are.
"""

import logging
from typing import Optional

from vaultsign.crypto import generate_key_material, scrubbed, seed_from_mnemonic
from vaultsign.keystore.base import HandleLike, SecretBackend, as_handle
from vaultsign.signing.base import SignerBackend, SignerType

logger = logging.getLogger(__name__)


class EphemeralSigner(SignerBackend):
    """Signer that re-derives its key from a secret store on every call.

    Usage:
        signer = EphemeralSigner(dispatch_backend(), "algorand-mainnet-mnemonic")
        signature = await signer.sign(b"TX" + txn_bytes)
    """

    def __init__(
        self,
        backend: SecretBackend,
        handle: HandleLike,
        timeout: Optional[float] = None,
    ):
        """Initialize ephemeral signer.

        Args:
            backend: Secret store holding the mnemonic
            handle: Name of the mnemonic in the store
            timeout: Seconds allowed for the store lookup (None = no limit)
        """
        super().__init__(SignerType.LOCAL, timeout=timeout)
        self.backend = backend
        self.handle = as_handle(handle)

    async def _fetch_mnemonic(self) -> str:
        return await self._in_executor(self.backend.get, self.handle)

    async def sign(self, data: bytes) -> bytes:
        """Sign bytes with a key derived just for this call."""
        message = bytes(data)
        mnemonic = await self._fetch_mnemonic()

        seed = seed_from_mnemonic(mnemonic)
        with scrubbed(seed):
            key = generate_key_material(seed)
            with scrubbed(key.private_key):
                signature = key.sign(message)

        logger.debug(f"Signed {len(message)} bytes with '{self.handle}'")
        return signature

    async def get_public_key(self) -> bytes:
        """Derive the public key under the same per-call discipline."""
        mnemonic = await self._fetch_mnemonic()

        seed = seed_from_mnemonic(mnemonic)
        with scrubbed(seed):
            key = generate_key_material(seed)
            with scrubbed(key.private_key):
                public_key = key.public_key

        return public_key

    def __repr__(self) -> str:
        return f"EphemeralSigner(handle={self.handle.name}, backend={self.backend!r})"
