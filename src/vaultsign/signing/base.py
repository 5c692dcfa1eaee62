"""Base interfaces for signing capabilities.

Signing flow:
1. Caller hands raw bytes to a signer
2. Signer obtains key material (secret store or remote service)
3. Signer returns a 64-byte Ed25519 signature, never key material
4. Any secret derived on the way is destroyed before returning

A signer holds no session state: every ``sign`` call is independent.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable, Optional, Protocol, TypeVar, runtime_checkable

from vaultsign.errors import SigningTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SignerType(str, Enum):
    """Type of signing backend."""
    LOCAL = "local"           # Mnemonic fetched from OS credential store per call
    KMS = "kms"               # AWS KMS, key never leaves the service
    MULTI_SIG = "multi_sig"   # Threshold composition of other signers


@runtime_checkable
class SigningCapability(Protocol):
    """Anything an identity can sign with.

    Single-key backends return a raw 64-byte signature; multisig signers
    return whatever their packager builds from the collected shares.
    """

    async def sign(self, data: bytes) -> Any: ...


class SignerBackend(ABC):
    """Abstract base class for signing capabilities.

    Implementations should NEVER expose raw private keys.
    All signing operations return signatures only.
    """

    def __init__(self, signer_type: SignerType, timeout: Optional[float] = None):
        self.signer_type = signer_type
        self.timeout = timeout or None

    @abstractmethod
    async def sign(self, data: bytes) -> bytes:
        """Sign raw bytes.

        Args:
            data: Message bytes (for Algorand, the tagged transaction bytes)

        Returns:
            64-byte Ed25519 signature
        """
        pass

    @abstractmethod
    async def get_public_key(self) -> bytes:
        """Get the 32-byte Ed25519 public key matching this signer."""
        pass

    async def __call__(self, data: bytes) -> bytes:
        return await self.sign(data)

    async def _in_executor(self, func: Callable[..., T], *args: Any) -> T:
        """Run a blocking call in the default executor, bounded by the timeout."""
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, func, *args)
        if not self.timeout:
            return await future
        try:
            return await asyncio.wait_for(future, timeout=self.timeout)
        except asyncio.TimeoutError:
            raise SigningTimeoutError(
                f"{self.__class__.__name__} call timed out after {self.timeout}s"
            ) from None

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.signer_type.value})"
