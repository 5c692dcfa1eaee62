"""AWS KMS signing backend.

Uses AWS Key Management Service for Ed25519 signing. KMS keys never leave
AWS: no seed or private key is derived locally, so there is nothing to
zeroize.

Setup:
1. Create an asymmetric key in AWS KMS (key spec ECC_NIST_EDWARDS25519,
   usage SIGN_VERIFY)
2. Set KMS_KEY_ID (or KEY_ID) and AWS_REGION environment variables
3. Configure AWS credentials (IAM role, access keys, etc.)

Reference:
- https://docs.aws.amazon.com/kms/latest/developerguide/symm-asymm-choose-key-spec.html
"""

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from vaultsign.errors import (
    KeyNotFoundError,
    MalformedPublicKeyFormat,
    RemotePublicKeyMissing,
    RemoteSignatureMissing,
    RemoteSigningError,
)
from vaultsign.signing.base import SignerBackend, SignerType

logger = logging.getLogger(__name__)

# DER SubjectPublicKeyInfo header for an Ed25519 key (OID 1.3.101.112)
ED25519_SPKI_PREFIX = bytes([
    0x30, 0x2A, 0x30, 0x05, 0x06, 0x03, 0x2B, 0x65, 0x70, 0x03, 0x21, 0x00,
])
ED25519_PUBLIC_KEY_LENGTH = 32


def parse_ed25519_spki(der_key: bytes) -> bytes:
    """Extract the raw public key from a DER SubjectPublicKeyInfo envelope.

    Raises:
        MalformedPublicKeyFormat: If the envelope is not an Ed25519 SPKI
    """
    der_key = bytes(der_key)
    if der_key[:len(ED25519_SPKI_PREFIX)] != ED25519_SPKI_PREFIX:
        raise MalformedPublicKeyFormat("Unexpected public key format")

    public_key = der_key[len(ED25519_SPKI_PREFIX):]
    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
        raise MalformedPublicKeyFormat(
            f"Expected {ED25519_PUBLIC_KEY_LENGTH}-byte key after header, got {len(public_key)}"
        )
    return public_key


class KMSSigner(SignerBackend):
    """AWS KMS signing backend.

    Signs with ``ED25519_SHA_512`` over the raw message, which produces the
    same signature a local Ed25519 key would.

    Keys are identified by:
    - AWS KMS Key ID (e.g., "1234abcd-12ab-34cd-56ef-1234567890ab")
    - AWS KMS Key ARN
    - AWS KMS Key Alias (e.g., "alias/my-signing-key")
    """

    SIGNING_ALGORITHM = "ED25519_SHA_512"
    MESSAGE_TYPE = "RAW"

    def __init__(
        self,
        key_id: str,
        region: Optional[str] = None,
        client: Optional[Any] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize KMS signer.

        Args:
            key_id: KMS key ID, ARN or alias
            region: AWS region (defaults to boto3's resolution)
            client: Pre-built KMS client (built lazily when omitted)
            timeout: Seconds allowed per KMS call (None = no limit)
        """
        super().__init__(SignerType.KMS, timeout=timeout)
        if not key_id:
            raise KeyNotFoundError("No KMS key configured")
        self.key_id = key_id
        self.region = region
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("kms", region_name=self.region)
        return self._client

    async def _call(self, operation: str, **kwargs) -> dict:
        """Invoke a KMS operation off the event loop."""
        method = getattr(self.client, operation)
        try:
            return await self._in_executor(lambda: method(**kwargs))
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"KMS {operation} failed for {self.key_id}: {error_code}")
            if error_code == "NotFoundException":
                raise KeyNotFoundError(f"KMS key not found: {self.key_id}") from e
            raise RemoteSigningError(f"KMS {operation} failed: {error_code}") from e
        except BotoCoreError as e:
            logger.error(f"KMS {operation} failed for {self.key_id}: {e}")
            raise RemoteSigningError(f"KMS {operation} failed: {e}") from e

    async def sign(self, data: bytes) -> bytes:
        """Sign raw bytes using AWS KMS."""
        response = await self._call(
            "sign",
            KeyId=self.key_id,
            Message=bytes(data),
            MessageType=self.MESSAGE_TYPE,
            SigningAlgorithm=self.SIGNING_ALGORITHM,
        )

        signature = response.get("Signature")
        if not signature:
            raise RemoteSignatureMissing("No signature returned from KMS")

        logger.debug(f"KMS signed {len(data)} bytes with {self.key_id}")
        return bytes(signature)

    async def get_public_key(self) -> bytes:
        """Fetch and unwrap the Ed25519 public key from KMS."""
        response = await self._call("get_public_key", KeyId=self.key_id)

        der_key = response.get("PublicKey")
        if not der_key:
            raise RemotePublicKeyMissing("No public key returned from KMS")

        return parse_ed25519_spki(der_key)

    def __repr__(self) -> str:
        return f"KMSSigner(key_id={self.key_id}, region={self.region})"
