"""Secret stores for wrapped signing material.

Provides platform credential store adapters:
- MacKeychainBackend: macOS keychain via ``security``
- SecretToolBackend: Linux Secret Service via ``secret-tool``
- WindowsCredentialBackend: Windows Credential Manager via PowerShell
- InMemoryBackend: dictionary store for development and tests
"""

from vaultsign.keystore.base import (
    BackendType,
    SecretBackend,
    SecretHandle,
    as_handle,
)
from vaultsign.keystore.factory import dispatch_backend
from vaultsign.keystore.memory import InMemoryBackend

__all__ = [
    "BackendType",
    "SecretBackend",
    "SecretHandle",
    "as_handle",
    "dispatch_backend",
    "InMemoryBackend",
]
