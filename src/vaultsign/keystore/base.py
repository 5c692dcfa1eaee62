"""Base interfaces for secret stores.

A secret backend keeps named mnemonics in a platform credential store and
hands them out on request. Backends never cache: the store is the single
source of truth and every ``get`` goes back to it.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from vaultsign.errors import SecretBackendError, SecretNotFound

logger = logging.getLogger(__name__)


class BackendType(str, Enum):
    """Type of secret store."""
    DARWIN = "darwin"         # macOS login keychain (security)
    LINUX = "linux"           # Secret Service (secret-tool)
    WINDOWS = "windows"       # Credential Manager (PowerShell)
    MEMORY = "memory"         # Process-local dictionary


@dataclass(frozen=True)
class SecretHandle:
    """Logical name of one stored secret. Not itself sensitive."""
    name: str

    def __post_init__(self):
        if not self.name:
            raise ValueError("Secret handle name must not be empty")

    def __str__(self) -> str:
        return self.name


HandleLike = Union[SecretHandle, str]


def as_handle(handle: HandleLike) -> SecretHandle:
    """Accept either a SecretHandle or a bare name."""
    return handle if isinstance(handle, SecretHandle) else SecretHandle(handle)


class SecretBackend(ABC):
    """Abstract base class for secret stores.

    Implementations must never log the secret values passing through them.
    """

    def __init__(self, backend_type: BackendType):
        self.backend_type = backend_type

    @abstractmethod
    def get(self, handle: HandleLike) -> str:
        """Fetch the mnemonic stored under a handle.

        Raises:
            SecretNotFound: If the store has no entry for the handle
            SecretBackendError: If the store could not be queried
        """
        pass

    @abstractmethod
    def set(self, handle: HandleLike, mnemonic: str) -> None:
        """Create or replace the mnemonic stored under a handle.

        Concurrent calls for the same handle must be serialized by the caller.
        """
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(type={self.backend_type.value})"


class CommandSecretBackend(SecretBackend):
    """Secret backend driven through a platform command-line tool."""

    def _run(
        self,
        args: Sequence[str],
        input: Optional[str] = None,
        handle: Optional[SecretHandle] = None,
    ) -> str:
        """Run the credential tool and return its stripped stdout.

        A non-zero exit is reported as SecretNotFound when ``handle`` is
        given (lookups) and as SecretBackendError otherwise. The command line
        is never included in the error, since writes may carry the secret.
        """
        try:
            result = subprocess.run(
                list(args),
                input=input,
                capture_output=True,
                text=True,
                check=True,
            )
        except FileNotFoundError:
            raise SecretBackendError(f"Credential tool '{args[0]}' is not installed") from None
        except subprocess.CalledProcessError as e:
            if handle is not None:
                logger.debug(f"{args[0]} lookup for '{handle}' exited with {e.returncode}")
                raise SecretNotFound(f"No secret stored under '{handle}'") from None
            raise SecretBackendError(
                f"Credential tool '{args[0]}' failed with exit code {e.returncode}"
            ) from None

        return result.stdout.strip()
