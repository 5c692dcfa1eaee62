"""Windows Credential Manager backend.

Requires the ``CredentialManager`` PowerShell module
(``Install-Module CredentialManager -Scope CurrentUser``).

The credential API returns the password as a SecureString. It is marshalled
to a BSTR only long enough to print it, and the BSTR is released with
``ZeroFreeBSTR`` so the unprotected copy is scrubbed inside PowerShell.
"""

import logging

from vaultsign.errors import SecretNotFound
from vaultsign.keystore.base import BackendType, CommandSecretBackend, HandleLike, as_handle

logger = logging.getLogger(__name__)

_MARSHAL = "[Runtime.InteropServices.Marshal]"


def ps_quote(value: str) -> str:
    """Quote a value as a PowerShell single-quoted string literal."""
    return "'" + value.replace("'", "''") + "'"


class WindowsCredentialBackend(CommandSecretBackend):
    """Secrets stored as generic credentials targeted by the secret name."""

    TOOL = "powershell"

    def __init__(self):
        super().__init__(BackendType.WINDOWS)

    def _powershell(self, script: str, **kwargs) -> str:
        return self._run(
            [
                self.TOOL,
                "-NoProfile",
                "-NonInteractive",
                "-ExecutionPolicy",
                "Bypass",
                "-Command",
                script,
            ],
            **kwargs,
        )

    def get(self, handle: HandleLike) -> str:
        handle = as_handle(handle)
        script = (
            f"$c = Get-StoredCredential -Target {ps_quote(handle.name)}; "
            "if (-not $c) { throw 'Credential not found' }; "
            f"$bstr = {_MARSHAL}::SecureStringToBSTR($c.Password); "
            f"try {{ {_MARSHAL}::PtrToStringBSTR($bstr) }} "
            f"finally {{ {_MARSHAL}::ZeroFreeBSTR($bstr) }}"
        )
        secret = self._powershell(script, handle=handle)
        if not secret:
            raise SecretNotFound(f"No secret stored under '{handle}'")
        return secret

    def set(self, handle: HandleLike, mnemonic: str) -> None:
        handle = as_handle(handle)
        # The secret travels on stdin so it never appears in the process list
        script = (
            "if (-not (Get-Module -ListAvailable -Name CredentialManager)) { "
            "throw 'Install CredentialManager module first: "
            "Install-Module CredentialManager -Scope CurrentUser' }; "
            "$m = [Console]::In.ReadLine(); "
            f"try {{ New-StoredCredential -Target {ps_quote(handle.name)} -UserName $env:USERNAME "
            "-Password $m -Persist LocalMachine -Type Generic | Out-Null } "
            "finally { Remove-Variable m }"
        )
        self._powershell(script, input=f"{mnemonic}\n")
        logger.info(f"Stored secret '{handle}' in Windows Credential Manager")
