"""Exception hierarchy for signing, secret storage and account composition.

Every failure is a typed exception the caller can recover from; nothing is
retried inside the package.
"""


class SigningError(Exception):
    """Exception raised when signing fails."""
    pass


class KeyNotFoundError(SigningError):
    """Exception raised when signing key is not found."""
    pass


class SigningTimeoutError(SigningError):
    """Exception raised when signing operation times out."""
    pass


class VerificationFailure(SigningError):
    """Signature does not verify against the claimed public key."""
    pass


class InvalidMnemonic(SigningError):
    """Mnemonic has the wrong length, an unknown word or a bad checksum."""
    pass


# ----------------------------------------------------------------------
# Secret stores
# ----------------------------------------------------------------------

class SecretNotFound(KeyNotFoundError):
    """The secret store has no entry for the handle."""
    pass


class SecretBackendError(SigningError):
    """Credential tool is missing or failed for a reason other than absence."""
    pass


class UnsupportedPlatform(SecretBackendError):
    """No secret backend adapter exists for the current platform."""
    pass


# ----------------------------------------------------------------------
# Remote (KMS) signing
# ----------------------------------------------------------------------

class RemoteSigningError(SigningError):
    """The remote signing service rejected or failed the call."""
    pass


class RemoteSignatureMissing(RemoteSigningError):
    """The service acknowledged a sign call but returned no signature."""
    pass


class RemotePublicKeyMissing(RemoteSigningError):
    """The service acknowledged a key export but returned no key."""
    pass


class MalformedPublicKeyFormat(RemoteSigningError):
    """Exported public key envelope is not an Ed25519 SubjectPublicKeyInfo."""
    pass


# ----------------------------------------------------------------------
# Accounts
# ----------------------------------------------------------------------

class InvalidAddress(ValueError):
    """Address string is not a valid base32 account address."""
    pass


class MultisigError(SigningError):
    """Base class for multisig composition failures."""
    pass


class InvalidThreshold(MultisigError):
    """Threshold is outside 1..len(members)."""
    pass


class UnknownMember(MultisigError):
    """An identity does not belong to the multisig member list."""
    pass


class InsufficientSignatures(MultisigError):
    """Fewer member signers are present than the threshold requires."""
    pass
