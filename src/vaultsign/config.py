"""Application configuration using pydantic-settings.

Covers the signer backend choice, the secret store naming and the AWS KMS
parameters. Nothing here holds secret material.
"""

import getpass
import os
from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")

    # ======================
    # Signer selection
    # ======================
    signer_backend: str = Field(
        default="", description="Explicit signer backend: 'local' or 'kms' (empty = auto)"
    )
    signing_timeout: float = Field(
        default=30.0, description="Seconds allowed per signing call (0 = no timeout)"
    )

    # ======================
    # Local secret store
    # ======================
    secret_name: str = Field(
        default="algorand-mainnet-mnemonic", description="Name of the stored mnemonic"
    )
    keyring_service: str = Field(
        default="algorand", description="secret-tool 'service' attribute on Linux"
    )
    keyring_account: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("keyring_account", "user"),
        description="Keychain account on macOS (defaults to $USER)",
    )

    # ======================
    # AWS KMS
    # ======================
    aws_region: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("aws_region", "aws_default_region"),
        description="AWS region for KMS",
    )
    kms_key_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("kms_key_id", "key_id"),
        description="KMS key ID, ARN or alias of an ECC_NIST_EDWARDS25519 key",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    @property
    def has_kms(self) -> bool:
        """Check if a KMS key is configured."""
        return bool(self.kms_key_id)

    def resolve_account(self) -> str:
        """Account the local keychain entries are scoped to."""
        return self.keyring_account or os.environ.get("USER") or getpass.getuser()

    def get_safe_dict(self) -> dict:
        """Return settings dict with identifiers redacted."""
        return {
            "environment": self.environment,
            "signer_backend": self.signer_backend or "(auto)",
            "signing_timeout": self.signing_timeout,
            "secret_name": self.secret_name,
            "keyring_service": self.keyring_service,
            "kms": {
                "region": self.aws_region or "(default)",
                "key_id": self._redact_key_id(self.kms_key_id),
            },
        }

    @staticmethod
    def _redact_key_id(key_id: Optional[str]) -> str:
        """Keep only the tail of a KMS key identifier."""
        if not key_id:
            return "(not set)"
        return f"***{key_id[-6:]}" if len(key_id) > 6 else "***"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
