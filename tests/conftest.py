"""Pytest configuration and fixtures."""

import os

import pytest

# Keep ambient configuration out of the tests
for _var in ("SIGNER_BACKEND", "KMS_KEY_ID", "KEY_ID", "AWS_REGION", "AWS_DEFAULT_REGION"):
    os.environ.pop(_var, None)
os.environ["ENVIRONMENT"] = "test"

from vaultsign.config import Settings, get_settings
from vaultsign.crypto import generate_key_material, mnemonic_from_seed
from vaultsign.keystore.memory import InMemoryBackend
from vaultsign.signing.ephemeral import EphemeralSigner

SECRET_NAME = "test-mnemonic"


@pytest.fixture(autouse=True)
def reset_settings():
    """Clear cached settings around each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, keyring_account="alice", signing_timeout=5.0)


@pytest.fixture
def seed() -> bytes:
    return bytes(range(1, 33))


@pytest.fixture
def mnemonic(seed) -> str:
    return mnemonic_from_seed(seed)


@pytest.fixture
def public_key(seed) -> bytes:
    return generate_key_material(seed).public_key


@pytest.fixture
def memory_backend(mnemonic) -> InMemoryBackend:
    return InMemoryBackend({SECRET_NAME: mnemonic})


@pytest.fixture
def signer(memory_backend) -> EphemeralSigner:
    return EphemeralSigner(memory_backend, SECRET_NAME)


@pytest.fixture
def make_signer():
    """Factory for signers over their own in-memory store, seeded by index."""

    def _make(index: int) -> EphemeralSigner:
        backend = InMemoryBackend({SECRET_NAME: mnemonic_from_seed(bytes([index]) * 32)})
        return EphemeralSigner(backend, SECRET_NAME)

    return _make
