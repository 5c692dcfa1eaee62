"""Tests for the ephemeral signer and signer factory."""

import asyncio
import time
from unittest.mock import patch

import pytest

from conftest import SECRET_NAME
from vaultsign.config import Settings
from vaultsign.crypto import KeyMaterial, verify_signature
from vaultsign.errors import InvalidMnemonic, KeyNotFoundError, SecretNotFound, SigningTimeoutError
from vaultsign.keystore.linux import SecretToolBackend
from vaultsign.keystore.memory import InMemoryBackend
from vaultsign.signing import EphemeralSigner, KMSSigner, SignerType, create_signer, get_signer_type
from vaultsign.signing import ephemeral as ephemeral_module


class CountingBackend(InMemoryBackend):
    """In-memory backend that counts lookups and can stall them."""

    def __init__(self, secrets, delay: float = 0.0):
        super().__init__(secrets)
        self.lookups = 0
        self.delay = delay

    def get(self, handle):
        self.lookups += 1
        if self.delay:
            time.sleep(self.delay)
        return super().get(handle)


@pytest.fixture
def captured_seeds():
    """Record every seed buffer the ephemeral signer derives."""
    seeds = []
    real = ephemeral_module.seed_from_mnemonic

    def capture(mnemonic):
        seed = real(mnemonic)
        seeds.append(seed)
        return seed

    with patch.object(ephemeral_module, "seed_from_mnemonic", side_effect=capture):
        yield seeds


@pytest.fixture
def captured_keys():
    """Record every key material object the ephemeral signer derives."""
    keys = []
    real = ephemeral_module.generate_key_material

    def capture(seed):
        key = real(seed)
        keys.append(key)
        return key

    with patch.object(ephemeral_module, "generate_key_material", side_effect=capture):
        yield keys


class TestEphemeralSigner:
    """Tests for per-call key derivation."""

    @pytest.mark.asyncio
    async def test_sign_then_verify(self, signer, public_key):
        message = b"TX" + bytes(range(40))

        signature = await signer.sign(message)

        assert len(signature) == 64
        assert verify_signature(signature, message, public_key)

    @pytest.mark.asyncio
    async def test_get_public_key(self, signer, public_key):
        assert await signer.get_public_key() == public_key

    @pytest.mark.asyncio
    async def test_callable_as_capability(self, signer, public_key):
        signature = await signer(b"abc")

        assert verify_signature(signature, b"abc", public_key)

    @pytest.mark.asyncio
    async def test_each_call_refetches_secret(self, mnemonic):
        backend = CountingBackend({SECRET_NAME: mnemonic})
        signer = EphemeralSigner(backend, SECRET_NAME)

        await signer.sign(b"one")
        await signer.sign(b"two")

        assert backend.lookups == 2

    @pytest.mark.asyncio
    async def test_store_change_takes_effect_immediately(self, mnemonic, make_signer):
        backend = InMemoryBackend({SECRET_NAME: mnemonic})
        signer = EphemeralSigner(backend, SECRET_NAME)
        first = await signer.get_public_key()

        other = make_signer(7)
        backend.set(SECRET_NAME, other.backend.get(SECRET_NAME))

        assert await signer.get_public_key() == await other.get_public_key()
        assert await signer.get_public_key() != first

    @pytest.mark.asyncio
    async def test_missing_secret(self):
        signer = EphemeralSigner(InMemoryBackend(), SECRET_NAME)

        with pytest.raises(SecretNotFound):
            await signer.sign(b"abc")

    @pytest.mark.asyncio
    async def test_corrupt_mnemonic(self):
        signer = EphemeralSigner(InMemoryBackend({SECRET_NAME: "not a mnemonic"}), SECRET_NAME)

        with pytest.raises(InvalidMnemonic):
            await signer.sign(b"abc")

    @pytest.mark.asyncio
    async def test_concurrent_signing(self, signer, public_key):
        messages = [bytes([i]) * 10 for i in range(8)]

        signatures = await asyncio.gather(*(signer.sign(m) for m in messages))

        assert all(verify_signature(s, m, public_key) for s, m in zip(signatures, messages))

    def test_repr_names_handle(self, signer):
        assert SECRET_NAME in repr(signer)


class TestZeroization:
    """Derived secrets are zero once sign() returns or raises."""

    @pytest.mark.asyncio
    async def test_seed_zeroed_after_success(self, signer, captured_seeds, captured_keys):
        await signer.sign(b"abc")

        assert len(captured_seeds) == 1
        assert captured_seeds[0] == bytearray(32)
        assert captured_keys[0].private_key == bytearray(64)

    @pytest.mark.asyncio
    async def test_seed_zeroed_after_public_key(self, signer, captured_seeds, captured_keys):
        await signer.get_public_key()

        assert captured_seeds[0] == bytearray(32)
        assert captured_keys[0].private_key == bytearray(64)

    @pytest.mark.asyncio
    async def test_seed_zeroed_when_derivation_fails(self, signer, captured_seeds):
        with patch.object(ephemeral_module, "generate_key_material", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError, match="boom"):
                await signer.sign(b"abc")

        assert captured_seeds[0] == bytearray(32)

    @pytest.mark.asyncio
    async def test_secrets_zeroed_when_signing_fails(self, signer, captured_seeds, captured_keys):
        with patch.object(KeyMaterial, "sign", side_effect=RuntimeError("boom")):
            with pytest.raises(RuntimeError, match="boom"):
                await signer.sign(b"abc")

        assert captured_seeds[0] == bytearray(32)
        assert captured_keys[0].private_key == bytearray(64)

    @pytest.mark.asyncio
    async def test_timeout_before_derivation(self, mnemonic, captured_seeds):
        backend = CountingBackend({SECRET_NAME: mnemonic}, delay=0.3)
        signer = EphemeralSigner(backend, SECRET_NAME, timeout=0.05)

        with pytest.raises(SigningTimeoutError):
            await signer.sign(b"abc")

        assert captured_seeds == []

    @pytest.mark.asyncio
    async def test_cancellation_leaves_no_seed(self, mnemonic, captured_seeds):
        backend = CountingBackend({SECRET_NAME: mnemonic}, delay=0.3)
        signer = EphemeralSigner(backend, SECRET_NAME)

        task = asyncio.create_task(signer.sign(b"abc"))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert captured_seeds == []


class TestSignerFactory:
    """Tests for signer selection from settings."""

    def test_default_is_local(self):
        assert get_signer_type(Settings(_env_file=None)) == SignerType.LOCAL

    def test_kms_key_implies_kms(self):
        assert get_signer_type(Settings(_env_file=None, kms_key_id="alias/algo")) == SignerType.KMS

    def test_explicit_local_wins(self):
        settings = Settings(_env_file=None, signer_backend="LOCAL", kms_key_id="alias/algo")

        assert get_signer_type(settings) == SignerType.LOCAL

    def test_unknown_backend(self):
        with pytest.raises(ValueError):
            get_signer_type(Settings(_env_file=None, signer_backend="vault"))

    def test_create_kms_signer(self):
        settings = Settings(_env_file=None, kms_key_id="alias/algo", aws_region="eu-west-1")

        signer = create_signer(settings)

        assert isinstance(signer, KMSSigner)
        assert signer.key_id == "alias/algo"
        assert signer.region == "eu-west-1"

    def test_kms_without_key(self):
        with pytest.raises(KeyNotFoundError):
            create_signer(Settings(_env_file=None, signer_backend="kms"))

    def test_create_local_signer(self, settings):
        signer = create_signer(settings, platform="linux")

        assert isinstance(signer, EphemeralSigner)
        assert isinstance(signer.backend, SecretToolBackend)
        assert signer.handle.name == settings.secret_name
        assert signer.timeout == settings.signing_timeout

    def test_zero_timeout_disables_limit(self):
        signer = create_signer(Settings(_env_file=None, signing_timeout=0), platform="linux")

        assert signer.timeout is None
