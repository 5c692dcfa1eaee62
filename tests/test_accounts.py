"""Tests for addresses, signer identities and rekeying."""

import pytest

from vaultsign.accounts import (
    SignerIdentity,
    bind_identity,
    decode_address,
    encode_address,
    is_valid_address,
    resolve_identity,
)
from vaultsign.crypto import verify_signature
from vaultsign.errors import InvalidAddress

ZERO_ADDRESS = "AAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAY5HFKQ"


class TestAddress:
    """Tests for base32 address encoding."""

    def test_zero_key_address(self):
        assert encode_address(bytes(32)) == ZERO_ADDRESS
        assert decode_address(ZERO_ADDRESS) == bytes(32)

    def test_round_trip(self, public_key):
        address = encode_address(public_key)

        assert len(address) == 58
        assert decode_address(address) == public_key

    def test_bad_checksum(self, public_key):
        address = encode_address(public_key)
        tampered = ("B" if address[0] != "B" else "C") + address[1:]

        with pytest.raises(InvalidAddress):
            decode_address(tampered)

    @pytest.mark.parametrize("value", ["", "short", "1" * 58, ZERO_ADDRESS.lower()])
    def test_invalid_strings(self, value):
        assert is_valid_address(value) is False

    def test_key_length(self):
        with pytest.raises(ValueError):
            encode_address(bytes(31))


class TestBindIdentity:
    """Tests for binding signers to addresses."""

    @pytest.mark.asyncio
    async def test_bind(self, signer, public_key):
        identity = bind_identity(signer, public_key)

        assert identity.address == encode_address(public_key)
        assert identity.public_key == public_key
        assert identity.signer is signer
        assert identity.sending_address is None
        assert identity.authorizing_address == identity.address
        assert not identity.is_rekeyed

    @pytest.mark.asyncio
    async def test_identity_signs_with_capability(self, signer, public_key):
        identity = bind_identity(signer, public_key)

        signature = await identity.sign(b"payload")

        assert verify_signature(signature, b"payload", public_key)

    @pytest.mark.asyncio
    async def test_resolve_identity_fetches_public_key(self, signer, public_key):
        identity = await resolve_identity(signer)

        assert identity.public_key == public_key

    def test_rejects_short_public_key(self, signer):
        with pytest.raises(ValueError):
            bind_identity(signer, b"\x01" * 16)

    def test_rejects_malformed_sending_address(self, signer, public_key):
        with pytest.raises(InvalidAddress):
            bind_identity(signer, public_key, sending_address="not-an-address")


class TestRekeying:
    """A rekeyed identity signs for an account other than its own address."""

    @pytest.mark.asyncio
    async def test_rekeyed_identity_signs_as_original_account(self, make_signer):
        original = await resolve_identity(make_signer(1))
        new_key = make_signer(2)

        rekeyed = await resolve_identity(new_key, sending_address=original.address)
        signature = await rekeyed.sign(b"TXpay")

        assert rekeyed.authorizing_address == original.address
        assert rekeyed.address != original.address
        assert rekeyed.is_rekeyed
        # The signature comes from the new key, not the account's original key
        assert verify_signature(signature, b"TXpay", rekeyed.public_key)
        assert not verify_signature(signature, b"TXpay", original.public_key)

    @pytest.mark.asyncio
    async def test_rebinding_does_not_change_account_address(self, make_signer):
        account = await resolve_identity(make_signer(1))
        address_before = account.address

        first = await resolve_identity(make_signer(2), sending_address=account.address)
        second = await resolve_identity(make_signer(3), sending_address=account.address)

        assert first.authorizing_address == second.authorizing_address == address_before
        assert first.address != second.address
        assert encode_address(account.public_key) == address_before

    @pytest.mark.asyncio
    async def test_rekeyed_to_returns_copy(self, signer, public_key):
        identity = bind_identity(signer, public_key)

        moved = identity.rekeyed_to(ZERO_ADDRESS)

        assert moved.sending_address == ZERO_ADDRESS
        assert identity.sending_address is None
        assert moved.signer is identity.signer
        assert moved.rekeyed_to(None).sending_address is None

    def test_sending_address_equal_to_own_address(self, signer, public_key):
        identity = bind_identity(signer, public_key, sending_address=encode_address(public_key))

        assert not identity.is_rekeyed

    def test_identity_is_immutable(self, signer, public_key):
        identity = bind_identity(signer, public_key)

        with pytest.raises(AttributeError):
            identity.sending_address = ZERO_ADDRESS

    def test_identity_is_a_dataclass_value(self, signer, public_key):
        assert bind_identity(signer, public_key) == SignerIdentity(
            address=encode_address(public_key), signer=signer, public_key=public_key,
        )
