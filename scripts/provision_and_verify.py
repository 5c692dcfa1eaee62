#!/usr/bin/env python3
"""Provision a mnemonic into the platform secret store and verify signing.

Usage:
    python scripts/provision_and_verify.py [--name NAME] [--skip-provision]

Generates a random seed, stores its mnemonic in the OS credential store
(macOS keychain, Secret Service or Windows Credential Manager), then signs a
probe message through a fresh EphemeralSigner and verifies the signature.
With --kms the configured AWS KMS key is exercised instead.
"""

import argparse
import asyncio
import logging
import sys

from vaultsign.accounts import resolve_identity
from vaultsign.config import get_settings
from vaultsign.errors import SigningError
from vaultsign.keystore import dispatch_backend
from vaultsign.provisioning import provision_mnemonic, self_test
from vaultsign.signing import EphemeralSigner, KMSSigner

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


async def main() -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(description="Provision and verify an ephemeral signer")
    parser.add_argument("--name", type=str, default=settings.secret_name,
                        help="Secret name in the credential store")
    parser.add_argument("--skip-provision", action="store_true",
                        help="Use the mnemonic already stored under --name")
    parser.add_argument("--kms", action="store_true",
                        help="Verify the configured KMS key instead of the local store")
    args = parser.parse_args()

    try:
        if args.kms:
            signer = KMSSigner(
                key_id=settings.kms_key_id or "",
                region=settings.aws_region,
                timeout=settings.signing_timeout,
            )
            public_key = None
        else:
            backend = dispatch_backend(settings=settings)
            public_key = None if args.skip_provision else provision_mnemonic(backend, args.name)
            signer = EphemeralSigner(backend, args.name, timeout=settings.signing_timeout)

        await self_test(signer, public_key)
        identity = await resolve_identity(signer)
    except SigningError as e:
        logger.error(f"Verification failed: {e}")
        return 1

    print(f"Signature valid for {identity.address}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
