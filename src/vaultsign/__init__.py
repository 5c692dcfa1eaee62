"""vaultsign - Ed25519 signing without resident secret keys."""

__version__ = "0.1.0"
