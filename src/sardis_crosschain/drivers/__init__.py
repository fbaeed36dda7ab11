"""Per-chain drivers.

Each driver package exports ``BASE_INPUTS`` (its transfer input types) and
``VARIANT_INPUTS`` (its staking input types) for registry composition.
"""
from . import bitcoin, cosmos, evm, solana, ton, tron

ALL_DRIVERS = (bitcoin, evm, cosmos, solana, tron, ton)

__all__ = ["ALL_DRIVERS"]
