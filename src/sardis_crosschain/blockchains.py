"""Driver, native asset and variant-tag identifiers."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class Blockchain(str, Enum):
    """Transaction drivers. Several chains may share one driver."""
    BITCOIN = "bitcoin"
    BITCOIN_CASH = "bitcoin-cash"
    BITCOIN_LEGACY = "bitcoin-legacy"
    EVM = "evm"
    EVM_LEGACY = "evm-legacy"
    COSMOS = "cosmos"
    EVMOS = "evmos"
    SOLANA = "solana"
    TRON = "tron"
    TON = "ton"

    @property
    def is_utxo(self) -> bool:
        return self in (Blockchain.BITCOIN, Blockchain.BITCOIN_CASH, Blockchain.BITCOIN_LEGACY)


class NativeAsset(str, Enum):
    """Native coins of the chains shipped in the default chain table."""
    BTC = "BTC"
    BCH = "BCH"
    LTC = "LTC"
    DOGE = "DOGE"
    ETH = "ETH"
    MATIC = "MATIC"
    BNB = "BNB"
    ATOM = "ATOM"
    INJ = "INJ"
    EVMOS = "EVMOS"
    SOL = "SOL"
    TRX = "TRX"
    TON = "TON"


class StakingCapability(str, Enum):
    STAKING = "staking"
    UNSTAKING = "unstaking"
    WITHDRAWING = "withdrawing"


class StakingVariant(str, Enum):
    NATIVE = "native"
    BATCH_DEPOSIT = "batch-deposit"
    EXIT_REQUEST = "exit-request"


class TxVariantInputType(str):
    """Namespaced variant tag: ``blockchains/<driver>/<capability>/<variant>``.

    A plain string on the wire; the accessors split it back into parts.
    """

    PREFIX = "blockchains"

    @classmethod
    def new(
        cls,
        driver: Blockchain,
        capability: StakingCapability,
        variant: str,
    ) -> "TxVariantInputType":
        return cls(
            f"{cls.PREFIX}/{Blockchain(driver).value}/"
            f"{StakingCapability(capability).value}/{variant}"
        )

    @classmethod
    def staking(cls, driver: Blockchain, variant: str) -> "TxVariantInputType":
        return cls.new(driver, StakingCapability.STAKING, variant)

    @classmethod
    def unstaking(cls, driver: Blockchain, variant: str) -> "TxVariantInputType":
        return cls.new(driver, StakingCapability.UNSTAKING, variant)

    @classmethod
    def withdrawing(cls, driver: Blockchain, variant: str) -> "TxVariantInputType":
        return cls.new(driver, StakingCapability.WITHDRAWING, variant)

    def _parts(self) -> list[str]:
        return self.split("/")

    def validate(self) -> Optional[str]:
        """Return a reason string if the tag is malformed, else None."""
        parts = self._parts()
        if len(parts) != 4 or parts[0] != self.PREFIX:
            return f"variant tag must look like {self.PREFIX}/<driver>/<capability>/<variant>: {self!s}"
        try:
            Blockchain(parts[1])
        except ValueError:
            return f"unknown driver '{parts[1]}' in variant tag {self!s}"
        try:
            StakingCapability(parts[2])
        except ValueError:
            return f"unknown capability '{parts[2]}' in variant tag {self!s}"
        if not parts[3]:
            return f"empty variant in tag {self!s}"
        return None

    @property
    def driver(self) -> Blockchain:
        return Blockchain(self._parts()[1])

    @property
    def capability(self) -> StakingCapability:
        return StakingCapability(self._parts()[2])

    @property
    def variant(self) -> str:
        return self._parts()[3]


__all__ = [
    "Blockchain",
    "NativeAsset",
    "StakingCapability",
    "StakingVariant",
    "TxVariantInputType",
]
