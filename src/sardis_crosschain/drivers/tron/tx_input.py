"""Block-reference input for Tron and its staking variants."""
from __future__ import annotations

from enum import Enum
from typing import ClassVar

from pydantic import Field

from ...blockchains import Blockchain, StakingVariant, TxVariantInputType
from ...tx_input import (
    EncodedBytes,
    PriorityLike,
    StakeTxInput,
    TxInput,
    TxInputWithMemo,
    TxInputWithUnix,
    TxVariantInput,
    UnstakeTxInput,
    WithdrawTxInput,
    gas_priority_multiplier,
    same_tx_input_types,
)

SAFETY_TIMEOUT_MARGIN_SECONDS = 5 * 60
DEFAULT_EXPIRATION_SECONDS = 60


class Resource(str, Enum):
    BANDWIDTH = "BANDWIDTH"
    ENERGY = "ENERGY"

    @property
    def code(self) -> int:
        return 0 if self is Resource.BANDWIDTH else 1


class TronTxInput(TxInput, TxInputWithMemo, TxInputWithUnix):
    """Reference block and validity window. Times are unix seconds."""

    driver: ClassVar[Blockchain] = Blockchain.TRON

    ref_block_bytes: EncodedBytes = b""
    ref_block_hash: EncodedBytes = b""
    expiration: int = 0
    timestamp: int = 0
    memo: str = ""

    def set_memo(self, memo: str) -> None:
        self.memo = memo

    def set_unix(self, unix_seconds: int) -> None:
        self.timestamp = unix_seconds
        self.expiration = unix_seconds + DEFAULT_EXPIRATION_SECONDS

    def effective_expiration(self) -> int:
        return self.expiration or self.timestamp + DEFAULT_EXPIRATION_SECONDS

    def set_gas_fee_priority(self, priority: PriorityLike) -> None:
        # tron has no fee prioritization; the priority is still validated
        gas_priority_multiplier(priority)

    def independent_of(self, other: TxInput) -> bool:
        return type(other) is type(self)

    def safe_from_double_send(self, *others: TxInput) -> bool:
        if not same_tx_input_types(self, *others):
            return False
        for other in others:
            if self.timestamp <= other.effective_expiration():
                return False
            if self.timestamp - other.timestamp < SAFETY_TIMEOUT_MARGIN_SECONDS:
                return False
            if other.ref_block_hash == self.ref_block_hash:
                return False
        return True


_NATIVE = StakingVariant.NATIVE.value


class TronStakingInput(TronTxInput, TxVariantInput, StakeTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.staking(Blockchain.TRON, _NATIVE)

    resource: Resource = Resource.ENERGY


class TronUnstakingInput(TronTxInput, TxVariantInput, UnstakeTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.unstaking(Blockchain.TRON, _NATIVE)

    resource: Resource = Resource.ENERGY


class TronWithdrawInput(TronTxInput, TxVariantInput, WithdrawTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.withdrawing(Blockchain.TRON, _NATIVE)


__all__ = [
    "DEFAULT_EXPIRATION_SECONDS",
    "SAFETY_TIMEOUT_MARGIN_SECONDS",
    "Resource",
    "TronTxInput",
    "TronStakingInput",
    "TronUnstakingInput",
    "TronWithdrawInput",
]
