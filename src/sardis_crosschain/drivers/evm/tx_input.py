"""Nonce-sequenced inputs for EVM chains, including staking variants."""
from __future__ import annotations

from typing import ClassVar

from pydantic import Field

from ...amount import BlockchainAmount
from ...blockchains import Blockchain, StakingVariant, TxVariantInputType
from ...tx_input import (
    EncodedBytes,
    PriorityLike,
    StakeTxInput,
    TxInput,
    TxVariantInput,
    UnstakeTxInput,
    apply_priority,
    same_tx_input_types,
)


class _NonceSequenced(TxInput):
    nonce: int = Field(default=0, ge=0)
    gas_limit: int = Field(default=0, ge=0)
    chain_id: int = 0

    def independent_of(self, other: TxInput) -> bool:
        if type(other) is not type(self):
            return False
        return self.nonce != other.nonce

    def safe_from_double_send(self, *others: TxInput) -> bool:
        if not same_tx_input_types(self, *others):
            return False
        return all(self.nonce != other.nonce for other in others)


class EvmTxInput(_NonceSequenced):
    """EIP-1559 pricing: fee cap and tip cap in wei per gas."""

    driver: ClassVar[Blockchain] = Blockchain.EVM

    gas_fee_cap: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)
    gas_tip_cap: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)

    def set_gas_fee_priority(self, priority: PriorityLike) -> None:
        self.gas_fee_cap = apply_priority(self.gas_fee_cap, priority)
        self.gas_tip_cap = apply_priority(self.gas_tip_cap, priority)

    def max_fee(self) -> BlockchainAmount:
        return self.gas_fee_cap.mul(self.gas_limit)


class EvmLegacyTxInput(_NonceSequenced):
    """Pre-London pricing: a single gas price in wei."""

    driver: ClassVar[Blockchain] = Blockchain.EVM_LEGACY

    gas_price: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)

    def set_gas_fee_priority(self, priority: PriorityLike) -> None:
        self.gas_price = apply_priority(self.gas_price, priority)

    def max_fee(self) -> BlockchainAmount:
        return self.gas_price.mul(self.gas_limit)


class BatchDepositInput(EvmTxInput, TxVariantInput, StakeTxInput):
    """Validator keys and deposit signatures for a batch deposit."""

    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.staking(
        Blockchain.EVM, StakingVariant.BATCH_DEPOSIT.value
    )

    public_keys: list[EncodedBytes] = Field(default_factory=list)
    signatures: list[EncodedBytes] = Field(default_factory=list)


class ExitRequestInput(EvmTxInput, TxVariantInput, UnstakeTxInput):
    """Validator keys eligible for an exit request."""

    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.unstaking(
        Blockchain.EVM, StakingVariant.EXIT_REQUEST.value
    )

    public_keys: list[EncodedBytes] = Field(default_factory=list)


__all__ = [
    "EvmTxInput",
    "EvmLegacyTxInput",
    "BatchDepositInput",
    "ExitRequestInput",
]
