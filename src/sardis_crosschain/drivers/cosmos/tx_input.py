"""Account-sequence input for Cosmos SDK chains and its staking variants."""
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
    TxInputWithPublicKey,
    TxVariantInput,
    UnstakeTxInput,
    WithdrawTxInput,
    gas_priority_multiplier,
    same_tx_input_types,
)


class CosmosAssetType(str, Enum):
    """Module that holds the asset being moved."""
    BANK = "bank"
    CW20 = "cw20"


class CosmosTxInput(TxInput, TxInputWithPublicKey, TxInputWithMemo):
    """Account number, sequence and gas pricing for one Cosmos transaction.

    ``gas_price`` is in the gas denom per gas unit and may be fractional.
    """

    driver: ClassVar[Blockchain] = Blockchain.COSMOS

    account_number: int = Field(default=0, ge=0)
    sequence: int = Field(default=0, ge=0)
    gas_limit: int = Field(default=0, ge=0)
    gas_price: float = Field(default=0.0, ge=0)
    memo: str = ""
    from_public_key: EncodedBytes = b""
    asset_type: CosmosAssetType = CosmosAssetType.BANK
    chain_id: str = ""

    def set_public_key(self, public_key: bytes) -> None:
        self.from_public_key = public_key

    def set_memo(self, memo: str) -> None:
        self.memo = memo

    def set_gas_fee_priority(self, priority: PriorityLike) -> None:
        self.gas_price = float(gas_priority_multiplier(priority)) * self.gas_price

    def independent_of(self, other: TxInput) -> bool:
        if type(other) is not type(self):
            return False
        return self.sequence != other.sequence

    def safe_from_double_send(self, *others: TxInput) -> bool:
        if not same_tx_input_types(self, *others):
            return False
        return all(self.sequence != other.sequence for other in others)


_NATIVE = StakingVariant.NATIVE.value


class CosmosStakingInput(CosmosTxInput, TxVariantInput, StakeTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.staking(Blockchain.COSMOS, _NATIVE)


class CosmosUnstakingInput(CosmosTxInput, TxVariantInput, UnstakeTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.unstaking(Blockchain.COSMOS, _NATIVE)


class CosmosWithdrawInput(CosmosTxInput, TxVariantInput, WithdrawTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.withdrawing(Blockchain.COSMOS, _NATIVE)


__all__ = [
    "CosmosAssetType",
    "CosmosTxInput",
    "CosmosStakingInput",
    "CosmosUnstakingInput",
    "CosmosWithdrawInput",
]
