"""Recent-blockhash input for Solana and its staking variants."""
from __future__ import annotations

from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...amount import BlockchainAmount
from ...assets import ChainConfig
from ...blockchains import Blockchain, StakingVariant, TxVariantInputType
from ...tx_input import (
    PriorityLike,
    StakeTxInput,
    TxInput,
    TxInputWithUnix,
    TxVariantInput,
    UnstakeTxInput,
    WithdrawTxInput,
    apply_priority,
    same_tx_input_types,
)

# a blockhash expires after roughly a minute; require five and a new hash
SAFETY_TIMEOUT_MARGIN_SECONDS = 5 * 60

# 1 SOL over 200k compute units, in micro-lamports per unit
DEFAULT_MAX_PRIORITIZATION_FEE = 5_000_000_000


class TokenAccount(BaseModel):
    """A token account owned by the sender and its balance."""
    model_config = ConfigDict(extra="ignore")

    account: str
    balance: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)


class SolanaTxInput(TxInput, TxInputWithUnix):
    driver: ClassVar[Blockchain] = Blockchain.SOLANA

    recent_block_hash: str = ""
    to_is_ata: bool = False
    token_program: str = ""
    should_create_ata: bool = False
    source_token_accounts: list[TokenAccount] = Field(default_factory=list)
    prioritization_fee: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)
    timestamp: int = 0

    def set_unix(self, unix_seconds: int) -> None:
        self.timestamp = unix_seconds

    def set_gas_fee_priority(self, priority: PriorityLike) -> None:
        self.prioritization_fee = apply_priority(self.prioritization_fee, priority)

    def limited_prioritization_fee(self, chain: ChainConfig) -> int:
        """Compute unit price in micro-lamports, capped by the chain maximum."""
        limit = int(chain.chain_max_gas_price) or DEFAULT_MAX_PRIORITIZATION_FEE
        return min(int(self.prioritization_fee), limit)

    def independent_of(self, other: TxInput) -> bool:
        return type(other) is type(self)

    def safe_from_double_send(self, *others: TxInput) -> bool:
        if not same_tx_input_types(self, *others):
            return False
        for other in others:
            if self.timestamp - other.timestamp < SAFETY_TIMEOUT_MARGIN_SECONDS:
                return False
            if other.recent_block_hash == self.recent_block_hash:
                return False
        return True


class ExistingStake(BaseModel):
    """A stake account that can be deactivated or withdrawn from."""
    model_config = ConfigDict(extra="ignore")

    activation_epoch: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)
    deactivation_epoch: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)
    amount_active: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)
    amount_inactive: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)
    stake_account: str = ""


_NATIVE = StakingVariant.NATIVE.value


class SolanaStakingInput(SolanaTxInput, TxVariantInput, StakeTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.staking(Blockchain.SOLANA, _NATIVE)

    validator_vote_account: str = ""
    # public key of the new stake account; its key never enters the input
    stake_account: Optional[str] = None


class SolanaUnstakingInput(SolanaTxInput, TxVariantInput, UnstakeTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.unstaking(Blockchain.SOLANA, _NATIVE)

    stake_account: Optional[str] = None
    eligible_stakes: list[ExistingStake] = Field(default_factory=list)


class SolanaWithdrawInput(SolanaTxInput, TxVariantInput, WithdrawTxInput):
    variant_type: ClassVar[TxVariantInputType] = TxVariantInputType.withdrawing(Blockchain.SOLANA, _NATIVE)

    eligible_stakes: list[ExistingStake] = Field(default_factory=list)


__all__ = [
    "DEFAULT_MAX_PRIORITIZATION_FEE",
    "SAFETY_TIMEOUT_MARGIN_SECONDS",
    "ExistingStake",
    "SolanaTxInput",
    "SolanaStakingInput",
    "SolanaUnstakingInput",
    "SolanaWithdrawInput",
    "TokenAccount",
]
