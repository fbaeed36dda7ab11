"""Transaction-builder contract and request arguments."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .amount import BlockchainAmount
from .assets import AnyAsset, ChainConfig, TokenAssetConfig
from .blockchains import Blockchain
from .exceptions import NotSupportedError, UnsupportedAssetError, ValidationError
from .logging_utils import chain_context, mask_address
from .tx import Tx
from .tx_input import (
    EncodedBytes,
    StakeTxInput,
    TxInput,
    TxInputWithAmount,
    TxInputWithMemo,
    TxInputWithPublicKey,
    TxInputWithUnix,
    UnstakeTxInput,
    WithdrawTxInput,
    gas_priority_multiplier,
)
from .validation import count_32_eth_chunks

logger = logging.getLogger(__name__)


class TransferOptions(BaseModel):
    """Optional parts of a transfer or staking request."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    asset: Optional[AnyAsset] = None
    memo: Optional[str] = None
    timestamp: Optional[int] = None
    priority: Optional[str] = Field(default=None, alias="gasPriority")
    public_key: Optional[EncodedBytes] = Field(default=None, alias="publicKey")
    validator: Optional[str] = Field(default=None, alias="stakeValidator")
    stake_owner: Optional[str] = Field(default=None, alias="stakeOwner")
    stake_account: Optional[str] = Field(default=None, alias="stakeAccount")

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            gas_priority_multiplier(v)
        return v


class TransferArgs(TransferOptions):
    """Abstract transfer request: move ``amount`` from ``from`` to ``to``."""

    from_address: str = Field(alias="from", min_length=1)
    to_address: str = Field(alias="to", min_length=1)
    amount: BlockchainAmount

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: BlockchainAmount) -> BlockchainAmount:
        if v.sign() < 0:
            raise ValueError("amount must not be negative")
        return v

    def native_or_token(self) -> Optional[AnyAsset]:
        return self.asset


class StakeArgs(TransferOptions):
    """Stake, unstake or withdraw request on a chain."""

    chain: ChainConfig
    from_address: str = Field(alias="from", min_length=1)
    amount: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)

    def validate_for_driver(self) -> None:
        """Per-driver checks a staking builder relies on.

        Raises:
            ValidationError: EVM amounts that are not 32 ETH chunks, or a
                missing validator on Cosmos and Solana.
        """
        driver = self.chain.driver
        if driver in (Blockchain.EVM, Blockchain.EVM_LEGACY):
            count_32_eth_chunks(self.amount)
        elif driver in (Blockchain.COSMOS, Blockchain.EVMOS, Blockchain.SOLANA):
            if not self.validator:
                raise ValidationError(
                    f"validator is required to stake on {self.chain.chain.value}",
                    field="validator",
                )

    def get_stake_owner(self) -> str:
        return self.stake_owner or self.from_address


def set_tx_input_options(tx_input: TxInput, options: TransferOptions, amount: Optional[BlockchainAmount] = None) -> None:
    """Copy request options onto whichever capabilities the input has."""
    if options.priority:
        tx_input.set_gas_fee_priority(options.priority)
    if options.public_key and isinstance(tx_input, TxInputWithPublicKey):
        tx_input.set_public_key(options.public_key)
    if amount is not None and isinstance(tx_input, TxInputWithAmount):
        tx_input.set_amount(amount)
    if options.memo and isinstance(tx_input, TxInputWithMemo):
        tx_input.set_memo(options.memo)
    if options.timestamp and isinstance(tx_input, TxInputWithUnix):
        tx_input.set_unix(options.timestamp)


class TxBuilder(ABC):
    """Turns an abstract transfer request into a chain-specific Tx."""

    def __init__(self, chain: ChainConfig) -> None:
        self.chain = chain

    def transfer(self, args: TransferArgs, tx_input: TxInput) -> Tx:
        """Build a transfer, dispatching on the request's asset."""
        set_tx_input_options(tx_input, args, args.amount)
        asset = args.asset
        if isinstance(asset, TokenAssetConfig) and asset.chain is None:
            asset = asset.for_chain(self.chain)
            args = args.model_copy(update={"asset": asset})
        with chain_context(self.chain.chain.value):
            logger.info(
                "Building transfer %s -> %s amount=%s asset=%s",
                mask_address(args.from_address),
                mask_address(args.to_address),
                args.amount,
                asset.contract if asset is not None else self.chain.chain.value,
            )
            if asset is None or isinstance(asset, ChainConfig):
                return self.new_native_transfer(args, tx_input)
            if isinstance(asset, TokenAssetConfig):
                return self.new_token_transfer(args, tx_input)
        raise UnsupportedAssetError(f"unsupported asset type: {type(asset).__name__}", field="asset")

    @abstractmethod
    def new_native_transfer(self, args: TransferArgs, tx_input: TxInput) -> Tx:
        ...

    def new_token_transfer(self, args: TransferArgs, tx_input: TxInput) -> Tx:
        raise NotSupportedError("token transfer", chain=self.chain.chain.value)


class StakingBuilder(ABC):
    """Builders that can also assemble staking transactions."""

    chain: ChainConfig

    def _prepare(self, args: StakeArgs, tx_input: TxInput) -> None:
        args.validate_for_driver()
        set_tx_input_options(tx_input, args, args.amount)

    def stake(self, args: StakeArgs, tx_input: StakeTxInput) -> Tx:
        self._prepare(args, tx_input)
        with chain_context(self.chain.chain.value):
            logger.info("Building stake from %s amount=%s", mask_address(args.from_address), args.amount)
            return self.new_stake(args, tx_input)

    def unstake(self, args: StakeArgs, tx_input: UnstakeTxInput) -> Tx:
        self._prepare(args, tx_input)
        with chain_context(self.chain.chain.value):
            logger.info("Building unstake from %s amount=%s", mask_address(args.from_address), args.amount)
            return self.new_unstake(args, tx_input)

    def withdraw(self, args: StakeArgs, tx_input: WithdrawTxInput) -> Tx:
        set_tx_input_options(tx_input, args)
        with chain_context(self.chain.chain.value):
            logger.info("Building withdraw for %s", mask_address(args.from_address))
            return self.new_withdraw(args, tx_input)

    @abstractmethod
    def new_stake(self, args: StakeArgs, tx_input: StakeTxInput) -> Tx:
        ...

    @abstractmethod
    def new_unstake(self, args: StakeArgs, tx_input: UnstakeTxInput) -> Tx:
        ...

    def new_withdraw(self, args: StakeArgs, tx_input: WithdrawTxInput) -> Tx:
        raise NotSupportedError("withdraw", chain=self.chain.chain.value)


def expect_input(tx_input: object, expected: type, chain: ChainConfig):
    """Narrow ``tx_input`` to the builder's concrete input type."""
    if not isinstance(tx_input, expected):
        raise ValidationError(
            f"{chain.chain.value} builder expects {expected.__name__}, got {type(tx_input).__name__}",
            field="tx_input",
        )
    return tx_input


__all__ = [
    "TransferOptions",
    "TransferArgs",
    "StakeArgs",
    "TxBuilder",
    "StakingBuilder",
    "expect_input",
    "set_tx_input_options",
]
