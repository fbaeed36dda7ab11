"""EVM transfer and staking builders."""
from __future__ import annotations

import logging
from decimal import Decimal

from ...amount import BlockchainAmount, HumanAmount
from ...assets import ChainConfig
from ...builder import StakeArgs, StakingBuilder, TransferArgs, TxBuilder, expect_input
from ...exceptions import NotSupportedError, ValidationError
from ...tx_input import StakeTxInput, TxInput, UnstakeTxInput, WithdrawTxInput
from ...validation import count_32_eth_chunks
from . import abi
from .address import decode_address
from .tx import EvmLegacyTx, EvmTx
from .tx_input import BatchDepositInput, EvmLegacyTxInput, EvmTxInput, ExitRequestInput

logger = logging.getLogger(__name__)

GWEI_DECIMALS = 9
DEFAULT_MAX_TIP_CAP_GWEI = 5
NATIVE_TRANSFER_GAS_LIMIT = 21_000
TOKEN_TRANSFER_GAS_LIMIT = 100_000


def gwei_to_wei(gwei: float) -> BlockchainAmount:
    return HumanAmount(Decimal(str(gwei))).to_blockchain(GWEI_DECIMALS)


def max_tip_cap(chain: ChainConfig) -> BlockchainAmount:
    if chain.chain_max_gas_price > 0:
        return gwei_to_wei(chain.chain_max_gas_price)
    return gwei_to_wei(DEFAULT_MAX_TIP_CAP_GWEI)


class EvmBuilder(TxBuilder, StakingBuilder):
    """Builds type-2 transactions for native, ERC-20 and staking payloads."""

    def build_with_payload(
        self,
        to: bytes,
        value: BlockchainAmount,
        data: bytes,
        tx_input: EvmTxInput,
    ) -> EvmTx:
        tip = tx_input.gas_tip_cap
        limit = max_tip_cap(self.chain)
        if tip > limit:
            logger.warning("Tip cap %s exceeds chain maximum, using %s", tip, limit)
            tip = limit
        fee_cap = tx_input.gas_fee_cap
        if fee_cap < tip:
            fee_cap = tip
        return EvmTx(
            chain_id=tx_input.chain_id or self.chain.chain_id,
            nonce=tx_input.nonce,
            max_priority_fee_per_gas=int(tip),
            max_fee_per_gas=int(fee_cap),
            gas_limit=tx_input.gas_limit,
            to=to,
            value=int(value),
            data=data,
        )

    def new_native_transfer(self, args: TransferArgs, tx_input: TxInput) -> EvmTx:
        tx_input = expect_input(tx_input, EvmTxInput, self.chain)
        if not tx_input.gas_limit:
            tx_input.gas_limit = NATIVE_TRANSFER_GAS_LIMIT
        return self.build_with_payload(decode_address(args.to_address), args.amount, b"", tx_input)

    def new_token_transfer(self, args: TransferArgs, tx_input: TxInput) -> EvmTx:
        tx_input = expect_input(tx_input, EvmTxInput, self.chain)
        if not tx_input.gas_limit:
            tx_input.gas_limit = TOKEN_TRANSFER_GAS_LIMIT
        contract = decode_address(args.asset.contract)
        data = abi.erc20_transfer(decode_address(args.to_address), int(args.amount))
        return self.build_with_payload(contract, BlockchainAmount.zero(), data, tx_input)

    def _staking_contract(self, contract: str, kind: str) -> bytes:
        if not contract:
            raise ValidationError(
                f"no {kind} contract configured for {self.chain.chain.value}",
                field="staking",
            )
        return decode_address(contract)

    def new_stake(self, args: StakeArgs, tx_input: StakeTxInput) -> EvmTx:
        tx_input = expect_input(tx_input, BatchDepositInput, self.chain)
        count = count_32_eth_chunks(args.amount)
        if count != len(tx_input.public_keys):
            raise ValidationError(
                f"staking {count} validator(s) needs {count} public keys, got {len(tx_input.public_keys)}",
                field="public_keys",
            )
        owner = decode_address(args.get_stake_owner())
        credential = abi.withdrawal_credentials(owner)
        data = abi.batch_deposit(
            tx_input.public_keys,
            [credential] * len(tx_input.public_keys),
            tx_input.signatures,
        )
        contract = self._staking_contract(self.chain.staking.stake_contract, "stake")
        return self.build_with_payload(contract, args.amount, data, tx_input)

    def new_unstake(self, args: StakeArgs, tx_input: UnstakeTxInput) -> EvmTx:
        tx_input = expect_input(tx_input, ExitRequestInput, self.chain)
        count = count_32_eth_chunks(args.amount)
        if count > len(tx_input.public_keys):
            raise ValidationError(
                f"need at least {count} validators to unstake target amount, "
                f"but there are only {len(tx_input.public_keys)} in eligible state",
                field="public_keys",
            )
        data = abi.exit_request(tx_input.public_keys[:count])
        contract = self._staking_contract(self.chain.staking.unstake_contract, "unstake")
        return self.build_with_payload(contract, BlockchainAmount.zero(), data, tx_input)

    def new_withdraw(self, args: StakeArgs, tx_input: WithdrawTxInput) -> EvmTx:
        raise NotSupportedError("withdraw (ethereum stakes are claimed automatically)", chain=self.chain.chain.value)


class EvmLegacyBuilder(TxBuilder):
    """Builds EIP-155 transactions for chains without a fee market."""

    def build_with_payload(
        self,
        to: bytes,
        value: BlockchainAmount,
        data: bytes,
        tx_input: EvmLegacyTxInput,
    ) -> EvmLegacyTx:
        gas_price = tx_input.gas_price
        if self.chain.chain_max_gas_price > 0:
            limit = gwei_to_wei(self.chain.chain_max_gas_price)
            if gas_price > limit:
                logger.warning("Gas price %s exceeds chain maximum, using %s", gas_price, limit)
                gas_price = limit
        return EvmLegacyTx(
            chain_id=tx_input.chain_id or self.chain.chain_id,
            nonce=tx_input.nonce,
            gas_price=int(gas_price),
            gas_limit=tx_input.gas_limit,
            to=to,
            value=int(value),
            data=data,
        )

    def new_native_transfer(self, args: TransferArgs, tx_input: TxInput) -> EvmLegacyTx:
        tx_input = expect_input(tx_input, EvmLegacyTxInput, self.chain)
        if not tx_input.gas_limit:
            tx_input.gas_limit = NATIVE_TRANSFER_GAS_LIMIT
        return self.build_with_payload(decode_address(args.to_address), args.amount, b"", tx_input)

    def new_token_transfer(self, args: TransferArgs, tx_input: TxInput) -> EvmLegacyTx:
        tx_input = expect_input(tx_input, EvmLegacyTxInput, self.chain)
        if not tx_input.gas_limit:
            tx_input.gas_limit = TOKEN_TRANSFER_GAS_LIMIT
        contract = decode_address(args.asset.contract)
        data = abi.erc20_transfer(decode_address(args.to_address), int(args.amount))
        return self.build_with_payload(contract, BlockchainAmount.zero(), data, tx_input)


__all__ = [
    "EvmBuilder",
    "EvmLegacyBuilder",
    "DEFAULT_MAX_TIP_CAP_GWEI",
    "gwei_to_wei",
    "max_tip_cap",
]
