"""Tron TRX, TRC-20 and resource-staking builder."""
from __future__ import annotations

import logging
from typing import Optional

from ...amount import BlockchainAmount, HumanAmount
from ...builder import StakeArgs, StakingBuilder, TransferArgs, TxBuilder, expect_input
from ...tx_input import StakeTxInput, TxInput, UnstakeTxInput, WithdrawTxInput
from ..evm import abi
from ...protobuf import ProtoWriter
from . import contracts
from .address import decode_address
from .tx import TronTx
from .tx_input import TronStakingInput, TronTxInput, TronUnstakingInput, TronWithdrawInput

logger = logging.getLogger(__name__)

# 2,000 TRX sanity limit on energy burnt by contract calls
DEFAULT_FEE_LIMIT_TRX = 2_000
MILLISECONDS = 1000


class TronBuilder(TxBuilder, StakingBuilder):
    """Builds TransferContract, TriggerSmartContract and freeze/unfreeze transactions."""

    def fee_limit(self) -> BlockchainAmount:
        """Fee limit in sun: the chain maximum in TRX, or the default."""
        limit = self.chain.chain_max_gas_price or DEFAULT_FEE_LIMIT_TRX
        return HumanAmount.from_str(str(limit)).to_blockchain(self.chain.decimals)

    def _build(self, tx_contract: ProtoWriter, tx_input: TronTxInput, fee_limit: Optional[int] = None) -> TronTx:
        raw = contracts.raw_data(
            tx_contract,
            ref_block_bytes=tx_input.ref_block_bytes,
            ref_block_hash=tx_input.ref_block_hash,
            expiration_ms=tx_input.effective_expiration() * MILLISECONDS,
            timestamp_ms=tx_input.timestamp * MILLISECONDS,
            memo=tx_input.memo,
            fee_limit=fee_limit,
        )
        return TronTx(raw)

    def new_native_transfer(self, args: TransferArgs, tx_input: TxInput) -> TronTx:
        tx_input = expect_input(tx_input, TronTxInput, self.chain)
        owner = decode_address(args.from_address)
        to = decode_address(args.to_address)
        return self._build(contracts.transfer_contract(owner, to, int(args.amount)), tx_input)

    def new_token_transfer(self, args: TransferArgs, tx_input: TxInput) -> TronTx:
        tx_input = expect_input(tx_input, TronTxInput, self.chain)
        owner = decode_address(args.from_address)
        to = decode_address(args.to_address)
        token = decode_address(args.asset.contract)
        # ABI addresses drop the 0x41 prefix
        data = abi.erc20_transfer(to[1:], int(args.amount))
        fee_limit = self.fee_limit()
        logger.info("TRC-20 transfer with fee limit %s sun", fee_limit)
        return self._build(contracts.trigger_smart_contract(owner, token, data), tx_input, int(fee_limit))

    def new_stake(self, args: StakeArgs, tx_input: StakeTxInput) -> TronTx:
        tx_input = expect_input(tx_input, TronStakingInput, self.chain)
        owner = decode_address(args.from_address)
        tx_contract = contracts.freeze_balance_v2(owner, int(args.amount), tx_input.resource.code)
        return self._build(tx_contract, tx_input)

    def new_unstake(self, args: StakeArgs, tx_input: UnstakeTxInput) -> TronTx:
        tx_input = expect_input(tx_input, TronUnstakingInput, self.chain)
        owner = decode_address(args.from_address)
        tx_contract = contracts.unfreeze_balance_v2(owner, int(args.amount), tx_input.resource.code)
        return self._build(tx_contract, tx_input)

    def new_withdraw(self, args: StakeArgs, tx_input: WithdrawTxInput) -> TronTx:
        tx_input = expect_input(tx_input, TronWithdrawInput, self.chain)
        owner = decode_address(args.from_address)
        return self._build(contracts.withdraw_expire_unfreeze(owner), tx_input)


__all__ = ["DEFAULT_FEE_LIMIT_TRX", "TronBuilder"]
