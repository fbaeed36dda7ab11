"""Cosmos transfer and staking builder."""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from ...amount import BlockchainAmount, HumanAmount
from ...assets import AnyAsset, ChainConfig, TokenAssetConfig
from ...builder import StakeArgs, StakingBuilder, TransferArgs, TxBuilder, expect_input
from ...exceptions import ValidationError
from ...tx_input import StakeTxInput, TxInput, UnstakeTxInput, WithdrawTxInput
from ...protobuf import ProtoWriter
from . import messages
from .address import decode_address, is_ethsecp, pubkey_type_url
from .tx import CosmosTx
from .tx_input import (
    CosmosAssetType,
    CosmosStakingInput,
    CosmosTxInput,
    CosmosUnstakingInput,
    CosmosWithdrawInput,
)

logger = logging.getLogger(__name__)

NATIVE_TRANSFER_GAS_LIMIT = 400_000
TOKEN_TRANSFER_GAS_LIMIT = 900_000
DEFAULT_MAX_TOTAL_FEE = HumanAmount(2)

TAX_PRECISION = 10_000_000
MIN_TAX_RATE = 0.00001


def default_max_gas_price(chain: ChainConfig) -> float:
    """Gas price at which a native transfer costs ``DEFAULT_MAX_TOTAL_FEE``."""
    max_fee = DEFAULT_MAX_TOTAL_FEE.to_blockchain(chain.decimals)
    return float(int(max_fee)) / NATIVE_TRANSFER_GAS_LIMIT


def get_tax_from(amount: BlockchainAmount, tax: float) -> BlockchainAmount:
    """Portion of ``amount`` taken by a transfer tax rate, e.g. 0.05 of 100 is 5."""
    if tax > MIN_TAX_RATE:
        rate = int(TAX_PRECISION * tax)
        return BlockchainAmount(int(amount) * rate // TAX_PRECISION)
    return BlockchainAmount.zero()


class CosmosBuilder(TxBuilder, StakingBuilder):
    """Builds bank, CW20 and staking transactions.

    A Cosmos asset can live in x/bank or in a CW20 contract regardless of
    whether it is the chain's native coin, so the input's ``asset_type``
    picks the message rather than the request's asset type.
    """

    def get_denom(self, asset: Optional[AnyAsset]) -> str:
        if asset is not None and asset.contract:
            return asset.contract
        return self.chain.chain_coin

    def _cap_gas_price(self, tx_input: CosmosTxInput) -> None:
        limit = self.chain.chain_max_gas_price
        if limit <= 0:
            limit = default_max_gas_price(self.chain)
        if tx_input.gas_price > limit:
            logger.warning("Gas price %s exceeds chain maximum, using %s", tx_input.gas_price, limit)
            tx_input.gas_price = limit

    def calculate_fees(
        self,
        asset: Optional[AnyAsset],
        amount: BlockchainAmount,
        tx_input: CosmosTxInput,
        include_tax: bool,
    ) -> list[tuple[str, int]]:
        """Fee coins sorted by denom: gas fee plus any transfer tax."""
        gas_denom = self.chain.gas_coin or self.chain.chain_coin
        fees = {gas_denom: int(Decimal(str(tx_input.gas_price)) * tx_input.gas_limit)}
        if include_tax:
            tax = get_tax_from(amount, self.chain.chain_transfer_tax)
            if tax.sign() > 0:
                tax_denom = self.chain.chain_coin
                if isinstance(asset, TokenAssetConfig) and asset.contract:
                    tax_denom = asset.contract
                fees[tax_denom] = fees.get(tax_denom, 0) + int(tax)
        return sorted(fees.items())

    def _create_tx(
        self,
        tx_input: CosmosTxInput,
        message: ProtoWriter,
        fees: list[tuple[str, int]],
    ) -> CosmosTx:
        body = messages.tx_body(message, tx_input.memo)
        auth = messages.auth_info(
            pubkey_type_url(self.chain),
            tx_input.from_public_key,
            tx_input.sequence,
            fees,
            tx_input.gas_limit,
        )
        return CosmosTx(
            body_bytes=body,
            auth_info_bytes=auth,
            chain_id=tx_input.chain_id or self.chain.chain_id_str,
            account_number=tx_input.account_number,
            keccak_sighash=is_ethsecp(self.chain),
        )

    def _check_addresses(self, *addresses: str) -> None:
        for address in addresses:
            decode_address(address, self.chain)

    def _transfer(self, args: TransferArgs, tx_input: TxInput) -> CosmosTx:
        tx_input = expect_input(tx_input, CosmosTxInput, self.chain)
        self._cap_gas_price(tx_input)
        self._check_addresses(args.from_address, args.to_address)
        if tx_input.asset_type == CosmosAssetType.CW20:
            return self.new_cw20_transfer(args, tx_input)
        return self.new_bank_transfer(args, tx_input)

    def new_native_transfer(self, args: TransferArgs, tx_input: TxInput) -> CosmosTx:
        return self._transfer(args, tx_input)

    def new_token_transfer(self, args: TransferArgs, tx_input: TxInput) -> CosmosTx:
        return self._transfer(args, tx_input)

    def new_bank_transfer(self, args: TransferArgs, tx_input: CosmosTxInput) -> CosmosTx:
        """x/bank MsgSend."""
        if not tx_input.gas_limit:
            tx_input.gas_limit = NATIVE_TRANSFER_GAS_LIMIT
        denom = self.get_denom(args.asset)
        message = messages.msg_send(args.from_address, args.to_address, denom, int(args.amount))
        fees = self.calculate_fees(args.asset, args.amount, tx_input, include_tax=True)
        return self._create_tx(tx_input, message, fees)

    def new_cw20_transfer(self, args: TransferArgs, tx_input: CosmosTxInput) -> CosmosTx:
        """x/wasm MsgExecuteContract calling the token's ``transfer``."""
        if not tx_input.gas_limit:
            tx_input.gas_limit = TOKEN_TRANSFER_GAS_LIMIT
        contract = self.get_denom(args.asset)
        payload = messages.cw20_transfer_msg(args.to_address, int(args.amount))
        message = messages.msg_execute_contract(args.from_address, contract, payload)
        fees = self.calculate_fees(args.asset, args.amount, tx_input, include_tax=False)
        return self._create_tx(tx_input, message, fees)

    def _staking_prelude(self, args: StakeArgs, tx_input: CosmosTxInput) -> str:
        self._cap_gas_price(tx_input)
        if not tx_input.gas_limit:
            tx_input.gas_limit = NATIVE_TRANSFER_GAS_LIMIT
        if not args.validator:
            raise ValidationError("validator is required", field="validator")
        self._check_addresses(args.from_address)
        return args.validator

    def new_stake(self, args: StakeArgs, tx_input: StakeTxInput) -> CosmosTx:
        tx_input = expect_input(tx_input, CosmosStakingInput, self.chain)
        validator = self._staking_prelude(args, tx_input)
        message = messages.msg_delegate(args.from_address, validator, self.get_denom(None), int(args.amount))
        fees = self.calculate_fees(None, args.amount, tx_input, include_tax=False)
        return self._create_tx(tx_input, message, fees)

    def new_unstake(self, args: StakeArgs, tx_input: UnstakeTxInput) -> CosmosTx:
        tx_input = expect_input(tx_input, CosmosUnstakingInput, self.chain)
        validator = self._staking_prelude(args, tx_input)
        message = messages.msg_undelegate(args.from_address, validator, self.get_denom(None), int(args.amount))
        fees = self.calculate_fees(None, args.amount, tx_input, include_tax=False)
        return self._create_tx(tx_input, message, fees)

    def new_withdraw(self, args: StakeArgs, tx_input: WithdrawTxInput) -> CosmosTx:
        tx_input = expect_input(tx_input, CosmosWithdrawInput, self.chain)
        validator = self._staking_prelude(args, tx_input)
        message = messages.msg_withdraw_delegator_reward(args.from_address, validator)
        fees = self.calculate_fees(None, args.amount, tx_input, include_tax=False)
        return self._create_tx(tx_input, message, fees)


__all__ = [
    "CosmosBuilder",
    "NATIVE_TRANSFER_GAS_LIMIT",
    "TOKEN_TRANSFER_GAS_LIMIT",
    "default_max_gas_price",
    "get_tax_from",
]
