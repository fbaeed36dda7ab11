"""Solana native and SPL token transfer builder."""
from __future__ import annotations

import logging
import struct

from solders.compute_budget import set_compute_unit_price
from solders.hash import Hash, ParseHashError
from solders.instruction import AccountMeta, Instruction
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer

from ...builder import TransferArgs, TxBuilder, expect_input
from ...exceptions import InsufficientFundsError, ValidationError
from ...tx_input import TxInput
from .address import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    decode_address,
    find_associated_token_address,
)
from .tx import SolanaTx
from .tx_input import SolanaTxInput

logger = logging.getLogger(__name__)

# Max number of token transfers that fit in one transaction alongside a
# create-ATA instruction
MAX_TOKEN_TRANSFERS = 20

TRANSFER_CHECKED = 12


def transfer_checked(
    source: Pubkey,
    mint: Pubkey,
    destination: Pubkey,
    owner: Pubkey,
    amount: int,
    decimals: int,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    data = struct.pack("<BQB", TRANSFER_CHECKED, amount, decimals)
    accounts = [
        AccountMeta(source, is_signer=False, is_writable=True),
        AccountMeta(mint, is_signer=False, is_writable=False),
        AccountMeta(destination, is_signer=False, is_writable=True),
        AccountMeta(owner, is_signer=True, is_writable=False),
    ]
    return Instruction(token_program, data, accounts)


def create_associated_token_account(
    payer: Pubkey,
    associated_account: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Instruction:
    accounts = [
        AccountMeta(payer, is_signer=True, is_writable=True),
        AccountMeta(associated_account, is_signer=False, is_writable=True),
        AccountMeta(owner, is_signer=False, is_writable=False),
        AccountMeta(mint, is_signer=False, is_writable=False),
        AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(token_program, is_signer=False, is_writable=False),
    ]
    return Instruction(ASSOCIATED_TOKEN_PROGRAM_ID, b"", accounts)


class SolanaBuilder(TxBuilder):
    """Builds system-program and SPL TransferChecked transactions."""

    def _token_program(self, tx_input: SolanaTxInput) -> Pubkey:
        if tx_input.token_program:
            return decode_address(tx_input.token_program)
        return TOKEN_PROGRAM_ID

    def _with_priority_fee(self, instructions: list[Instruction], tx_input: SolanaTxInput) -> None:
        fee = tx_input.limited_prioritization_fee(self.chain)
        if fee > 0:
            instructions.append(set_compute_unit_price(fee))

    def _build(self, instructions: list[Instruction], payer: Pubkey, tx_input: SolanaTxInput) -> SolanaTx:
        if not tx_input.recent_block_hash:
            raise ValidationError("recent block hash is required", field="recent_block_hash")
        try:
            blockhash = Hash.from_string(tx_input.recent_block_hash)
        except (ValueError, ParseHashError) as exc:
            raise ValidationError(
                f"invalid recent block hash {tx_input.recent_block_hash!r}",
                field="recent_block_hash",
            ) from exc
        message = Message.new_with_blockhash(instructions, payer, blockhash)
        return SolanaTx(message)

    def new_native_transfer(self, args: TransferArgs, tx_input: TxInput) -> SolanaTx:
        tx_input = expect_input(tx_input, SolanaTxInput, self.chain)
        sender = decode_address(args.from_address)
        recipient = decode_address(args.to_address)
        instructions = [
            transfer(TransferParams(from_pubkey=sender, to_pubkey=recipient, lamports=int(args.amount)))
        ]
        self._with_priority_fee(instructions, tx_input)
        return self._build(instructions, sender, tx_input)

    def new_token_transfer(self, args: TransferArgs, tx_input: TxInput) -> SolanaTx:
        tx_input = expect_input(tx_input, SolanaTxInput, self.chain)
        asset = args.asset
        if not asset.contract:
            raise ValidationError("token contract is required", field="asset")
        decimals = asset.decimals
        token_program = self._token_program(tx_input)

        sender = decode_address(args.from_address)
        mint = decode_address(asset.contract)
        recipient = decode_address(args.to_address)

        source = find_associated_token_address(sender, mint, token_program)
        if tx_input.source_token_accounts:
            source = decode_address(tx_input.source_token_accounts[0].account)

        destination = recipient
        if not tx_input.to_is_ata:
            destination = find_associated_token_address(recipient, mint, token_program)

        instructions: list[Instruction] = []
        if tx_input.should_create_ata:
            instructions.append(
                create_associated_token_account(sender, destination, recipient, mint, token_program)
            )

        amount = int(args.amount)
        if len(tx_input.source_token_accounts) <= 1:
            instructions.append(
                transfer_checked(source, mint, destination, sender, amount, decimals, token_program)
            )
        else:
            # tokens can sit in any number of auxiliary accounts, so spend
            # them like unspent outputs until the amount is covered
            remaining = amount
            spent = 0
            for token_account in tx_input.source_token_accounts:
                to_send = min(int(token_account.balance), remaining)
                instructions.append(
                    transfer_checked(
                        decode_address(token_account.account),
                        mint,
                        destination,
                        sender,
                        to_send,
                        decimals,
                        token_program,
                    )
                )
                remaining -= to_send
                spent += 1
                if remaining <= 0:
                    break
                if len(instructions) > MAX_TOKEN_TRANSFERS:
                    raise ValidationError(
                        "cannot send total amount in single tx, try sending smaller amount",
                        field="amount",
                    )
            if remaining > 0:
                raise InsufficientFundsError(
                    "cannot send requested amount in single tx, try sending smaller amount",
                    required=str(amount),
                    shortfall=str(remaining),
                    chain=self.chain.chain.value,
                )
            logger.info("Token transfer spends %d source accounts", spent)

        self._with_priority_fee(instructions, tx_input)
        return self._build(instructions, sender, tx_input)


__all__ = [
    "MAX_TOKEN_TRANSFERS",
    "SolanaBuilder",
    "create_associated_token_account",
    "transfer_checked",
]
