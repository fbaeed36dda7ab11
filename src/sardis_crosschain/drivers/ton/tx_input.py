"""Sequence-numbered wallet input for TON.

Only the input is provided: it can be fetched, persisted and checked for
double-send safety, but no TON builder exists.
"""
from __future__ import annotations

from enum import Enum
from typing import ClassVar

from pydantic import Field

from ...amount import BlockchainAmount
from ...blockchains import Blockchain
from ...exceptions import ValidationError
from ...tx_input import (
    EncodedBytes,
    PriorityLike,
    TxInput,
    TxInputWithMemo,
    TxInputWithPublicKey,
    TxInputWithUnix,
    apply_priority,
    same_tx_input_types,
)

ED25519_PUBLIC_KEY_LENGTH = 32


class AccountStatus(str, Enum):
    UNINIT = "uninit"
    ACTIVE = "active"
    FROZEN = "frozen"
    NONEXIST = "nonexist"


class TonTxInput(TxInput, TxInputWithPublicKey, TxInputWithMemo, TxInputWithUnix):
    """Wallet sequence number and the fee reserved for one message."""

    driver: ClassVar[Blockchain] = Blockchain.TON

    account_status: AccountStatus = AccountStatus.ACTIVE
    seq: int = Field(default=0, ge=0)
    public_key: EncodedBytes = b""
    memo: str = ""
    timestamp: int = 0
    token_wallet: str = ""
    estimated_max_fee: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)
    ton_balance: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)

    def set_public_key(self, public_key: bytes) -> None:
        if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
            raise ValidationError(
                f"invalid ed25519 public key length: {len(public_key)}",
                field="public_key",
            )
        self.public_key = public_key

    def set_memo(self, memo: str) -> None:
        self.memo = memo

    def set_unix(self, unix_seconds: int) -> None:
        self.timestamp = unix_seconds

    def set_gas_fee_priority(self, priority: PriorityLike) -> None:
        self.estimated_max_fee = apply_priority(self.estimated_max_fee, priority)

    @property
    def needs_deploy(self) -> bool:
        """The wallet contract has to be deployed with the first message."""
        return self.account_status in (AccountStatus.UNINIT, AccountStatus.NONEXIST)

    def independent_of(self, other: TxInput) -> bool:
        if type(other) is not type(self):
            return False
        return self.seq != other.seq

    def safe_from_double_send(self, *others: TxInput) -> bool:
        if not same_tx_input_types(self, *others):
            return False
        return all(self.seq != other.seq for other in others)


__all__ = ["AccountStatus", "TonTxInput"]
