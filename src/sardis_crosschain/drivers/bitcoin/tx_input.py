"""Unspent-output input for Bitcoin-family chains."""
from __future__ import annotations

from typing import ClassVar

from pydantic import BaseModel, Field

from ...amount import BlockchainAmount
from ...blockchains import Blockchain
from ...tx_input import (
    EncodedBytes,
    PriorityLike,
    TxInput,
    TxInputWithPublicKey,
    apply_priority,
    same_tx_input_types,
)


class Outpoint(BaseModel):
    """Reference to a previous output: txid (display hex) and index."""
    hash: str
    index: int = Field(ge=0)

    def key(self) -> tuple[str, int]:
        return (self.hash.lower(), self.index)


class Output(BaseModel):
    outpoint: Outpoint
    value: BlockchainAmount
    pub_key_script: str = ""


class BitcoinTxInput(TxInput, TxInputWithPublicKey):
    """Selected unspent outputs plus a fee rate."""

    driver: ClassVar[Blockchain] = Blockchain.BITCOIN

    unspent_outputs: list[Output] = Field(default_factory=list)
    gas_price_per_byte: BlockchainAmount = Field(default_factory=BlockchainAmount.zero)
    from_public_key: EncodedBytes = b""

    def sum_utxo(self) -> BlockchainAmount:
        total = BlockchainAmount.zero()
        for output in self.unspent_outputs:
            total = total + output.value
        return total

    def outpoints(self) -> set[tuple[str, int]]:
        return {output.outpoint.key() for output in self.unspent_outputs}

    def set_public_key(self, public_key: bytes) -> None:
        self.from_public_key = public_key

    def set_gas_fee_priority(self, priority: PriorityLike) -> None:
        self.gas_price_per_byte = apply_priority(self.gas_price_per_byte, priority)

    def independent_of(self, other: TxInput) -> bool:
        if not isinstance(other, BitcoinTxInput) or type(other) is not type(self):
            return False
        return self.outpoints().isdisjoint(other.outpoints())

    def safe_from_double_send(self, *others: TxInput) -> bool:
        if not same_tx_input_types(self, *others):
            return False
        return all(self.independent_of(other) for other in others)


__all__ = ["BitcoinTxInput", "Outpoint", "Output"]
