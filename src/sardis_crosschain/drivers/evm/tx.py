"""EIP-1559 and legacy EIP-155 transactions."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import rlp
from eth_utils import keccak

from ...tx import Tx, check_signature_count, split_recoverable_signature

DYNAMIC_FEE_TX_TYPE = 0x02


@dataclass
class EvmTx(Tx):
    """Type-2 transaction. ``sighashes`` returns the keccak of the unsigned payload."""
    chain_id: int
    nonce: int
    max_priority_fee_per_gas: int
    max_fee_per_gas: int
    gas_limit: int
    to: bytes
    value: int
    data: bytes = b""
    signature: Optional[tuple[int, int, int]] = field(default=None, repr=False)
    _raw_signatures: list[bytes] = field(default_factory=list, repr=False)

    def _fields(self) -> list:
        return [
            self.chain_id,
            self.nonce,
            self.max_priority_fee_per_gas,
            self.max_fee_per_gas,
            self.gas_limit,
            self.to,
            self.value,
            self.data,
            [],
        ]

    def sighashes(self) -> list[bytes]:
        return [keccak(bytes([DYNAMIC_FEE_TX_TYPE]) + rlp.encode(self._fields()))]

    def add_signatures(self, *signatures: bytes) -> None:
        check_signature_count(self, signatures)
        self.signature = split_recoverable_signature(signatures[0])
        self._raw_signatures = list(signatures)

    def get_signatures(self) -> list[bytes]:
        return list(self._raw_signatures)

    def serialize(self) -> bytes:
        fields = self._fields()
        if self.signature is not None:
            r, s, v = self.signature
            fields += [v, r, s]
        return bytes([DYNAMIC_FEE_TX_TYPE]) + rlp.encode(fields)

    def hash(self) -> str:
        return "0x" + keccak(self.serialize()).hex()


@dataclass
class EvmLegacyTx(Tx):
    """Pre-London transaction with EIP-155 replay protection."""
    chain_id: int
    nonce: int
    gas_price: int
    gas_limit: int
    to: bytes
    value: int
    data: bytes = b""
    signature: Optional[tuple[int, int, int]] = field(default=None, repr=False)
    _raw_signatures: list[bytes] = field(default_factory=list, repr=False)

    def _fields(self) -> list:
        return [self.nonce, self.gas_price, self.gas_limit, self.to, self.value, self.data]

    def sighashes(self) -> list[bytes]:
        return [keccak(rlp.encode(self._fields() + [self.chain_id, 0, 0]))]

    def add_signatures(self, *signatures: bytes) -> None:
        check_signature_count(self, signatures)
        self.signature = split_recoverable_signature(signatures[0])
        self._raw_signatures = list(signatures)

    def get_signatures(self) -> list[bytes]:
        return list(self._raw_signatures)

    def serialize(self) -> bytes:
        fields = self._fields()
        if self.signature is None:
            return rlp.encode(fields + [self.chain_id, 0, 0])
        r, s, recovery_id = self.signature
        return rlp.encode(fields + [recovery_id + self.chain_id * 2 + 35, r, s])

    def hash(self) -> str:
        return "0x" + keccak(self.serialize()).hex()


__all__ = ["EvmTx", "EvmLegacyTx"]
