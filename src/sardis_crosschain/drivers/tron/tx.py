"""Tron transactions: protobuf raw data signed by its sha256."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from ...protobuf import ProtoWriter
from ...tx import Tx, check_signature_count, split_recoverable_signature


@dataclass
class TronTx(Tx):
    raw_data: bytes
    signatures: list[bytes] = field(default_factory=list, repr=False)

    def txid(self) -> bytes:
        return hashlib.sha256(self.raw_data).digest()

    def sighashes(self) -> list[bytes]:
        return [self.txid()]

    def add_signatures(self, *signatures: bytes) -> None:
        check_signature_count(self, signatures)
        for signature in signatures:
            split_recoverable_signature(signature)
        self.signatures = list(signatures)

    def get_signatures(self) -> list[bytes]:
        return list(self.signatures)

    def serialize(self) -> bytes:
        return ProtoWriter().raw(1, self.raw_data).repeated_bytes(2, self.signatures).finish()

    def hash(self) -> str:
        return self.txid().hex()


__all__ = ["TronTx"]
