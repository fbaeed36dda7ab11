"""SIGN_MODE_DIRECT transactions for Cosmos SDK chains."""
from __future__ import annotations

import hashlib
from dataclasses import dataclass, field

from eth_utils import keccak

from ...exceptions import ValidationError
from ...protobuf import ProtoWriter
from ...tx import Tx, check_signature_count

SIGNATURE_LENGTH = 64


@dataclass
class CosmosTx(Tx):
    """Encoded TxBody and AuthInfo awaiting a single signature."""
    body_bytes: bytes
    auth_info_bytes: bytes
    chain_id: str
    account_number: int
    keccak_sighash: bool = False
    signatures: list[bytes] = field(default_factory=list, repr=False)

    def sign_doc(self) -> bytes:
        return (
            ProtoWriter()
            .raw(1, self.body_bytes)
            .raw(2, self.auth_info_bytes)
            .string(3, self.chain_id)
            .varint(4, self.account_number)
            .finish()
        )

    def sighashes(self) -> list[bytes]:
        doc = self.sign_doc()
        if self.keccak_sighash:
            return [keccak(doc)]
        return [hashlib.sha256(doc).digest()]

    def add_signatures(self, *signatures: bytes) -> None:
        check_signature_count(self, signatures)
        normalized = []
        for signature in signatures:
            # drop a trailing recovery id
            if len(signature) == SIGNATURE_LENGTH + 1:
                signature = signature[:SIGNATURE_LENGTH]
            if len(signature) != SIGNATURE_LENGTH:
                raise ValidationError(
                    f"expected a {SIGNATURE_LENGTH}-byte signature, got {len(signature)} bytes",
                    field="signatures",
                )
            normalized.append(signature)
        self.signatures = normalized

    def get_signatures(self) -> list[bytes]:
        return list(self.signatures)

    def serialize(self) -> bytes:
        """TxRaw encoding."""
        return (
            ProtoWriter()
            .raw(1, self.body_bytes)
            .raw(2, self.auth_info_bytes)
            .repeated_bytes(3, self.signatures)
            .finish()
        )

    def hash(self) -> str:
        return hashlib.sha256(self.serialize()).hexdigest().upper()


__all__ = ["CosmosTx"]
