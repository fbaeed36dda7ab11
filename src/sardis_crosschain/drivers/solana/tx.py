"""Legacy-message Solana transactions."""
from __future__ import annotations

from dataclasses import dataclass, field

from solders.message import Message
from solders.signature import Signature
from solders.transaction import Transaction

from ...exceptions import ValidationError
from ...tx import Tx, check_signature_count

SIGNATURE_LENGTH = 64


@dataclass
class SolanaTx(Tx):
    """Compiled message; the fee payer signs the serialized message bytes."""
    message: Message
    signatures: list[bytes] = field(default_factory=list, repr=False)

    def sighashes(self) -> list[bytes]:
        return [bytes(self.message)]

    def add_signatures(self, *signatures: bytes) -> None:
        check_signature_count(self, signatures)
        for signature in signatures:
            if len(signature) != SIGNATURE_LENGTH:
                raise ValidationError(
                    f"invalid signature ({len(signature)}): {signature.hex()}",
                    field="signatures",
                )
        self.signatures = list(signatures)

    def get_signatures(self) -> list[bytes]:
        return list(self.signatures)

    def transaction(self) -> Transaction:
        if self.signatures:
            sigs = [Signature.from_bytes(sig) for sig in self.signatures]
        else:
            sigs = [Signature.default()] * self.message.header.num_required_signatures
        return Transaction.populate(self.message, sigs)

    def serialize(self) -> bytes:
        return bytes(self.transaction())

    def hash(self) -> str:
        """The first signature in base58, or empty before signing."""
        if not self.signatures:
            return ""
        return str(Signature.from_bytes(self.signatures[0]))


__all__ = ["SolanaTx"]
