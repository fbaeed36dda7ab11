"""Bitcoin-family transaction: sighash computation and signature attachment."""
from __future__ import annotations

from dataclasses import dataclass

from bitcoin.core import (
    CMutableTransaction,
    CTxInWitness,
    CTxWitness,
    b2lx,
)
from bitcoin.core.script import (
    SIGHASH_ALL,
    SIGVERSION_BASE,
    SIGVERSION_WITNESS_V0,
    CScript,
    CScriptWitness,
    SignatureHash,
)

from ...exceptions import ValidationError
from ...tx import Tx, check_signature_count
from .address import P2PKH, P2WPKH, DecodedAddress, p2pkh_script

SIGHASH_FORKID = 0x40

SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141


@dataclass
class SpentInput:
    """What signing needs about each spent output."""
    owner: DecodedAddress
    value: int


def _der_int(value: int) -> bytes:
    raw = value.to_bytes(max(1, (value.bit_length() + 7) // 8), "big")
    if raw[0] & 0x80:
        raw = b"\x00" + raw
    return b"\x02" + bytes([len(raw)]) + raw


def to_der_signature(signature: bytes) -> bytes:
    """Convert a 64/65-byte ``r || s [|| v]`` signature to low-S DER.

    Anything else is assumed to already be DER and returned unchanged.
    """
    if len(signature) not in (64, 65):
        return signature
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    if s > SECP256K1_N // 2:
        s = SECP256K1_N - s
    body = _der_int(r) + _der_int(s)
    return b"\x30" + bytes([len(body)]) + body


class BitcoinTx(Tx):
    def __init__(
        self,
        tx: CMutableTransaction,
        spent: list[SpentInput],
        public_key: bytes = b"",
        fork_id: bool = False,
    ) -> None:
        self.tx = tx
        self.spent = spent
        self.public_key = public_key
        self.fork_id = fork_id
        self._signatures: list[bytes] = []

    @property
    def hashtype(self) -> int:
        return SIGHASH_ALL | SIGHASH_FORKID if self.fork_id else SIGHASH_ALL

    def hash(self) -> str:
        return b2lx(self.tx.GetTxid())

    def _sighash(self, index: int, spent: SpentInput) -> bytes:
        owner = spent.owner
        if owner.kind == P2WPKH or self.fork_id:
            return SignatureHash(
                p2pkh_script(owner.program),
                self.tx,
                index,
                self.hashtype,
                amount=spent.value,
                sigversion=SIGVERSION_WITNESS_V0,
            )
        if owner.kind == P2PKH:
            return SignatureHash(
                owner.script_pubkey,
                self.tx,
                index,
                self.hashtype,
                sigversion=SIGVERSION_BASE,
            )
        raise ValidationError(f"cannot sign for {owner.kind} outputs", field="from")

    def sighashes(self) -> list[bytes]:
        return [self._sighash(i, spent) for i, spent in enumerate(self.spent)]

    def add_signatures(self, *signatures: bytes) -> None:
        check_signature_count(self, signatures)
        if not self.public_key:
            raise ValidationError("public key is required to attach bitcoin signatures", field="public_key")

        witnesses = []
        for txin, spent, signature in zip(self.tx.vin, self.spent, signatures):
            sig = to_der_signature(signature) + bytes([self.hashtype])
            if spent.owner.kind == P2WPKH:
                txin.scriptSig = CScript()
                witnesses.append(CTxInWitness(CScriptWitness([sig, self.public_key])))
            else:
                txin.scriptSig = CScript([sig, self.public_key])
                witnesses.append(CTxInWitness())
        if any(spent.owner.kind == P2WPKH for spent in self.spent):
            self.tx.wit = CTxWitness(witnesses)
        self._signatures = list(signatures)

    def get_signatures(self) -> list[bytes]:
        return list(self._signatures)

    def serialize(self) -> bytes:
        return self.tx.serialize()


__all__ = ["BitcoinTx", "SpentInput", "to_der_signature"]
