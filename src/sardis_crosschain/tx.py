"""Signed-transaction contract produced by builders."""
from __future__ import annotations

from abc import ABC, abstractmethod

from .exceptions import ValidationError


class Tx(ABC):
    """A built transaction awaiting out-of-band signatures.

    The caller signs every payload returned by :meth:`sighashes` in order,
    attaches the signatures with :meth:`add_signatures`, then hands
    :meth:`serialize` output to a client for broadcast.
    """

    @abstractmethod
    def hash(self) -> str:
        """Transaction id in the chain's conventional text form."""

    @abstractmethod
    def sighashes(self) -> list[bytes]:
        """Payloads to sign, one per required signature."""

    @abstractmethod
    def add_signatures(self, *signatures: bytes) -> None:
        """Attach signatures in the order of :meth:`sighashes`."""

    @abstractmethod
    def get_signatures(self) -> list[bytes]:
        """Signatures attached so far."""

    @abstractmethod
    def serialize(self) -> bytes:
        """Wire encoding for broadcast."""


def check_signature_count(tx: Tx, signatures: tuple[bytes, ...]) -> None:
    """Raise unless exactly one signature per sighash was supplied."""
    expected = len(tx.sighashes())
    if len(signatures) != expected:
        raise ValidationError(
            f"expected {expected} signature(s), got {len(signatures)}",
            field="signatures",
        )


def split_recoverable_signature(signature: bytes) -> tuple[int, int, int]:
    """Split a 65-byte ``r || s || v`` signature into integers.

    ``v`` is returned as the recovery id (0 or 1); the 27/28 form is accepted.
    """
    if len(signature) != 65:
        raise ValidationError(
            f"expected a 65-byte recoverable signature, got {len(signature)} bytes",
            field="signatures",
        )
    r = int.from_bytes(signature[:32], "big")
    s = int.from_bytes(signature[32:64], "big")
    v = signature[64]
    if v >= 27:
        v -= 27
    if v not in (0, 1):
        raise ValidationError(f"invalid recovery id {signature[64]}", field="signatures")
    return r, s, v


__all__ = ["Tx", "check_signature_count", "split_recoverable_signature"]
