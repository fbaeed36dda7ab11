"""Base58check Tron addresses."""
from __future__ import annotations

import base58

from ...exceptions import InvalidAddressError

ADDRESS_PREFIX = 0x41
ADDRESS_LENGTH = 21


def decode_address(address: str) -> bytes:
    """Decode to the 21-byte form (0x41 followed by the account hash).

    Raises:
        InvalidAddressError: On a bad checksum, length or prefix.
    """
    try:
        raw = base58.b58decode_check(address)
    except ValueError as exc:
        raise InvalidAddressError(address, "TRX", "bad base58 checksum") from exc
    if len(raw) != ADDRESS_LENGTH:
        raise InvalidAddressError(address, "TRX", f"expected {ADDRESS_LENGTH} bytes, got {len(raw)}")
    if raw[0] != ADDRESS_PREFIX:
        raise InvalidAddressError(address, "TRX", f"unexpected prefix 0x{raw[0]:02x}")
    return raw


def encode_address(raw: bytes) -> str:
    return base58.b58encode_check(raw).decode("ascii")


__all__ = ["decode_address", "encode_address"]
