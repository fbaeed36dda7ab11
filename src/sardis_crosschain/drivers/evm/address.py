"""EVM address decoding."""
from __future__ import annotations

from eth_utils import is_address, to_canonical_address, to_checksum_address

from ...exceptions import InvalidAddressError


def decode_address(address: str) -> bytes:
    """20-byte address; mixed-case input must carry a valid EIP-55 checksum."""
    if not is_address(address):
        raise InvalidAddressError(address, "evm", "not a hex address or bad checksum")
    return to_canonical_address(address)


def normalize_address(address: str) -> str:
    return to_checksum_address(decode_address(address))


__all__ = ["decode_address", "normalize_address"]
