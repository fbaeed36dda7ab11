"""Base58 public keys and associated token accounts."""
from __future__ import annotations

from solders.pubkey import Pubkey

from ...exceptions import InvalidAddressError

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")


def decode_address(address: str) -> Pubkey:
    """Parse a base58 public key.

    Raises:
        InvalidAddressError: If it is not 32 bytes of valid base58.
    """
    try:
        return Pubkey.from_string(address)
    except ValueError as exc:
        raise InvalidAddressError(address, "SOL", str(exc)) from exc


def find_associated_token_address(
    owner: Pubkey,
    mint: Pubkey,
    token_program: Pubkey = TOKEN_PROGRAM_ID,
) -> Pubkey:
    address, _bump = Pubkey.find_program_address(
        [bytes(owner), bytes(token_program), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )
    return address


__all__ = [
    "ASSOCIATED_TOKEN_PROGRAM_ID",
    "SYSTEM_PROGRAM_ID",
    "TOKEN_PROGRAM_ID",
    "decode_address",
    "find_associated_token_address",
]
