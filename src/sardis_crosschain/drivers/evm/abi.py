"""Calldata for the contract calls the EVM builders make."""
from __future__ import annotations

from typing import Sequence

from eth_abi import encode
from eth_utils import function_signature_to_4byte_selector, to_checksum_address

ERC20_TRANSFER_SELECTOR = function_signature_to_4byte_selector("transfer(address,uint256)")
BATCH_DEPOSIT_SELECTOR = function_signature_to_4byte_selector("batchDeposit(bytes[],bytes[],bytes[])")
EXIT_REQUEST_SELECTOR = bytes.fromhex("254209ba")

# 0x01-type withdrawal credentials point at an execution-layer address
WITHDRAWAL_CREDENTIAL_PREFIX = 0x01


def erc20_transfer(to: bytes, amount: int) -> bytes:
    return ERC20_TRANSFER_SELECTOR + encode(["address", "uint256"], [to_checksum_address(to), amount])


def withdrawal_credentials(owner: bytes) -> bytes:
    credential = bytearray(32)
    credential[32 - len(owner):] = owner
    credential[0] = WITHDRAWAL_CREDENTIAL_PREFIX
    return bytes(credential)


def batch_deposit(
    public_keys: Sequence[bytes],
    credentials: Sequence[bytes],
    signatures: Sequence[bytes],
) -> bytes:
    if not (len(public_keys) == len(credentials) == len(signatures)):
        raise ValueError("public keys, credentials and signatures must have equal length")
    return BATCH_DEPOSIT_SELECTOR + encode(
        ["bytes[]", "bytes[]", "bytes[]"],
        [list(public_keys), list(credentials), list(signatures)],
    )


def exit_request(public_keys: Sequence[bytes]) -> bytes:
    return EXIT_REQUEST_SELECTOR + encode(["bytes[]"], [list(public_keys)])


__all__ = [
    "ERC20_TRANSFER_SELECTOR",
    "batch_deposit",
    "erc20_transfer",
    "exit_request",
    "withdrawal_credentials",
]
