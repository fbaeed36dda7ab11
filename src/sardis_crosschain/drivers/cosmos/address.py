"""Bech32 account addresses for Cosmos SDK chains."""
from __future__ import annotations

from bitcoin.segwit_addr import bech32_decode, convertbits

from ...assets import ChainConfig
from ...blockchains import Blockchain, NativeAsset
from ...exceptions import InvalidAddressError

# account addresses are 20 bytes, contract addresses 32
ADDRESS_LENGTHS = (20, 32)

SECP256K1_PUBKEY_TYPE = "/cosmos.crypto.secp256k1.PubKey"
INJECTIVE_PUBKEY_TYPE = "/injective.crypto.v1beta1.ethsecp256k1.PubKey"
ETHERMINT_PUBKEY_TYPE = "/ethermint.crypto.v1.ethsecp256k1.PubKey"


def decode_address(address: str, chain: ChainConfig) -> bytes:
    """Decode a bech32 address and check its prefix against the chain.

    Raises:
        InvalidAddressError: On a bad checksum, prefix or payload length.
    """
    decoded = bech32_decode(address)
    hrp, data = decoded[0], decoded[1]
    if hrp is None or data is None:
        raise InvalidAddressError(address, chain.chain.value, "invalid bech32 encoding")
    if chain.chain_prefix and hrp != chain.chain_prefix:
        raise InvalidAddressError(
            address,
            chain.chain.value,
            f"expected prefix {chain.chain_prefix!r}, got {hrp!r}",
        )
    payload = convertbits(data, 5, 8, False)
    if payload is None or len(payload) not in ADDRESS_LENGTHS:
        raise InvalidAddressError(address, chain.chain.value, "invalid address length")
    return bytes(payload)


def is_ethsecp(chain: ChainConfig) -> bool:
    """Chains whose accounts use Ethereum-style keys and keccak sighashes."""
    return chain.chain == NativeAsset.INJ or chain.driver == Blockchain.EVMOS


def pubkey_type_url(chain: ChainConfig) -> str:
    if chain.chain == NativeAsset.INJ:
        return INJECTIVE_PUBKEY_TYPE
    if chain.driver == Blockchain.EVMOS:
        return ETHERMINT_PUBKEY_TYPE
    return SECP256K1_PUBKEY_TYPE


__all__ = ["decode_address", "is_ethsecp", "pubkey_type_url"]
