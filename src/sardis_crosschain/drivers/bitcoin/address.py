"""Bitcoin-family address decoding into output scripts.

Handles base58check (P2PKH/P2SH), bech32 segwit and Bitcoin Cash cashaddr.
Version bytes come from a per-chain table rather than python-bitcoinlib's
process-global SelectParams, so several chains can be served at once.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import base58
from bitcoin.core.script import (
    OP_0,
    OP_CHECKSIG,
    OP_DUP,
    OP_EQUAL,
    OP_EQUALVERIFY,
    OP_HASH160,
    CScript,
    CScriptOp,
)
from bitcoin.segwit_addr import convertbits
from bitcoin.segwit_addr import decode as decode_segwit

from ...assets import ChainConfig
from ...blockchains import NativeAsset
from ...exceptions import InvalidAddressError

P2PKH = "p2pkh"
P2SH = "p2sh"
P2WPKH = "p2wpkh"
P2WSH = "p2wsh"
P2TR = "p2tr"


@dataclass(frozen=True)
class AddressParams:
    p2pkh_version: int
    p2sh_version: int
    bech32_hrp: Optional[str] = None
    cashaddr_prefix: Optional[str] = None


ADDRESS_PARAMS: dict[NativeAsset, AddressParams] = {
    NativeAsset.BTC: AddressParams(0x00, 0x05, bech32_hrp="bc"),
    NativeAsset.BCH: AddressParams(0x00, 0x05, cashaddr_prefix="bitcoincash"),
    NativeAsset.LTC: AddressParams(0x30, 0x32, bech32_hrp="ltc"),
    NativeAsset.DOGE: AddressParams(0x1E, 0x16),
}


@dataclass(frozen=True)
class DecodedAddress:
    kind: str
    program: bytes

    @property
    def script_pubkey(self) -> CScript:
        if self.kind == P2PKH:
            return p2pkh_script(self.program)
        if self.kind == P2SH:
            return CScript([OP_HASH160, self.program, OP_EQUAL])
        version = 0 if self.kind in (P2WPKH, P2WSH) else 1
        return CScript([CScriptOp.encode_op_n(version) if version else OP_0, self.program])


def p2pkh_script(pubkey_hash: bytes) -> CScript:
    return CScript([OP_DUP, OP_HASH160, pubkey_hash, OP_EQUALVERIFY, OP_CHECKSIG])


def _params_for(chain: ChainConfig) -> AddressParams:
    params = ADDRESS_PARAMS.get(chain.chain)
    if params is None:
        raise InvalidAddressError("", chain.chain.value, "no address parameters for chain")
    return params


# -----------------------------------------------------------------------------
# cashaddr
# -----------------------------------------------------------------------------

_CASHADDR_CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
_CASHADDR_GENERATOR = (0x98F2BC8E61, 0x79B76D99E2, 0xF33E5FB3C4, 0xAE2EABE2A8, 0x1E4F43E470)


def _cashaddr_polymod(values: list[int]) -> int:
    chk = 1
    for value in values:
        top = chk >> 35
        chk = ((chk & 0x07FFFFFFFF) << 5) ^ value
        for i, gen in enumerate(_CASHADDR_GENERATOR):
            if (top >> i) & 1:
                chk ^= gen
    return chk ^ 1


def _decode_cashaddr(address: str, prefix: str) -> Optional[DecodedAddress]:
    text = address.lower()
    if ":" in text:
        given_prefix, _, payload = text.partition(":")
        if given_prefix != prefix:
            return None
    else:
        payload = text
    if not payload or any(c not in _CASHADDR_CHARSET for c in payload):
        return None
    data = [_CASHADDR_CHARSET.index(c) for c in payload]
    expanded = [ord(c) & 0x1F for c in prefix] + [0]
    if _cashaddr_polymod(expanded + data) != 0:
        return None
    decoded = convertbits(data[:-8], 5, 8, False)
    if not decoded:
        return None
    version, program = decoded[0], bytes(decoded[1:])
    if len(program) != 20:
        return None
    kind = (version >> 3) & 0x0F
    if kind == 0:
        return DecodedAddress(P2PKH, program)
    if kind == 1:
        return DecodedAddress(P2SH, program)
    return None


# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------

def decode_address(address: str, chain: ChainConfig) -> DecodedAddress:
    """Decode ``address`` for ``chain``.

    Raises:
        InvalidAddressError: If no supported format decodes it.
    """
    params = _params_for(chain)

    if params.bech32_hrp and address.lower().startswith(params.bech32_hrp + "1"):
        version, program = decode_segwit(params.bech32_hrp, address)
        if version is None:
            raise InvalidAddressError(address, chain.chain.value, "bad bech32 checksum or program")
        program = bytes(program)
        if version == 0:
            return DecodedAddress(P2WPKH if len(program) == 20 else P2WSH, program)
        if version == 1 and len(program) == 32:
            return DecodedAddress(P2TR, program)
        raise InvalidAddressError(address, chain.chain.value, f"unsupported witness version {version}")

    if params.cashaddr_prefix and (":" in address or address[:1].lower() in ("q", "p")):
        decoded = _decode_cashaddr(address, params.cashaddr_prefix)
        if decoded is not None:
            return decoded
        if ":" in address:
            raise InvalidAddressError(address, chain.chain.value, "bad cashaddr")

    try:
        raw = base58.b58decode_check(address)
    except ValueError as exc:
        raise InvalidAddressError(address, chain.chain.value, "bad base58 checksum") from exc
    if len(raw) != 21:
        raise InvalidAddressError(address, chain.chain.value, "unexpected payload length")
    version, program = raw[0], raw[1:]
    if version == params.p2pkh_version:
        return DecodedAddress(P2PKH, program)
    if version == params.p2sh_version:
        return DecodedAddress(P2SH, program)
    raise InvalidAddressError(address, chain.chain.value, f"unknown version byte 0x{version:02x}")


__all__ = [
    "ADDRESS_PARAMS",
    "AddressParams",
    "DecodedAddress",
    "decode_address",
    "p2pkh_script",
    "P2PKH",
    "P2SH",
    "P2WPKH",
    "P2WSH",
    "P2TR",
]
