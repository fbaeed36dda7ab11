"""
Tests for the Bitcoin-family driver.

Tests cover:
- Address decoding: base58, bech32 segwit and cashaddr
- Fee estimation and change calculation
- Output ordering and sighash/signature attachment
"""
from __future__ import annotations

import base58
import pytest
from bitcoin import segwit_addr

from sardis_crosschain.amount import BlockchainAmount
from sardis_crosschain.blockchains import NativeAsset
from sardis_crosschain.builder import TransferArgs
from sardis_crosschain.config import DEFAULT_CHAINS
from sardis_crosschain.drivers.bitcoin import (
    BitcoinBuilder,
    BitcoinTxInput,
    Outpoint,
    Output,
)
from sardis_crosschain.drivers.bitcoin.address import P2PKH, P2SH, P2WPKH, decode_address
from sardis_crosschain.drivers.bitcoin.tx import SECP256K1_N, to_der_signature
from sardis_crosschain.drivers.evm import EvmTxInput
from sardis_crosschain.exceptions import InsufficientFundsError, InvalidAddressError, ValidationError

BTC = DEFAULT_CHAINS[NativeAsset.BTC]
BCH = DEFAULT_CHAINS[NativeAsset.BCH]
LTC = DEFAULT_CHAINS[NativeAsset.LTC]

SENDER_HASH = bytes(range(20))
RECIPIENT_HASH = bytes(range(20, 40))


def p2pkh_address(pubkey_hash: bytes, version: int = 0x00) -> str:
    return base58.b58encode_check(bytes([version]) + pubkey_hash).decode()


SENDER = p2pkh_address(SENDER_HASH)
RECIPIENT = p2pkh_address(RECIPIENT_HASH)


def funded_input(values=(500_000, 500_000), fee_rate: int = 10) -> BitcoinTxInput:
    return BitcoinTxInput(
        unspent_outputs=[
            Output(outpoint=Outpoint(hash=f"{i + 1:02x}" * 32, index=i), value=BlockchainAmount(v))
            for i, v in enumerate(values)
        ],
        gas_price_per_byte=BlockchainAmount(fee_rate),
        from_public_key=b"\x02" + bytes(32),
    )


def transfer_args(amount: int, sender: str = SENDER, recipient: str = RECIPIENT) -> TransferArgs:
    return TransferArgs(from_address=sender, to_address=recipient, amount=BlockchainAmount(amount))


class TestAddressDecoding:
    """Tests for decode_address."""

    def test_p2pkh(self):
        decoded = decode_address(SENDER, BTC)
        assert decoded.kind == P2PKH
        assert decoded.program == SENDER_HASH

    def test_p2sh(self):
        decoded = decode_address(p2pkh_address(SENDER_HASH, 0x05), BTC)
        assert decoded.kind == P2SH

    def test_segwit(self):
        """Should decode v0 witness programs with the chain's hrp."""
        address = segwit_addr.encode("bc", 0, list(SENDER_HASH))
        decoded = decode_address(address, BTC)
        assert decoded.kind == P2WPKH
        assert decoded.program == SENDER_HASH

    def test_litecoin_versions(self):
        """Litecoin uses its own version byte and hrp."""
        assert decode_address(p2pkh_address(SENDER_HASH, 0x30), LTC).kind == P2PKH
        assert decode_address(segwit_addr.encode("ltc", 0, list(SENDER_HASH)), LTC).kind == P2WPKH
        with pytest.raises(InvalidAddressError):
            decode_address(SENDER, LTC)

    def test_cashaddr(self):
        """cashaddr and legacy forms of the same key decode identically."""
        legacy = decode_address("1BpEi6DfDAUFd7GtittLSdBeYJvcoaVggu", BCH)
        cash = decode_address("bitcoincash:qpm2qsznhks23z7629mms6s4cwef74vcwvy22gdx6a", BCH)
        bare = decode_address("qpm2qsznhks23z7629mms6s4cwef74vcwvy22gdx6a", BCH)
        assert cash.kind == P2PKH
        assert cash.program == legacy.program == bare.program

    def test_bad_cashaddr(self):
        with pytest.raises(InvalidAddressError):
            decode_address("bitcoincash:qpm2qsznhks23z7629mms6s4cwef74vcwvy22gdx6b", BCH)

    @pytest.mark.parametrize("address", ["", "1BvBMSEYstWetqTFn5Au4m4GFg7xJaNVN3", "bc1qqqqq"])
    def test_invalid(self, address):
        with pytest.raises(InvalidAddressError):
            decode_address(address, BTC)


class TestBitcoinBuilder:
    """Tests for BitcoinBuilder."""

    def test_fee_estimate(self):
        """Fee is fee rate times estimated bytes per spent output."""
        assert BitcoinBuilder(BTC).estimate_fee(funded_input()) == 10 * 255 * 2
        assert BitcoinBuilder(BCH).estimate_fee(funded_input()) == 10 * 300 * 2

    def test_transfer_with_change(self):
        """Destination first, change back to the sender."""
        tx = BitcoinBuilder(BTC).transfer(transfer_args(500_000), funded_input())
        assert len(tx.tx.vin) == 2
        assert [out.nValue for out in tx.tx.vout] == [500_000, 494_900]
        assert bytes(tx.tx.vout[0].scriptPubKey) == bytes(decode_address(RECIPIENT, BTC).script_pubkey)
        assert bytes(tx.tx.vout[1].scriptPubKey) == bytes(decode_address(SENDER, BTC).script_pubkey)

    def test_exact_amount_has_no_change_output(self):
        tx = BitcoinBuilder(BTC).transfer(transfer_args(1_000_000 - 5_100), funded_input())
        assert len(tx.tx.vout) == 1

    def test_insufficient_for_fee(self):
        """Leaving less than the fee after the transfer fails."""
        with pytest.raises(InsufficientFundsError) as exc_info:
            BitcoinBuilder(BTC).transfer(transfer_args(999_999), funded_input())
        assert exc_info.value.details["chain"] == "BTC"
        assert "estimated fee" in exc_info.value.message

    def test_no_outputs(self):
        with pytest.raises(InsufficientFundsError):
            BitcoinBuilder(BTC).transfer(transfer_args(1), BitcoinTxInput())

    def test_cannot_spend_from_p2sh(self):
        with pytest.raises(ValidationError):
            BitcoinBuilder(BTC).transfer(
                transfer_args(1000, sender=p2pkh_address(SENDER_HASH, 0x05)),
                funded_input(),
            )

    def test_wrong_input_type(self):
        with pytest.raises(ValidationError):
            BitcoinBuilder(BTC).transfer(transfer_args(1000), EvmTxInput())

    def test_priority_raises_fee(self):
        """A priority option scales the byte fee before the fee estimate."""
        args = transfer_args(500_000)
        args.priority = "very_aggressive"
        tx = BitcoinBuilder(BTC).transfer(args, funded_input())
        assert tx.tx.vout[1].nValue == 1_000_000 - 500_000 - 20 * 255 * 2


class TestBitcoinTx:
    """Tests for sighashes and signature attachment."""

    def test_one_sighash_per_input(self):
        tx = BitcoinBuilder(BTC).transfer(transfer_args(500_000), funded_input())
        sighashes = tx.sighashes()
        assert len(sighashes) == 2
        assert all(len(h) == 32 for h in sighashes)
        assert sighashes[0] != sighashes[1]

    def test_add_signatures_p2pkh(self):
        """Signatures land in the scriptSig of each input."""
        tx = BitcoinBuilder(BTC).transfer(transfer_args(500_000), funded_input())
        unsigned_id = tx.hash()
        tx.add_signatures(bytes([1]) * 64, bytes([2]) * 64)
        assert all(len(txin.scriptSig) > 0 for txin in tx.tx.vin)
        assert len(tx.get_signatures()) == 2
        assert len(tx.hash()) == 64
        assert tx.hash() != unsigned_id
        assert tx.serialize()

    def test_add_signatures_segwit(self):
        """Segwit inputs carry the signature in the witness."""
        sender = segwit_addr.encode("bc", 0, list(SENDER_HASH))
        tx = BitcoinBuilder(BTC).transfer(transfer_args(500_000, sender=sender), funded_input())
        unsigned_id = tx.hash()
        tx.add_signatures(bytes([1]) * 64, bytes([2]) * 64)
        assert all(len(txin.scriptSig) == 0 for txin in tx.tx.vin)
        assert tx.hash() == unsigned_id

    def test_signature_count_mismatch(self):
        tx = BitcoinBuilder(BTC).transfer(transfer_args(500_000), funded_input())
        with pytest.raises(ValidationError):
            tx.add_signatures(bytes(64))

    def test_bitcoin_cash_sighash_differs(self):
        """Bitcoin Cash signs with the fork id."""
        btc_tx = BitcoinBuilder(BTC).transfer(transfer_args(500_000), funded_input())
        bch_tx = BitcoinBuilder(BCH).transfer(transfer_args(500_000), funded_input())
        assert bch_tx.fork_id and not btc_tx.fork_id
        assert bch_tx.hashtype == 0x41

    def test_der_low_s(self):
        """High-S signatures are normalized."""
        high_s = (1).to_bytes(32, "big") + (SECP256K1_N - 5).to_bytes(32, "big")
        der = to_der_signature(high_s)
        assert der == bytes.fromhex("3006020101020105")
        assert to_der_signature(der) == der
