"""
Tests for the Cosmos driver.

Tests cover:
- Bech32 address prefixes and lengths
- Gas fee calculation, gas price caps and transfer tax
- Bank and CW20 transfers selected by asset type
- Staking messages and sign-doc hashing
"""
from __future__ import annotations

import hashlib
import json

import pytest
from bitcoin import segwit_addr
from eth_utils import keccak

from sardis_crosschain.amount import BlockchainAmount
from sardis_crosschain.assets import TokenAssetConfig
from sardis_crosschain.blockchains import NativeAsset
from sardis_crosschain.builder import StakeArgs, TransferArgs
from sardis_crosschain.config import DEFAULT_CHAINS
from sardis_crosschain.drivers.cosmos import (
    CosmosAssetType,
    CosmosBuilder,
    CosmosStakingInput,
    CosmosTxInput,
    CosmosUnstakingInput,
    CosmosWithdrawInput,
)
from sardis_crosschain.drivers.cosmos import messages
from sardis_crosschain.drivers.cosmos.address import (
    ETHERMINT_PUBKEY_TYPE,
    INJECTIVE_PUBKEY_TYPE,
    SECP256K1_PUBKEY_TYPE,
    decode_address,
)
from sardis_crosschain.drivers.cosmos.builder import default_max_gas_price, get_tax_from
from sardis_crosschain.exceptions import InvalidAddressError, ValidationError

ATOM = DEFAULT_CHAINS[NativeAsset.ATOM]
INJ = DEFAULT_CHAINS[NativeAsset.INJ]
EVMOS = DEFAULT_CHAINS[NativeAsset.EVMOS]

PUBLIC_KEY = b"\x02" + bytes(range(32))
VALIDATOR = "cosmosvaloper1sjllsnramtg3ewxqwwrwjxfgc4n4ef9u2lcnj0"


def bech32_address(hrp: str, payload: bytes) -> str:
    data = segwit_addr.convertbits(payload, 8, 5)
    try:
        return segwit_addr.bech32_encode(hrp, data)
    except TypeError:
        # releases that also speak bech32m take the encoding explicitly
        return segwit_addr.bech32_encode(hrp, data, segwit_addr.Encoding.BECH32)


SENDER = bech32_address("cosmos", bytes(range(20)))
RECIPIENT = bech32_address("cosmos", bytes(range(20, 40)))
CW20_CONTRACT = bech32_address("cosmos", bytes(range(32)))


def cosmos_input(input_type=CosmosTxInput, **overrides):
    fields = dict(
        account_number=11,
        sequence=4,
        gas_price=0.025,
        from_public_key=PUBLIC_KEY,
        chain_id="cosmoshub-4",
    )
    fields.update(overrides)
    return input_type(**fields)


def transfer(amount: int = 1_000_000, **kwargs) -> TransferArgs:
    return TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(amount), **kwargs)


class TestAddress:
    """Tests for bech32 decoding."""

    def test_account_and_contract_lengths(self):
        assert decode_address(SENDER, ATOM) == bytes(range(20))
        assert decode_address(CW20_CONTRACT, ATOM) == bytes(range(32))

    def test_wrong_prefix(self):
        """Addresses must carry the chain's prefix."""
        with pytest.raises(InvalidAddressError):
            decode_address(bech32_address("osmo", bytes(20)), ATOM)

    def test_bad_checksum_and_length(self):
        with pytest.raises(InvalidAddressError):
            decode_address(SENDER[:-1] + ("q" if SENDER[-1] != "q" else "p"), ATOM)
        with pytest.raises(InvalidAddressError):
            decode_address(bech32_address("cosmos", bytes(25)), ATOM)


class TestFees:
    """Tests for fee calculation."""

    def test_default_max_gas_price(self):
        """The default cap makes a native transfer cost at most 2 coins."""
        assert default_max_gas_price(ATOM) == 5.0

    def test_tax(self):
        assert get_tax_from(BlockchainAmount(100), 0.05) == 5
        assert get_tax_from(BlockchainAmount(100), 0.000001) == 0
        assert get_tax_from(BlockchainAmount(3), 0.5) == 1

    def test_gas_fee_only(self):
        builder = CosmosBuilder(ATOM)
        tx_input = cosmos_input(gas_limit=400_000)
        assert builder.calculate_fees(None, BlockchainAmount(1000), tx_input, include_tax=True) == [("uatom", 10_000)]

    def test_tax_merges_with_gas_denom(self):
        """Tax on the native coin adds to the gas fee coin."""
        builder = CosmosBuilder(ATOM.model_copy(update={"chain_transfer_tax": 0.05}))
        tx_input = cosmos_input(gas_limit=400_000)
        fees = builder.calculate_fees(None, BlockchainAmount(1000), tx_input, include_tax=True)
        assert fees == [("uatom", 10_050)]

    def test_tax_on_token_denom(self):
        """Tax on another denom becomes its own sorted fee coin."""
        chain = ATOM.model_copy(update={"chain_transfer_tax": 0.05})
        token = TokenAssetConfig(contract="ibc/ABC", decimals=6, chain=chain)
        tx_input = cosmos_input(gas_limit=400_000)
        fees = CosmosBuilder(chain).calculate_fees(token, BlockchainAmount(1000), tx_input, include_tax=True)
        assert fees == [("ibc/ABC", 50), ("uatom", 10_000)]

    def test_gas_price_capped(self):
        """Gas prices above the maximum are lowered before fees are computed."""
        tx_input = cosmos_input(gas_price=10.0)
        tx = CosmosBuilder(ATOM).transfer(transfer(), tx_input)
        assert tx_input.gas_price == 5.0
        assert messages.coin("uatom", 2_000_000).finish() in tx.auth_info_bytes


class TestBankTransfer:
    """Tests for x/bank transfers."""

    def test_native_transfer(self):
        """Should emit MsgSend with the chain denom and default gas limit."""
        tx_input = cosmos_input(memo="ref-1")
        tx = CosmosBuilder(ATOM).transfer(transfer(), tx_input)
        assert tx_input.gas_limit == 400_000
        assert messages.MSG_SEND.encode() in tx.body_bytes
        assert messages.coin("uatom", 1_000_000).finish() in tx.body_bytes
        assert b"ref-1" in tx.body_bytes
        assert messages.coin("uatom", 10_000).finish() in tx.auth_info_bytes
        assert SECP256K1_PUBKEY_TYPE.encode() in tx.auth_info_bytes
        assert PUBLIC_KEY in tx.auth_info_bytes
        assert tx.chain_id == "cosmoshub-4"
        assert tx.account_number == 11

    def test_bank_token_uses_contract_denom(self):
        token = TokenAssetConfig(contract="ibc/27394FB0", decimals=6, chain=ATOM)
        tx = CosmosBuilder(ATOM).transfer(transfer(asset=token), cosmos_input())
        assert messages.coin("ibc/27394FB0", 1_000_000).finish() in tx.body_bytes

    def test_invalid_recipient(self):
        args = TransferArgs(
            from_address=SENDER,
            to_address=bech32_address("inj", bytes(20)),
            amount=BlockchainAmount(1),
        )
        with pytest.raises(InvalidAddressError):
            CosmosBuilder(ATOM).transfer(args, cosmos_input())


class TestCw20Transfer:
    """Tests for CW20 transfers."""

    def test_cw20_execute_contract(self):
        """CW20 inputs call the contract's transfer and skip the tax."""
        chain = ATOM.model_copy(update={"chain_transfer_tax": 0.05})
        token = TokenAssetConfig(contract=CW20_CONTRACT, decimals=6, chain=chain)
        tx_input = cosmos_input(asset_type=CosmosAssetType.CW20)
        tx = CosmosBuilder(chain).transfer(transfer(asset=token), tx_input)
        assert tx_input.gas_limit == 900_000
        assert messages.MSG_EXECUTE_CONTRACT.encode() in tx.body_bytes
        assert CW20_CONTRACT.encode() in tx.body_bytes
        payload = json.dumps({"transfer": {"amount": "1000000", "recipient": RECIPIENT}}).encode()
        assert payload in tx.body_bytes
        assert messages.coin("uatom", 22_500).finish() in tx.auth_info_bytes


class TestStaking:
    """Tests for delegate, undelegate and reward withdrawal."""

    def _args(self, **kwargs) -> StakeArgs:
        return StakeArgs(chain=ATOM, from_address=SENDER, amount=BlockchainAmount(5_000_000), **kwargs)

    def test_delegate(self):
        tx = CosmosBuilder(ATOM).stake(self._args(validator=VALIDATOR), cosmos_input(CosmosStakingInput))
        assert messages.MSG_DELEGATE.encode() in tx.body_bytes
        assert VALIDATOR.encode() in tx.body_bytes
        assert messages.coin("uatom", 5_000_000).finish() in tx.body_bytes

    def test_undelegate(self):
        tx = CosmosBuilder(ATOM).unstake(self._args(validator=VALIDATOR), cosmos_input(CosmosUnstakingInput))
        assert messages.MSG_UNDELEGATE.encode() in tx.body_bytes

    def test_withdraw_rewards(self):
        tx = CosmosBuilder(ATOM).withdraw(self._args(validator=VALIDATOR), cosmos_input(CosmosWithdrawInput))
        assert messages.MSG_WITHDRAW_DELEGATOR_REWARD.encode() in tx.body_bytes

    def test_validator_required(self):
        with pytest.raises(ValidationError):
            CosmosBuilder(ATOM).stake(self._args(), cosmos_input(CosmosStakingInput))
        with pytest.raises(ValidationError):
            CosmosBuilder(ATOM).withdraw(self._args(), cosmos_input(CosmosWithdrawInput))

    def test_wrong_variant(self):
        with pytest.raises(ValidationError):
            CosmosBuilder(ATOM).stake(self._args(validator=VALIDATOR), cosmos_input(CosmosUnstakingInput))


class TestCosmosTx:
    """Tests for sign docs, signatures and TxRaw."""

    def test_sha256_sighash(self):
        tx = CosmosBuilder(ATOM).transfer(transfer(), cosmos_input())
        assert tx.sighashes() == [hashlib.sha256(tx.sign_doc()).digest()]
        assert b"cosmoshub-4" in tx.sign_doc()

    def test_keccak_sighash_for_injective(self):
        """Injective uses ethsecp256k1 keys and keccak sighashes."""
        args = TransferArgs(
            from_address=bech32_address("inj", bytes(range(20))),
            to_address=bech32_address("inj", bytes(range(20, 40))),
            amount=BlockchainAmount(10**18),
        )
        tx = CosmosBuilder(INJ).transfer(args, cosmos_input(gas_price=160_000_000.0, chain_id=""))
        assert tx.keccak_sighash
        assert tx.chain_id == "injective-1"
        assert tx.sighashes() == [keccak(tx.sign_doc())]
        assert INJECTIVE_PUBKEY_TYPE.encode() in tx.auth_info_bytes

    def test_evmos_pubkey_type(self):
        args = TransferArgs(
            from_address=bech32_address("evmos", bytes(range(20))),
            to_address=bech32_address("evmos", bytes(range(20, 40))),
            amount=BlockchainAmount(1),
        )
        tx = CosmosBuilder(EVMOS).transfer(args, cosmos_input(gas_price=1.0))
        assert tx.keccak_sighash
        assert ETHERMINT_PUBKEY_TYPE.encode() in tx.auth_info_bytes

    def test_signatures(self):
        """A trailing recovery id is dropped; other lengths are rejected."""
        tx = CosmosBuilder(ATOM).transfer(transfer(), cosmos_input())
        unsigned_hash = tx.hash()
        tx.add_signatures(bytes([7]) * 64 + b"\x01")
        assert tx.get_signatures() == [bytes([7]) * 64]
        assert tx.serialize().endswith(bytes([7]) * 64)
        assert tx.hash() != unsigned_hash
        assert tx.hash() == tx.hash().upper()
        assert len(tx.hash()) == 64
        with pytest.raises(ValidationError):
            tx.add_signatures(bytes(63))
