"""
Tests for the EVM driver.

Tests cover:
- Tip and gas price caps
- Native and ERC-20 payloads
- Batch deposit and exit request staking calldata
- Signature attachment and serialization
"""
from __future__ import annotations

import pytest
import rlp
from eth_abi import decode
from eth_utils import keccak, to_canonical_address

from sardis_crosschain.amount import BlockchainAmount
from sardis_crosschain.assets import StakingConfig, TokenAssetConfig
from sardis_crosschain.blockchains import NativeAsset
from sardis_crosschain.builder import StakeArgs, TransferArgs
from sardis_crosschain.config import DEFAULT_CHAINS
from sardis_crosschain.drivers.evm import (
    BatchDepositInput,
    EvmBuilder,
    EvmLegacyBuilder,
    EvmLegacyTxInput,
    EvmTxInput,
    ExitRequestInput,
)
from sardis_crosschain.drivers.evm import abi
from sardis_crosschain.drivers.evm.builder import gwei_to_wei
from sardis_crosschain.exceptions import InvalidAddressError, NotSupportedError, ValidationError

ETH = DEFAULT_CHAINS[NativeAsset.ETH]
MATIC = DEFAULT_CHAINS[NativeAsset.MATIC]
BNB = DEFAULT_CHAINS[NativeAsset.BNB]

SENDER = "0x1234567890123456789012345678901234567890"
RECIPIENT = "0xabcdefabcdefabcdefabcdefabcdefabcdefabcd"
TOKEN = "0x00000000000000000000000000000000000000aa"
DEPOSIT_CONTRACT = "0x00000000000000000000000000000000000000bb"
EXIT_CONTRACT = "0x00000000000000000000000000000000000000cc"

ONE_ETH = 10**18


def staking_chain():
    return ETH.model_copy(
        update={"staking": StakingConfig(stake_contract=DEPOSIT_CONTRACT, unstake_contract=EXIT_CONTRACT)}
    )


def dynamic_input(**overrides) -> EvmTxInput:
    fields = dict(
        nonce=3,
        chain_id=1,
        gas_fee_cap=gwei_to_wei(30),
        gas_tip_cap=gwei_to_wei(2),
    )
    fields.update(overrides)
    return EvmTxInput(**fields)


class TestEvmBuilder:
    """Tests for EIP-1559 transfers."""

    def test_native_transfer(self):
        """Should default the gas limit and carry value to the recipient."""
        tx = EvmBuilder(ETH).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(ONE_ETH)),
            dynamic_input(),
        )
        assert tx.gas_limit == 21_000
        assert tx.to == to_canonical_address(RECIPIENT)
        assert tx.value == ONE_ETH
        assert tx.data == b""
        assert tx.max_priority_fee_per_gas == 2 * 10**9
        assert tx.max_fee_per_gas == 30 * 10**9

    def test_tip_cap_limited_to_default(self):
        """Tips above the 5 gwei default are capped."""
        tx = EvmBuilder(ETH).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(1)),
            dynamic_input(gas_tip_cap=gwei_to_wei(50)),
        )
        assert tx.max_priority_fee_per_gas == 5 * 10**9

    def test_tip_cap_uses_chain_maximum(self):
        """A configured chain maximum replaces the default cap."""
        tx = EvmBuilder(MATIC).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(1)),
            dynamic_input(gas_tip_cap=gwei_to_wei(50), gas_fee_cap=gwei_to_wei(100)),
        )
        assert tx.max_priority_fee_per_gas == 50 * 10**9

    def test_fee_cap_never_below_tip(self):
        tx = EvmBuilder(ETH).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(1)),
            dynamic_input(gas_fee_cap=gwei_to_wei(1), gas_tip_cap=gwei_to_wei(3)),
        )
        assert tx.max_fee_per_gas == tx.max_priority_fee_per_gas == 3 * 10**9

    def test_token_transfer(self):
        """ERC-20 transfers call the token contract with zero value."""
        usdc = TokenAssetConfig(contract=TOKEN, decimals=6, symbol="USDC", chain=ETH)
        tx = EvmBuilder(ETH).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(1_500_000), asset=usdc),
            dynamic_input(),
        )
        assert tx.to == to_canonical_address(TOKEN)
        assert tx.value == 0
        assert tx.gas_limit == 100_000
        assert tx.data[:4] == bytes.fromhex("a9059cbb")
        recipient, amount = decode(["address", "uint256"], tx.data[4:])
        assert recipient.lower() == RECIPIENT
        assert amount == 1_500_000

    def test_explicit_gas_limit_kept(self):
        tx = EvmBuilder(ETH).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(1)),
            dynamic_input(gas_limit=50_000),
        )
        assert tx.gas_limit == 50_000

    def test_invalid_recipient(self):
        with pytest.raises(InvalidAddressError):
            EvmBuilder(ETH).transfer(
                TransferArgs(from_address=SENDER, to_address="0x1234", amount=BlockchainAmount(1)),
                dynamic_input(),
            )

    def test_legacy_input_rejected(self):
        with pytest.raises(ValidationError):
            EvmBuilder(ETH).transfer(
                TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(1)),
                EvmLegacyTxInput(),
            )


class TestEvmTx:
    """Tests for EIP-1559 signing and encoding."""

    def _tx(self):
        return EvmBuilder(ETH).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(ONE_ETH)),
            dynamic_input(),
        )

    def test_sighash_is_keccak_of_typed_payload(self):
        tx = self._tx()
        unsigned = tx.serialize()
        assert unsigned[0] == 0x02
        assert tx.sighashes() == [keccak(unsigned)]

    def test_add_signature(self):
        """Signed encoding appends v, r, s."""
        tx = self._tx()
        signature = (7).to_bytes(32, "big") + (9).to_bytes(32, "big") + bytes([28])
        tx.add_signatures(signature)
        fields = rlp.decode(tx.serialize()[1:])
        assert len(fields) == 12
        assert int.from_bytes(fields[9], "big") == 1
        assert int.from_bytes(fields[10], "big") == 7
        assert int.from_bytes(fields[11], "big") == 9
        assert tx.get_signatures() == [signature]
        assert tx.hash().startswith("0x") and len(tx.hash()) == 66

    def test_bad_signature_length(self):
        with pytest.raises(ValidationError):
            self._tx().add_signatures(bytes(64))


class TestEvmLegacyBuilder:
    """Tests for EIP-155 transfers."""

    def test_native_transfer_eip155(self):
        """Unsigned payload carries chain id, 0, 0; signed v includes chain id."""
        tx = EvmLegacyBuilder(BNB).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(5)),
            EvmLegacyTxInput(nonce=1, gas_price=BlockchainAmount(3 * 10**9)),
        )
        assert tx.chain_id == 56
        fields = rlp.decode(tx.serialize())
        assert int.from_bytes(fields[6], "big") == 56
        assert tx.sighashes() == [keccak(tx.serialize())]

        tx.add_signatures(bytes([1]) * 32 + bytes([2]) * 32 + bytes([0]))
        fields = rlp.decode(tx.serialize())
        assert int.from_bytes(fields[6], "big") == 56 * 2 + 35

    def test_gas_price_capped_by_chain(self):
        chain = BNB.model_copy(update={"chain_max_gas_price": 5})
        tx = EvmLegacyBuilder(chain).transfer(
            TransferArgs(from_address=SENDER, to_address=RECIPIENT, amount=BlockchainAmount(5)),
            EvmLegacyTxInput(gas_price=gwei_to_wei(20)),
        )
        assert tx.gas_price == 5 * 10**9


class TestEvmStaking:
    """Tests for batch deposit and exit request staking."""

    def test_batch_deposit(self):
        """One deposit per 32 ETH with the owner's withdrawal credentials."""
        keys = [bytes([1]) * 48, bytes([2]) * 48]
        sigs = [bytes([3]) * 96, bytes([4]) * 96]
        tx = EvmBuilder(staking_chain()).stake(
            StakeArgs(chain=staking_chain(), from_address=SENDER, amount=BlockchainAmount(64 * ONE_ETH)),
            BatchDepositInput(gas_fee_cap=gwei_to_wei(30), public_keys=keys, signatures=sigs),
        )
        assert tx.to == to_canonical_address(DEPOSIT_CONTRACT)
        assert tx.value == 64 * ONE_ETH
        assert tx.data[:4] == abi.BATCH_DEPOSIT_SELECTOR
        pubkeys, credentials, signatures = decode(["bytes[]", "bytes[]", "bytes[]"], tx.data[4:])
        assert list(pubkeys) == keys
        assert list(signatures) == sigs
        expected = bytes([1]) + bytes(11) + to_canonical_address(SENDER)
        assert list(credentials) == [expected, expected]

    def test_stake_owner_overrides_credentials(self):
        tx = EvmBuilder(staking_chain()).stake(
            StakeArgs(
                chain=staking_chain(),
                from_address=SENDER,
                stake_owner=RECIPIENT,
                amount=BlockchainAmount(32 * ONE_ETH),
            ),
            BatchDepositInput(public_keys=[bytes(48)], signatures=[bytes(96)]),
        )
        _, credentials, _ = decode(["bytes[]", "bytes[]", "bytes[]"], tx.data[4:])
        assert credentials[0].endswith(to_canonical_address(RECIPIENT))

    @pytest.mark.parametrize("amount", [31 * ONE_ETH, 33 * ONE_ETH])
    def test_amount_must_be_32_eth_chunks(self, amount):
        with pytest.raises(ValidationError):
            EvmBuilder(staking_chain()).stake(
                StakeArgs(chain=staking_chain(), from_address=SENDER, amount=BlockchainAmount(amount)),
                BatchDepositInput(public_keys=[bytes(48)], signatures=[bytes(96)]),
            )

    def test_key_count_must_match(self):
        with pytest.raises(ValidationError):
            EvmBuilder(staking_chain()).stake(
                StakeArgs(chain=staking_chain(), from_address=SENDER, amount=BlockchainAmount(64 * ONE_ETH)),
                BatchDepositInput(public_keys=[bytes(48)], signatures=[bytes(96)]),
            )

    def test_missing_contract(self):
        """Chains without a configured deposit contract cannot stake."""
        with pytest.raises(ValidationError):
            EvmBuilder(ETH).stake(
                StakeArgs(chain=ETH, from_address=SENDER, amount=BlockchainAmount(32 * ONE_ETH)),
                BatchDepositInput(public_keys=[bytes(48)], signatures=[bytes(96)]),
            )

    def test_exit_request(self):
        """Exit requests name the first validators that cover the amount."""
        keys = [bytes([i]) * 48 for i in range(1, 4)]
        tx = EvmBuilder(staking_chain()).unstake(
            StakeArgs(chain=staking_chain(), from_address=SENDER, amount=BlockchainAmount(64 * ONE_ETH)),
            ExitRequestInput(public_keys=keys),
        )
        assert tx.to == to_canonical_address(EXIT_CONTRACT)
        assert tx.value == 0
        assert tx.data[:4] == bytes.fromhex("254209ba")
        (requested,) = decode(["bytes[]"], tx.data[4:])
        assert list(requested) == keys[:2]

    def test_exit_request_needs_enough_validators(self):
        with pytest.raises(ValidationError):
            EvmBuilder(staking_chain()).unstake(
                StakeArgs(chain=staking_chain(), from_address=SENDER, amount=BlockchainAmount(96 * ONE_ETH)),
                ExitRequestInput(public_keys=[bytes(48)]),
            )

    def test_withdraw_not_supported(self):
        with pytest.raises(NotSupportedError):
            EvmBuilder(staking_chain()).withdraw(
                StakeArgs(chain=staking_chain(), from_address=SENDER),
                ExitRequestInput(),
            )
