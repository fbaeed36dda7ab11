"""
Tests for sardis_crosschain.factory.
"""
from __future__ import annotations

import httpx
import pytest

from sardis_crosschain.blockchains import NativeAsset
from sardis_crosschain.config import CrosschainSettings
from sardis_crosschain.drivers.bitcoin import BitcoinBuilder, BitcoinTxInput
from sardis_crosschain.drivers.cosmos import CosmosBuilder, CosmosTxInput
from sardis_crosschain.drivers.evm import EvmBuilder, EvmClient, EvmLegacyBuilder, EvmTxInput
from sardis_crosschain.drivers.solana import SolanaBuilder, SolanaClient
from sardis_crosschain.drivers.ton import TonTxInput
from sardis_crosschain.drivers.tron import TronBuilder
from sardis_crosschain.exceptions import InvalidAddressError, NotSupportedError
from sardis_crosschain.factory import CrosschainFactory, create_factory
from sardis_crosschain.registry import TxInputRegistry


@pytest.fixture
def factory():
    return CrosschainFactory(settings=CrosschainSettings())


class TestBuilders:
    @pytest.mark.parametrize(
        "chain,builder_type",
        [
            ("BTC", BitcoinBuilder),
            ("BCH", BitcoinBuilder),
            ("DOGE", BitcoinBuilder),
            ("ETH", EvmBuilder),
            ("BNB", EvmLegacyBuilder),
            ("ATOM", CosmosBuilder),
            ("EVMOS", CosmosBuilder),
            ("SOL", SolanaBuilder),
            ("TRX", TronBuilder),
        ],
    )
    def test_new_builder(self, factory, chain, builder_type):
        builder = factory.new_builder(chain)
        assert type(builder) is builder_type
        assert builder.chain.chain.value == chain

    def test_no_ton_builder(self, factory):
        with pytest.raises(NotSupportedError):
            factory.new_builder(NativeAsset.TON)

    @pytest.mark.parametrize("chain", ["ETH", "ATOM", "TRX"])
    def test_staking_builder(self, factory, chain):
        assert factory.new_staking_builder(chain) is not None

    @pytest.mark.parametrize("chain", ["BTC", "BNB", "SOL", "TON"])
    def test_staking_not_supported(self, factory, chain):
        with pytest.raises(NotSupportedError):
            factory.new_staking_builder(chain)


class TestInputs:
    @pytest.mark.parametrize(
        "chain,input_type",
        [
            ("LTC", BitcoinTxInput),
            ("BCH", BitcoinTxInput),
            ("ETH", EvmTxInput),
            ("INJ", CosmosTxInput),
            ("EVMOS", CosmosTxInput),
            ("TON", TonTxInput),
        ],
    )
    def test_new_tx_input(self, factory, chain, input_type):
        assert type(factory.new_tx_input(chain)) is input_type

    def test_marshal_round_trip(self, factory):
        tx_input = EvmTxInput(nonce=12, chain_id=1)
        assert factory.unmarshal_tx_input(factory.marshal_tx_input(tx_input)) == tx_input

    def test_registry_is_frozen(self):
        registry = TxInputRegistry()
        registry.register_base(EvmTxInput)
        factory = CrosschainFactory(settings=CrosschainSettings(), registry=registry)
        assert factory.registry.frozen


class TestClients:
    def test_new_client(self, factory):
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        assert isinstance(factory.new_client("ETH", http_client=http_client), EvmClient)
        assert isinstance(factory.new_client("BNB", http_client=http_client), EvmClient)
        assert isinstance(factory.new_client("SOL", http_client=http_client), SolanaClient)

    def test_no_client(self, factory):
        with pytest.raises(NotSupportedError):
            factory.new_client("BTC")


class TestSettings:
    def test_overrides_reach_builders(self):
        settings = CrosschainSettings(chains={"ETH": {"chain_max_gas_price": 20}})
        builder = CrosschainFactory(settings=settings).new_builder("ETH")
        assert builder.chain.chain_max_gas_price == 20

    def test_validate_address(self, factory):
        factory.validate_address("ETH", "0x1234567890123456789012345678901234567890")
        with pytest.raises(InvalidAddressError):
            factory.validate_address("ETH", "nope")

    def test_create_factory(self):
        factory = create_factory(CrosschainSettings(), configure_logging=False)
        assert factory.registry.frozen
        assert len(factory.registry.base_types()) == 7
