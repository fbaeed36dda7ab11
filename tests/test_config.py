"""
Tests for sardis_crosschain.config.

Tests cover:
- Defaults and environment overrides
- Per-chain overrides keyed by native asset
- Validation of log level and timeouts
"""
from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from sardis_crosschain.blockchains import Blockchain, NativeAsset
from sardis_crosschain.config import DEFAULT_CHAINS, CrosschainSettings, get_settings
from sardis_crosschain.exceptions import ValidationError


class TestDefaults:
    """Tests for the default chain table."""

    def test_every_native_asset_has_a_chain(self):
        assert set(DEFAULT_CHAINS) == set(NativeAsset)

    def test_drivers(self):
        assert DEFAULT_CHAINS[NativeAsset.BCH].driver == Blockchain.BITCOIN_CASH
        assert DEFAULT_CHAINS[NativeAsset.BNB].driver == Blockchain.EVM_LEGACY
        assert DEFAULT_CHAINS[NativeAsset.EVMOS].driver == Blockchain.EVMOS

    def test_settings_defaults(self):
        settings = CrosschainSettings()
        assert settings.environment == "dev"
        assert settings.rpc_timeout_seconds == 30.0
        assert settings.chain_config("ETH") == DEFAULT_CHAINS[NativeAsset.ETH]


class TestOverrides:
    """Tests for per-chain overrides."""

    def test_constructor_overrides(self):
        """Lower-case keys are normalized to asset symbols."""
        settings = CrosschainSettings(chains={"eth": {"url": "https://rpc.example", "chain_gas_multiplier": 1.2}})
        eth = settings.chain_config(NativeAsset.ETH)
        assert eth.url == "https://rpc.example"
        assert eth.chain_gas_multiplier == 1.2
        assert eth.chain_id == 1

    def test_environment_overrides(self, monkeypatch):
        """Nested environment variables reach the chain table."""
        monkeypatch.setenv("SARDIS_XC_CHAINS__SOL__URL", "https://solana.example")
        monkeypatch.setenv("SARDIS_XC_CHAINS__SOL__CHAIN_MAX_GAS_PRICE", "1000")
        monkeypatch.setenv("SARDIS_XC_RPC_TIMEOUT_SECONDS", "5")
        settings = get_settings()
        sol = settings.chain_config("sol")
        assert sol.url == "https://solana.example"
        assert sol.chain_max_gas_price == 1000
        assert settings.rpc_timeout_seconds == 5

    def test_all_chains(self):
        settings = CrosschainSettings(chains={"TRX": {"chain_max_gas_price": 100}})
        chains = {config.chain: config for config in settings.all_chains()}
        assert chains[NativeAsset.TRX].chain_max_gas_price == 100
        assert chains[NativeAsset.BTC] == DEFAULT_CHAINS[NativeAsset.BTC]

    def test_unknown_chain(self):
        with pytest.raises(ValidationError):
            CrosschainSettings().chain_config("XYZ")


class TestValidation:
    def test_log_level_normalized(self):
        assert CrosschainSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(PydanticValidationError):
            CrosschainSettings(log_level="verbose")

    def test_timeout_must_be_positive(self):
        with pytest.raises(PydanticValidationError):
            CrosschainSettings(rpc_timeout_seconds=0)

    def test_settings_cached(self):
        assert get_settings() is get_settings()
