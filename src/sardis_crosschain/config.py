"""Configuration surface for sardis-crosschain.

Settings come from the environment (prefix ``SARDIS_XC_``, nested delimiter
``__``) or a ``.env`` file. Per-chain overrides are keyed by native asset::

    SARDIS_XC_CHAINS__ETH__URL=https://rpc.example
    SARDIS_XC_CHAINS__ETH__CHAIN_GAS_MULTIPLIER=1.2
"""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .assets import ChainConfig, StakingConfig
from .blockchains import Blockchain, NativeAsset
from .exceptions import ValidationError

logger = logging.getLogger(__name__)


DEFAULT_CHAINS: dict[NativeAsset, ChainConfig] = {
    NativeAsset.BTC: ChainConfig(
        chain=NativeAsset.BTC,
        driver=Blockchain.BITCOIN,
        decimals=8,
        explorer_url="https://mempool.space",
    ),
    NativeAsset.BCH: ChainConfig(
        chain=NativeAsset.BCH,
        driver=Blockchain.BITCOIN_CASH,
        decimals=8,
        chain_prefix="bitcoincash",
        explorer_url="https://blockchair.com/bitcoin-cash",
    ),
    NativeAsset.LTC: ChainConfig(
        chain=NativeAsset.LTC,
        driver=Blockchain.BITCOIN,
        decimals=8,
        explorer_url="https://blockchair.com/litecoin",
    ),
    NativeAsset.DOGE: ChainConfig(
        chain=NativeAsset.DOGE,
        driver=Blockchain.BITCOIN_LEGACY,
        decimals=8,
        explorer_url="https://blockchair.com/dogecoin",
    ),
    NativeAsset.ETH: ChainConfig(
        chain=NativeAsset.ETH,
        driver=Blockchain.EVM,
        url="https://ethereum-rpc.publicnode.com",
        decimals=18,
        chain_id=1,
        explorer_url="https://etherscan.io",
    ),
    NativeAsset.MATIC: ChainConfig(
        chain=NativeAsset.MATIC,
        driver=Blockchain.EVM,
        url="https://polygon-rpc.com",
        decimals=18,
        chain_id=137,
        chain_max_gas_price=500,
        explorer_url="https://polygonscan.com",
    ),
    NativeAsset.BNB: ChainConfig(
        chain=NativeAsset.BNB,
        driver=Blockchain.EVM_LEGACY,
        url="https://bsc-dataseed.bnbchain.org",
        decimals=18,
        chain_id=56,
        explorer_url="https://bscscan.com",
    ),
    NativeAsset.ATOM: ChainConfig(
        chain=NativeAsset.ATOM,
        driver=Blockchain.COSMOS,
        decimals=6,
        chain_id_str="cosmoshub-4",
        chain_prefix="cosmos",
        chain_coin="uatom",
        gas_coin="uatom",
        chain_min_gas_price=0.0025,
        explorer_url="https://www.mintscan.io/cosmos",
    ),
    NativeAsset.INJ: ChainConfig(
        chain=NativeAsset.INJ,
        driver=Blockchain.COSMOS,
        decimals=18,
        chain_id_str="injective-1",
        chain_prefix="inj",
        chain_coin="inj",
        gas_coin="inj",
        explorer_url="https://www.mintscan.io/injective",
    ),
    NativeAsset.EVMOS: ChainConfig(
        chain=NativeAsset.EVMOS,
        driver=Blockchain.EVMOS,
        decimals=18,
        chain_id_str="evmos_9001-2",
        chain_prefix="evmos",
        chain_coin="aevmos",
        gas_coin="aevmos",
        explorer_url="https://www.mintscan.io/evmos",
    ),
    NativeAsset.SOL: ChainConfig(
        chain=NativeAsset.SOL,
        driver=Blockchain.SOLANA,
        url="https://api.mainnet-beta.solana.com",
        decimals=9,
        explorer_url="https://explorer.solana.com",
    ),
    NativeAsset.TRX: ChainConfig(
        chain=NativeAsset.TRX,
        driver=Blockchain.TRON,
        url="https://api.trongrid.io",
        decimals=6,
        explorer_url="https://tronscan.org",
    ),
    NativeAsset.TON: ChainConfig(
        chain=NativeAsset.TON,
        driver=Blockchain.TON,
        decimals=9,
        explorer_url="https://tonviewer.com",
    ),
}


class ChainOverride(BaseModel):
    """Fields of a default chain that deployments commonly change."""
    url: Optional[str] = None
    chain_gas_multiplier: Optional[float] = None
    chain_max_gas_price: Optional[float] = None
    chain_min_gas_price: Optional[float] = None
    chain_transfer_tax: Optional[float] = None
    explorer_url: Optional[str] = None
    staking: Optional[StakingConfig] = None


class CrosschainSettings(BaseSettings):
    """Main sardis-crosschain configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SARDIS_XC_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    # Environment
    environment: Literal["dev", "sandbox", "prod"] = "dev"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False

    # Client collaborators
    rpc_timeout_seconds: float = Field(default=30.0, gt=0)

    # Per-chain overrides keyed by native asset symbol
    chains: dict[str, ChainOverride] = Field(default_factory=dict)

    @field_validator("chains", mode="before")
    @classmethod
    def normalize_chain_keys(cls, v: Any) -> Any:
        """Environment keys arrive lowercased; chain symbols are uppercase."""
        if isinstance(v, dict):
            return {str(k).upper(): val for k, val in v.items()}
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    def chain_config(self, chain: NativeAsset | str) -> ChainConfig:
        """Default chain config for ``chain`` with any overrides applied."""
        try:
            native = NativeAsset(str(getattr(chain, "value", chain)).upper())
        except ValueError as exc:
            raise ValidationError(f"unknown chain: {chain}", field="chain") from exc
        base = DEFAULT_CHAINS[native]
        override = self.chains.get(native.value)
        if override is None:
            return base
        update = {name: value for name, value in override if value is not None}
        logger.debug("Applying overrides to %s: %s", native.value, sorted(update))
        return base.model_copy(update=update)

    def all_chains(self) -> list[ChainConfig]:
        return [self.chain_config(native) for native in DEFAULT_CHAINS]


@lru_cache
def get_settings() -> CrosschainSettings:
    """Get cached settings instance."""
    return CrosschainSettings()


__all__ = [
    "DEFAULT_CHAINS",
    "ChainOverride",
    "CrosschainSettings",
    "get_settings",
]
