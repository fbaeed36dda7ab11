"""Asset identity: native chain assets and token assets."""
from __future__ import annotations

from typing import Optional, Protocol, Union, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .blockchains import Blockchain, NativeAsset


@runtime_checkable
class Asset(Protocol):
    """What a builder needs to know about any asset."""

    @property
    def contract(self) -> str: ...

    @property
    def decimals(self) -> int: ...

    def get_chain(self) -> "ChainConfig": ...


class StakingConfig(BaseModel):
    """Contracts used by staking transactions on chains that need them."""
    model_config = ConfigDict(extra="ignore")

    stake_contract: str = ""
    unstake_contract: str = ""
    providers: list[str] = Field(default_factory=list)


class ChainConfig(BaseModel):
    """Native asset of a chain together with its fee configuration.

    ``chain_max_gas_price`` is read in the unit each driver prices gas in:
    gwei on EVM chains, native-denom per gas unit on Cosmos chains,
    micro-lamports per compute unit on Solana and whole TRX of fee limit on
    Tron. Zero means "use the driver default".
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    chain: NativeAsset
    driver: Blockchain
    url: str = ""
    decimals: int = Field(default=0, ge=0)
    chain_id: int = 0
    chain_id_str: str = ""
    chain_prefix: str = ""
    chain_coin: str = ""
    gas_coin: str = ""
    chain_gas_multiplier: float = 0.0
    chain_max_gas_price: float = 0.0
    chain_min_gas_price: float = 0.0
    chain_transfer_tax: float = 0.0
    no_gas_fees: bool = False
    explorer_url: str = ""
    staking: StakingConfig = Field(default_factory=StakingConfig)

    @property
    def contract(self) -> str:
        # native assets are identified by their denom where one exists
        return self.chain_coin

    def get_chain(self) -> "ChainConfig":
        return self

    def __str__(self) -> str:
        return f"{self.chain.value} ({self.driver.value})"


class TokenAssetConfig(BaseModel):
    """A token on a chain: contract address (or denom), decimals and symbol."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    contract: str
    decimals: int = Field(ge=0)
    symbol: str = ""
    # requests may omit the chain; builders bind it with for_chain
    chain: Optional[ChainConfig] = None

    def get_chain(self) -> Optional[ChainConfig]:
        return self.chain

    def for_chain(self, chain: ChainConfig) -> "TokenAssetConfig":
        if self.chain is not None:
            return self
        return self.model_copy(update={"chain": chain})

    def __str__(self) -> str:
        if self.chain is None:
            return self.symbol or self.contract
        return f"{self.symbol or self.contract} on {self.chain.chain.value}"


AnyAsset = Union[ChainConfig, TokenAssetConfig]


__all__ = [
    "Asset",
    "AnyAsset",
    "ChainConfig",
    "StakingConfig",
    "TokenAssetConfig",
]
