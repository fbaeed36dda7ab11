"""Composition root: settings, registry, builders and clients per chain."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional, Union

import httpx

from .assets import ChainConfig
from .blockchains import Blockchain, NativeAsset
from .builder import StakingBuilder, TxBuilder
from .client import Client
from .config import CrosschainSettings, get_settings
from .drivers.bitcoin import BitcoinBuilder
from .drivers.cosmos import CosmosBuilder
from .drivers.evm import EvmBuilder, EvmClient, EvmLegacyBuilder
from .drivers.solana import SolanaBuilder, SolanaClient
from .drivers.tron import TronBuilder
from .exceptions import NotSupportedError
from .logging_utils import setup_logging
from .registry import Payload, TxInputRegistry, default_registry
from .tx_input import TxInput
from .validation import validate_address

logger = logging.getLogger(__name__)

ChainLike = Union[ChainConfig, NativeAsset, str]

_BUILDERS: dict[Blockchain, type[TxBuilder]] = {
    Blockchain.BITCOIN: BitcoinBuilder,
    Blockchain.BITCOIN_CASH: BitcoinBuilder,
    Blockchain.BITCOIN_LEGACY: BitcoinBuilder,
    Blockchain.EVM: EvmBuilder,
    Blockchain.EVM_LEGACY: EvmLegacyBuilder,
    Blockchain.COSMOS: CosmosBuilder,
    Blockchain.EVMOS: CosmosBuilder,
    Blockchain.SOLANA: SolanaBuilder,
    Blockchain.TRON: TronBuilder,
}

_CLIENTS: dict[Blockchain, type] = {
    Blockchain.EVM: EvmClient,
    Blockchain.EVM_LEGACY: EvmClient,
    Blockchain.SOLANA: SolanaClient,
}


class CrosschainFactory:
    """Hands out per-chain collaborators built from one settings object.

    The registry is frozen before the factory is returned, so concurrent
    callers only ever read it.
    """

    def __init__(
        self,
        settings: Optional[CrosschainSettings] = None,
        registry: Optional[TxInputRegistry] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.registry = registry or default_registry()
        if not self.registry.frozen:
            self.registry.freeze()

    def chain(self, chain: ChainLike) -> ChainConfig:
        if isinstance(chain, ChainConfig):
            return chain
        return self.settings.chain_config(chain)

    def new_tx_input(self, chain: ChainLike) -> TxInput:
        return self.registry.new_tx_input(self.chain(chain).driver)

    def new_builder(self, chain: ChainLike) -> TxBuilder:
        config = self.chain(chain)
        builder_type = _BUILDERS.get(config.driver)
        if builder_type is None:
            raise NotSupportedError("transaction building", chain=config.chain.value)
        return builder_type(config)

    def new_staking_builder(self, chain: ChainLike) -> StakingBuilder:
        config = self.chain(chain)
        builder_type = _BUILDERS.get(config.driver)
        if builder_type is None or not issubclass(builder_type, StakingBuilder):
            raise NotSupportedError("staking", chain=config.chain.value)
        return builder_type(config)

    def new_client(self, chain: ChainLike, http_client: Optional[httpx.AsyncClient] = None) -> Client:
        config = self.chain(chain)
        client_type = _CLIENTS.get(config.driver)
        if client_type is None:
            raise NotSupportedError("network client", chain=config.chain.value)
        return client_type(config, timeout=self.settings.rpc_timeout_seconds, http_client=http_client)

    def validate_address(self, chain: ChainLike, address: str) -> None:
        validate_address(self.chain(chain), address)

    def marshal_tx_input(self, tx_input: TxInput) -> bytes:
        return self.registry.marshal_tx_input(tx_input)

    def unmarshal_tx_input(self, data: Payload) -> TxInput:
        return self.registry.unmarshal_tx_input(data)


def create_factory(
    settings: Optional[CrosschainSettings] = None,
    configure_logging: bool = True,
) -> CrosschainFactory:
    """Build a factory, optionally installing logging from the settings."""
    settings = settings or get_settings()
    if configure_logging:
        setup_logging(settings.log_level, json_format=settings.log_json)
    factory = CrosschainFactory(settings)
    logger.info(
        "Crosschain factory ready (environment=%s, drivers=%d)",
        settings.environment,
        len(factory.registry.base_types()),
    )
    return factory


@lru_cache
def get_factory() -> CrosschainFactory:
    return create_factory()


__all__ = ["CrosschainFactory", "create_factory", "get_factory"]
