"""Chain-agnostic transaction construction: inputs, builders and clients."""

from .amount import BlockchainAmount, HumanAmount, multiply_by_float
from .assets import ChainConfig, StakingConfig, TokenAssetConfig
from .blockchains import (
    Blockchain,
    NativeAsset,
    StakingCapability,
    StakingVariant,
    TxVariantInputType,
)
from .builder import StakeArgs, StakingBuilder, TransferArgs, TxBuilder
from .client import Client, ClientError
from .config import DEFAULT_CHAINS, CrosschainSettings, get_settings
from .exceptions import (
    AmountParseError,
    BroadcastError,
    CrosschainException,
    DuplicateRegistrationError,
    InsufficientFundsError,
    InvalidAddressError,
    NotSupportedError,
    RegistryFrozenError,
    RPCError,
    TxInputTypeMismatchError,
    UnknownTxInputTypeError,
    UnsupportedAssetError,
    ValidationError,
)
from .factory import CrosschainFactory, create_factory, get_factory
from .logging_utils import setup_logging
from .registry import TxInputRegistry, build_registry, default_registry
from .tx import Tx
from .tx_input import GasFeePriority, TxInput, TxVariantInput
from .validation import count_32_eth_chunks, validate_address

__version__ = "0.1.0"

__all__ = [
    "BlockchainAmount",
    "HumanAmount",
    "multiply_by_float",
    "ChainConfig",
    "StakingConfig",
    "TokenAssetConfig",
    "Blockchain",
    "NativeAsset",
    "StakingCapability",
    "StakingVariant",
    "TxVariantInputType",
    "StakeArgs",
    "StakingBuilder",
    "TransferArgs",
    "TxBuilder",
    "Client",
    "ClientError",
    "DEFAULT_CHAINS",
    "CrosschainSettings",
    "get_settings",
    "AmountParseError",
    "BroadcastError",
    "CrosschainException",
    "DuplicateRegistrationError",
    "InsufficientFundsError",
    "InvalidAddressError",
    "NotSupportedError",
    "RegistryFrozenError",
    "RPCError",
    "TxInputTypeMismatchError",
    "UnknownTxInputTypeError",
    "UnsupportedAssetError",
    "ValidationError",
    "CrosschainFactory",
    "create_factory",
    "get_factory",
    "setup_logging",
    "TxInputRegistry",
    "build_registry",
    "default_registry",
    "Tx",
    "GasFeePriority",
    "TxInput",
    "TxVariantInput",
    "count_32_eth_chunks",
    "validate_address",
]
