"""EVM transactions: EIP-1559, legacy EIP-155 and validator staking."""
from .builder import EvmBuilder, EvmLegacyBuilder
from .client import EvmClient
from .tx import EvmLegacyTx, EvmTx
from .tx_input import BatchDepositInput, EvmLegacyTxInput, EvmTxInput, ExitRequestInput

BASE_INPUTS = (EvmTxInput, EvmLegacyTxInput)
VARIANT_INPUTS = (BatchDepositInput, ExitRequestInput)

__all__ = [
    "EvmBuilder",
    "EvmLegacyBuilder",
    "EvmClient",
    "EvmTx",
    "EvmLegacyTx",
    "EvmTxInput",
    "EvmLegacyTxInput",
    "BatchDepositInput",
    "ExitRequestInput",
    "BASE_INPUTS",
    "VARIANT_INPUTS",
]
