"""Cosmos SDK transactions: x/bank, CW20 and x/staking."""
from .builder import CosmosBuilder
from .tx import CosmosTx
from .tx_input import (
    CosmosAssetType,
    CosmosStakingInput,
    CosmosTxInput,
    CosmosUnstakingInput,
    CosmosWithdrawInput,
)

BASE_INPUTS = (CosmosTxInput,)
VARIANT_INPUTS = (CosmosStakingInput, CosmosUnstakingInput, CosmosWithdrawInput)

__all__ = [
    "CosmosBuilder",
    "CosmosTx",
    "CosmosAssetType",
    "CosmosTxInput",
    "CosmosStakingInput",
    "CosmosUnstakingInput",
    "CosmosWithdrawInput",
    "BASE_INPUTS",
    "VARIANT_INPUTS",
]
