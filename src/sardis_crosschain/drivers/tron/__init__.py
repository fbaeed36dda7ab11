"""Tron transactions: TRX, TRC-20 and Stake 2.0 resources."""
from .builder import TronBuilder
from .tx import TronTx
from .tx_input import (
    Resource,
    TronStakingInput,
    TronTxInput,
    TronUnstakingInput,
    TronWithdrawInput,
)

BASE_INPUTS = (TronTxInput,)
VARIANT_INPUTS = (TronStakingInput, TronUnstakingInput, TronWithdrawInput)

__all__ = [
    "Resource",
    "TronBuilder",
    "TronTx",
    "TronTxInput",
    "TronStakingInput",
    "TronUnstakingInput",
    "TronWithdrawInput",
    "BASE_INPUTS",
    "VARIANT_INPUTS",
]
