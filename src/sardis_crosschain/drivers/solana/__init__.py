"""Solana transactions: system transfers and SPL tokens."""
from .builder import MAX_TOKEN_TRANSFERS, SolanaBuilder
from .client import SolanaClient
from .tx import SolanaTx
from .tx_input import (
    ExistingStake,
    SolanaStakingInput,
    SolanaTxInput,
    SolanaUnstakingInput,
    SolanaWithdrawInput,
    TokenAccount,
)

BASE_INPUTS = (SolanaTxInput,)
VARIANT_INPUTS = (SolanaStakingInput, SolanaUnstakingInput, SolanaWithdrawInput)

__all__ = [
    "MAX_TOKEN_TRANSFERS",
    "SolanaBuilder",
    "SolanaClient",
    "SolanaTx",
    "ExistingStake",
    "SolanaTxInput",
    "SolanaStakingInput",
    "SolanaUnstakingInput",
    "SolanaWithdrawInput",
    "TokenAccount",
    "BASE_INPUTS",
    "VARIANT_INPUTS",
]
