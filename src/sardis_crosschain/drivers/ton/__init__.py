"""TON wallet inputs."""
from .tx_input import AccountStatus, TonTxInput

BASE_INPUTS = (TonTxInput,)
VARIANT_INPUTS = ()

__all__ = ["AccountStatus", "TonTxInput", "BASE_INPUTS", "VARIANT_INPUTS"]
