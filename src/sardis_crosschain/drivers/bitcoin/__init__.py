"""Bitcoin, Bitcoin Cash, Litecoin and Dogecoin transactions."""
from .builder import BitcoinBuilder
from .tx import BitcoinTx
from .tx_input import BitcoinTxInput, Outpoint, Output

BASE_INPUTS = (BitcoinTxInput,)
VARIANT_INPUTS = ()

__all__ = [
    "BitcoinBuilder",
    "BitcoinTx",
    "BitcoinTxInput",
    "Outpoint",
    "Output",
    "BASE_INPUTS",
    "VARIANT_INPUTS",
]
