"""Client collaborator contract: fetch inputs, broadcast, estimate fees."""
from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable

from .amount import BlockchainAmount
from .assets import ChainConfig
from .builder import TransferArgs
from .tx import Tx
from .tx_input import TxInput


class ClientError(str, Enum):
    """Broad classification of node errors for retry decisions."""
    NETWORK_ERROR = "network_error"
    TRANSACTION_EXISTS = "transaction_exists"
    TRANSACTION_FAILURE = "transaction_failure"
    UNKNOWN_ERROR = "unknown_error"


def classify_message(
    message: str,
    *,
    failure: Iterable[str] = (),
    network: Iterable[str] = (),
    exists: Iterable[str] = (),
) -> ClientError:
    """Classify an error message by case-insensitive substring match.

    Patterns are checked in failure, network, exists order.
    """
    msg = message.lower()
    if any(p in msg for p in failure):
        return ClientError.TRANSACTION_FAILURE
    if any(p in msg for p in network):
        return ClientError.NETWORK_ERROR
    if any(p in msg for p in exists):
        return ClientError.TRANSACTION_EXISTS
    return ClientError.UNKNOWN_ERROR


class Client(ABC):
    """Network-facing collaborator for one chain.

    Implementations own their HTTP transport and retry policy; the core never
    retries anything itself.
    """

    def __init__(self, chain: ChainConfig) -> None:
        self.chain = chain

    @abstractmethod
    async def fetch_transfer_input(self, args: TransferArgs) -> TxInput:
        """Fetch everything the builder needs for ``args``."""

    @abstractmethod
    async def broadcast(self, tx: Tx) -> None:
        """Submit a signed transaction.

        Raises:
            BroadcastError: With a ClientError reason when the node rejects it.
        """

    @abstractmethod
    async def estimate_fee(self, args: TransferArgs) -> BlockchainAmount:
        """Upper bound of the fee a transfer for ``args`` would pay."""

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


__all__ = ["Client", "ClientError", "classify_message"]
