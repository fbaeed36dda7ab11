"""Transaction-input contract shared by every driver.

A TxInput carries everything a builder needs to assemble one transaction:
unspent outputs and a fee rate on UTXO chains, a nonce and gas pricing on
account chains, a recent blockhash on Solana, a block reference on Tron.
Clients create one per request and hand it to the builder, which consumes it.

Inputs are pydantic models so they can be persisted and rehydrated through
the tagged envelope in :mod:`sardis_crosschain.registry`.
"""
from __future__ import annotations

import base64
from abc import ABC, abstractmethod
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, ClassVar, Union

from pydantic import BaseModel, BeforeValidator, ConfigDict, PlainSerializer

from .amount import BlockchainAmount, multiply_by_float
from .blockchains import Blockchain, TxVariantInputType
from .exceptions import ValidationError


def _decode_base64(value: Any) -> Any:
    if isinstance(value, str):
        return base64.b64decode(value)
    return value


# bytes that travel as standard base64 strings in the JSON envelope
EncodedBytes = Annotated[
    bytes,
    BeforeValidator(_decode_base64),
    PlainSerializer(lambda b: base64.b64encode(b).decode("ascii"), return_type=str, when_used="json"),
]


class GasFeePriority(str, Enum):
    """Caller-selected fee tier."""
    LOW = "low"
    DEFAULT = "default"
    MARKET = "market"
    AGGRESSIVE = "aggressive"
    VERY_AGGRESSIVE = "very_aggressive"


_PRIORITY_MULTIPLIERS: dict[GasFeePriority, Decimal] = {
    GasFeePriority.LOW: Decimal("0.7"),
    GasFeePriority.DEFAULT: Decimal("1.0"),
    GasFeePriority.MARKET: Decimal("1.0"),
    GasFeePriority.AGGRESSIVE: Decimal("1.5"),
    GasFeePriority.VERY_AGGRESSIVE: Decimal("2.0"),
}

PriorityLike = Union[GasFeePriority, str, Decimal]


def gas_priority_multiplier(priority: PriorityLike) -> Decimal:
    """Resolve a named tier or a custom positive decimal to a multiplier."""
    if isinstance(priority, GasFeePriority):
        return _PRIORITY_MULTIPLIERS[priority]
    if isinstance(priority, str):
        try:
            return _PRIORITY_MULTIPLIERS[GasFeePriority(priority.strip().lower())]
        except ValueError:
            pass
        try:
            priority = Decimal(priority.strip())
        except InvalidOperation as exc:
            raise ValidationError(
                f"invalid gas priority: {priority!r}", field="priority"
            ) from exc
    if not isinstance(priority, Decimal) or not priority.is_finite() or priority <= 0:
        raise ValidationError(f"invalid gas priority: {priority!r}", field="priority")
    return priority


def apply_priority(amount: BlockchainAmount, priority: PriorityLike) -> BlockchainAmount:
    """Scale an amount by the priority's multiplier."""
    return multiply_by_float(amount, float(gas_priority_multiplier(priority)))


class TxInput(BaseModel, ABC):
    """Base class for every per-driver transaction input."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    driver: ClassVar[Blockchain]

    def get_blockchain(self) -> Blockchain:
        return self.driver

    @abstractmethod
    def independent_of(self, other: "TxInput") -> bool:
        """True if both inputs can be used concurrently without interference."""

    @abstractmethod
    def safe_from_double_send(self, *others: "TxInput") -> bool:
        """True if building from this input cannot conflict with ``others``.

        Advisory: consulted by retry logic, never enforced by builders.
        """

    @abstractmethod
    def set_gas_fee_priority(self, priority: PriorityLike) -> None:
        """Scale the input's fee pricing by a priority tier."""


def same_tx_input_types(expected: TxInput, *others: TxInput) -> bool:
    """True if every input in ``others`` has exactly the type of ``expected``."""
    return all(type(other) is type(expected) for other in others)


# =============================================================================
# Optional capabilities
# =============================================================================

class TxInputWithPublicKey(ABC):
    @abstractmethod
    def set_public_key(self, public_key: bytes) -> None: ...


class TxInputWithMemo(ABC):
    @abstractmethod
    def set_memo(self, memo: str) -> None: ...


class TxInputWithAmount(ABC):
    @abstractmethod
    def set_amount(self, amount: BlockchainAmount) -> None: ...


class TxInputWithUnix(ABC):
    @abstractmethod
    def set_unix(self, unix_seconds: int) -> None: ...


# =============================================================================
# Staking variants
# =============================================================================

class TxVariantInput(TxInput):
    """An input shape for one staking capability of a driver."""

    variant_type: ClassVar[TxVariantInputType]

    def get_variant(self) -> TxVariantInputType:
        return self.variant_type


class StakeTxInput(ABC):
    """Marker: the variant can build a stake transaction."""

    def staking(self) -> None:
        return None


class UnstakeTxInput(ABC):
    """Marker: the variant can build an unstake transaction."""

    def unstaking(self) -> None:
        return None


class WithdrawTxInput(ABC):
    """Marker: the variant can build a withdraw transaction."""

    def withdrawing(self) -> None:
        return None


STAKING_MARKERS = (StakeTxInput, UnstakeTxInput, WithdrawTxInput)


__all__ = [
    "EncodedBytes",
    "GasFeePriority",
    "PriorityLike",
    "apply_priority",
    "gas_priority_multiplier",
    "same_tx_input_types",
    "TxInput",
    "TxInputWithPublicKey",
    "TxInputWithMemo",
    "TxInputWithAmount",
    "TxInputWithUnix",
    "TxVariantInput",
    "StakeTxInput",
    "UnstakeTxInput",
    "WithdrawTxInput",
    "STAKING_MARKERS",
]
