"""Lossless amount arithmetic between on-chain integers and human decimals.

BlockchainAmount is the integer a chain expects in a transaction (satoshi,
wei, lamports). HumanAmount is the decimal a person reads (0.5 BTC).
Conversion between the two is exact within the asset's declared decimals:

    blockchain = human * 10 ** decimals

Truncation happens only when a HumanAmount carrying more fractional digits
than `decimals` is converted with to_blockchain().
"""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from functools import total_ordering
from typing import TYPE_CHECKING, Any, Union

from pydantic_core import core_schema

from .exceptions import AmountParseError

if TYPE_CHECKING:
    from .assets import ChainConfig

# Fixed-point precision used when scaling amounts by a float multiplier
MULTIPLIER_PRECISION = 10**6

# Multipliers at or below this are treated as "not configured"
MIN_GAS_MULTIPLIER = 0.01

AmountLike = Union["BlockchainAmount", int]


def _euclid_div(x: int, y: int) -> int:
    # remainder is always non-negative
    if y > 0:
        return x // y
    return -(x // -y)


@total_ordering
class BlockchainAmount:
    """Arbitrary-precision integer amount in the chain's smallest unit."""

    __slots__ = ("_value",)

    def __init__(self, value: int = 0) -> None:
        if isinstance(value, BlockchainAmount):
            value = value._value
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"BlockchainAmount requires an int, got {type(value).__name__}")
        self._value = value

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def from_int(cls, value: int) -> "BlockchainAmount":
        return cls(value)

    @classmethod
    def from_str(cls, value: str) -> "BlockchainAmount":
        """Parse an integer string.

        Plain digits are read as base 10; 0x/0o/0b prefixes select the base.

        Raises:
            AmountParseError: If the string is not an integer.
        """
        if not isinstance(value, str):
            raise AmountParseError(value)
        text = value.strip()
        if not text or "_" in text:
            raise AmountParseError(value)
        try:
            if text.lstrip("+-").isdigit():
                return cls(int(text, 10))
            return cls(int(text, 0))
        except ValueError as exc:
            raise AmountParseError(value) from exc

    @classmethod
    def zero(cls) -> "BlockchainAmount":
        return cls(0)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    @staticmethod
    def _coerce(other: AmountLike) -> int:
        if isinstance(other, BlockchainAmount):
            return other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return other
        raise TypeError(f"cannot combine BlockchainAmount with {type(other).__name__}")

    def add(self, other: AmountLike) -> "BlockchainAmount":
        return BlockchainAmount(self._value + self._coerce(other))

    def sub(self, other: AmountLike) -> "BlockchainAmount":
        return BlockchainAmount(self._value - self._coerce(other))

    def mul(self, other: AmountLike) -> "BlockchainAmount":
        return BlockchainAmount(self._value * self._coerce(other))

    def div(self, other: AmountLike) -> "BlockchainAmount":
        return BlockchainAmount(_euclid_div(self._value, self._coerce(other)))

    def abs(self) -> "BlockchainAmount":
        return BlockchainAmount(abs(self._value))

    def cmp(self, other: AmountLike) -> int:
        o = self._coerce(other)
        return (self._value > o) - (self._value < o)

    def sign(self) -> int:
        return (self._value > 0) - (self._value < 0)

    def is_zero(self) -> bool:
        return self._value == 0

    __add__ = add
    __sub__ = sub
    __mul__ = mul
    __floordiv__ = div

    def __radd__(self, other: int) -> "BlockchainAmount":
        return BlockchainAmount(self._coerce(other) + self._value)

    def __neg__(self) -> "BlockchainAmount":
        return BlockchainAmount(-self._value)

    def __abs__(self) -> "BlockchainAmount":
        return self.abs()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, BlockchainAmount):
            return self._value == other._value
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: AmountLike) -> bool:
        return self._value < self._coerce(other)

    def __hash__(self) -> int:
        return hash(self._value)

    def __int__(self) -> int:
        return self._value

    def __index__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __str__(self) -> str:
        return str(self._value)

    def __repr__(self) -> str:
        return f"BlockchainAmount({self._value})"

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def to_human(self, decimals: int) -> "HumanAmount":
        """Convert to a human decimal by dividing by 10**decimals (exact)."""
        value = Decimal(self._value)
        with localcontext() as ctx:
            ctx.prec = max(28, len(value.as_tuple().digits) + abs(decimals) + 2)
            return HumanAmount(value.scaleb(-decimals))

    def apply_gas_price_multiplier(self, chain: "ChainConfig") -> "BlockchainAmount":
        """Scale by the chain's configured gas multiplier, if any."""
        if chain.chain_gas_multiplier > MIN_GAS_MULTIPLIER:
            return multiply_by_float(self, chain.chain_gas_multiplier)
        return self

    # ------------------------------------------------------------------
    # pydantic integration: decimal string on the wire
    # ------------------------------------------------------------------

    @classmethod
    def _validate(cls, value: Any) -> "BlockchainAmount":
        if isinstance(value, BlockchainAmount):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            text = value.strip()
            if text.lstrip("+-").isdigit():
                return cls(int(text, 10))
        raise ValueError(f"not a valid big integer: {value!r}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )


@total_ordering
class HumanAmount:
    """Arbitrary-precision decimal amount as a person expects to read it."""

    __slots__ = ("_value",)

    def __init__(self, value: Union[Decimal, int]) -> None:
        if isinstance(value, HumanAmount):
            value = value._value
        if isinstance(value, int) and not isinstance(value, bool):
            value = Decimal(value)
        if not isinstance(value, Decimal):
            raise TypeError(f"HumanAmount requires a Decimal, got {type(value).__name__}")
        if not value.is_finite():
            raise AmountParseError(value, kind="decimal")
        self._value = value

    @classmethod
    def from_str(cls, value: str) -> "HumanAmount":
        """Parse a decimal string.

        Raises:
            AmountParseError: If the string is not a finite decimal.
        """
        if not isinstance(value, str):
            raise AmountParseError(value, kind="decimal")
        try:
            parsed = Decimal(value.strip())
        except InvalidOperation as exc:
            raise AmountParseError(value, kind="decimal") from exc
        if not parsed.is_finite():
            raise AmountParseError(value, kind="decimal")
        return cls(parsed)

    @property
    def decimal(self) -> Decimal:
        return self._value

    def to_blockchain(self, decimals: int) -> BlockchainAmount:
        """Raise by 10**decimals, then truncate toward zero."""
        with localcontext() as ctx:
            ctx.prec = max(28, len(self._value.as_tuple().digits) + abs(decimals) + 2)
            raised = self._value.scaleb(decimals)
        return BlockchainAmount(int(raised))

    def div(self, other: "HumanAmount") -> "HumanAmount":
        with localcontext() as ctx:
            ctx.prec = 78
            return HumanAmount(self._value / HumanAmount(other)._value)

    def is_integral(self) -> bool:
        return self._value == self._value.to_integral_value()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, HumanAmount):
            return self._value == other._value
        if isinstance(other, (Decimal, int)) and not isinstance(other, bool):
            return self._value == other
        return NotImplemented

    def __lt__(self, other: "HumanAmount") -> bool:
        return self._value < HumanAmount(other)._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __str__(self) -> str:
        with localcontext() as ctx:
            ctx.prec = max(28, len(self._value.as_tuple().digits) + 2)
            normalized = self._value.normalize()
        if normalized.is_zero():
            return "0"
        return format(normalized, "f")

    def __repr__(self) -> str:
        return f"HumanAmount('{self}')"

    @classmethod
    def _validate(cls, value: Any) -> "HumanAmount":
        if isinstance(value, HumanAmount):
            return value
        if isinstance(value, (Decimal, int)) and not isinstance(value, bool):
            return cls(value)
        if isinstance(value, str):
            try:
                return cls.from_str(value)
            except AmountParseError as exc:
                raise ValueError(exc.message) from exc
        raise ValueError(f"not a valid decimal: {value!r}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                str, when_used="json"
            ),
        )


def multiply_by_float(amount: AmountLike, multiplier: float) -> BlockchainAmount:
    """Scale an amount by a float through a fixed-point intermediate.

    Computes amount * round(multiplier * 10**6) // 10**6 so that common gas
    multipliers (1.2, 1.5) do not drift through binary floating point.
    """
    amount = BlockchainAmount(amount)
    if amount.is_zero():
        return amount
    with localcontext() as ctx:
        ctx.prec = 50
        scaled = (Decimal(str(multiplier)) * MULTIPLIER_PRECISION).quantize(
            Decimal(1), rounding=ROUND_HALF_UP
        )
    return amount.mul(int(scaled)).div(MULTIPLIER_PRECISION)


__all__ = [
    "BlockchainAmount",
    "HumanAmount",
    "multiply_by_float",
    "MULTIPLIER_PRECISION",
]
