"""Runtime registry of transaction-input types and the tagged JSON envelope.

Inputs travel as their own JSON fields plus a ``type`` key::

    {"nonce": 7, "gas_limit": 21000, ..., "type": "evm"}
    {..., "type": "blockchains/cosmos/staking/native"}

Decoding peeks ``type``, finds the registered class and validates the whole
payload into a fresh instance. The registry is populated once by the
composition root and then frozen; lookups after that are read-only.
"""
from __future__ import annotations

import json
import logging
import threading
from functools import lru_cache
from typing import Any, Iterable, Mapping, Optional, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from .blockchains import Blockchain, TxVariantInputType
from .exceptions import (
    DuplicateRegistrationError,
    RegistryError,
    RegistryFrozenError,
    TxInputTypeMismatchError,
    UnknownTxInputTypeError,
    ValidationError,
)
from .tx_input import (
    STAKING_MARKERS,
    StakeTxInput,
    TxInput,
    TxVariantInput,
    UnstakeTxInput,
    WithdrawTxInput,
)

logger = logging.getLogger(__name__)

TYPE_FIELD = "type"

# Forks and legacy variants that share another driver's input type
DEFAULT_ALIASES: dict[Blockchain, Blockchain] = {
    Blockchain.BITCOIN_CASH: Blockchain.BITCOIN,
    Blockchain.BITCOIN_LEGACY: Blockchain.BITCOIN,
    Blockchain.EVMOS: Blockchain.COSMOS,
}

Payload = Union[bytes, str, Mapping[str, Any]]
M = TypeVar("M")


class TxInputRegistry:
    """Write-once table mapping driver and variant tags to input classes."""

    def __init__(self, aliases: Optional[Mapping[Blockchain, Blockchain]] = None) -> None:
        self._base: dict[str, type[TxInput]] = {}
        self._variants: dict[str, type[TxVariantInput]] = {}
        self._aliases: dict[str, str] = {
            Blockchain(k).value: Blockchain(v).value
            for k, v in (DEFAULT_ALIASES if aliases is None else aliases).items()
        }
        self._frozen = False
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "TxInputRegistry":
        """Reject any further registration."""
        with self._lock:
            self._frozen = True
        logger.debug(
            "Registry frozen with %d base and %d variant input types",
            len(self._base),
            len(self._variants),
        )
        return self

    def _check_writable(self, tag: str) -> None:
        if self._frozen:
            raise RegistryFrozenError(
                f"cannot register '{tag}' after the registry was frozen",
                details={"tag": tag},
            )

    def register_base(self, input_type: type[TxInput]) -> None:
        """Register the base input for its driver tag.

        Raises:
            DuplicateRegistrationError: If the driver already has a base input.
            RegistryFrozenError: After :meth:`freeze`.
        """
        tag = Blockchain(input_type.driver).value
        with self._lock:
            self._check_writable(tag)
            existing = self._base.get(tag)
            if existing is not None:
                raise DuplicateRegistrationError(tag, input_type, existing)
            self._base[tag] = input_type
        logger.debug("Registered base input %s for %s", input_type.__name__, tag)

    def register_variant(self, input_type: type[TxVariantInput]) -> None:
        """Register a staking variant input under its namespaced tag.

        Raises:
            DuplicateRegistrationError: If the tag is already registered.
            RegistryError: If the tag is malformed or no marker is implemented.
            RegistryFrozenError: After :meth:`freeze`.
        """
        tag = TxVariantInputType(input_type.variant_type)
        reason = tag.validate()
        if reason:
            raise RegistryError(reason, details={"tag": str(tag)})
        if not issubclass(input_type, STAKING_MARKERS):
            raise RegistryError(
                f"variant {input_type.__name__} must implement a stake, unstake or withdraw marker",
                details={"tag": str(tag), "type": input_type.__name__},
            )
        with self._lock:
            self._check_writable(tag)
            existing = self._variants.get(tag)
            if existing is not None:
                raise DuplicateRegistrationError(tag, input_type, existing)
            self._variants[tag] = input_type
        logger.debug("Registered variant input %s for %s", input_type.__name__, tag)

    def register_all(
        self,
        base_types: Iterable[type[TxInput]] = (),
        variant_types: Iterable[type[TxVariantInput]] = (),
    ) -> None:
        for base in base_types:
            self.register_base(base)
        for variant in variant_types:
            self.register_variant(variant)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def base_types(self) -> list[type[TxInput]]:
        return list(self._base.values())

    def variant_types(self) -> list[type[TxVariantInput]]:
        return list(self._variants.values())

    def base_type_for(self, driver: Union[Blockchain, str]) -> type[TxInput]:
        tag = Blockchain(driver).value if isinstance(driver, Blockchain) else str(driver)
        input_type = self._base.get(tag)
        if input_type is None and tag in self._aliases:
            input_type = self._base.get(self._aliases[tag])
        if input_type is None:
            raise UnknownTxInputTypeError(tag)
        return input_type

    def variant_type_for(self, tag: str) -> type[TxVariantInput]:
        input_type = self._variants.get(str(tag))
        if input_type is None:
            raise UnknownTxInputTypeError(str(tag))
        return input_type

    def new_tx_input(self, driver: Union[Blockchain, str]) -> TxInput:
        """Fresh default-valued input for a driver, following aliases."""
        return self.base_type_for(driver)()

    def new_variant_input(self, tag: str) -> TxVariantInput:
        return self.variant_type_for(tag)()

    # ------------------------------------------------------------------
    # Tagged serialization
    # ------------------------------------------------------------------

    @staticmethod
    def type_tag(tx_input: TxInput) -> str:
        if isinstance(tx_input, TxVariantInput):
            return str(tx_input.get_variant())
        return tx_input.get_blockchain().value

    def marshal_tx_input(self, tx_input: TxInput) -> bytes:
        """Encode an input with its ``type`` tag injected."""
        fields = tx_input.model_dump(mode="json")
        fields[TYPE_FIELD] = self.type_tag(tx_input)
        return json.dumps(fields, separators=(",", ":")).encode()

    def unmarshal_tx_input(self, data: Payload) -> TxInput:
        """Decode an envelope into a fresh instance of the tagged type.

        Raises:
            ValidationError: If the payload is not a JSON object or fails validation.
            UnknownTxInputTypeError: If ``type`` is missing or unregistered.
        """
        fields = _load_object(data)
        tag = fields.get(TYPE_FIELD)
        if not isinstance(tag, str) or not tag:
            raise UnknownTxInputTypeError(str(tag or ""))

        input_type: type[TxInput]
        try:
            input_type = self.base_type_for(tag)
        except UnknownTxInputTypeError:
            input_type = self.variant_type_for(tag)

        try:
            return input_type.model_validate(fields)
        except PydanticValidationError as exc:
            raise ValidationError(
                f"invalid {input_type.__name__} payload: {exc.error_count()} error(s)",
                details={"type": tag, "errors": exc.errors(include_url=False)},
            ) from exc

    def _unmarshal_marked(self, data: Payload, marker: type[M]) -> M:
        tx_input = self.unmarshal_tx_input(data)
        if not isinstance(tx_input, marker):
            raise TxInputTypeMismatchError(
                f"{type(tx_input).__name__} is not a {marker.__name__}",
                details={"type": self.type_tag(tx_input), "expected": marker.__name__},
            )
        return tx_input

    def unmarshal_staking_input(self, data: Payload) -> StakeTxInput:
        return self._unmarshal_marked(data, StakeTxInput)

    def unmarshal_unstaking_input(self, data: Payload) -> UnstakeTxInput:
        return self._unmarshal_marked(data, UnstakeTxInput)

    def unmarshal_withdrawing_input(self, data: Payload) -> WithdrawTxInput:
        return self._unmarshal_marked(data, WithdrawTxInput)


def _load_object(data: Payload) -> dict[str, Any]:
    if isinstance(data, Mapping):
        return dict(data)
    try:
        fields = json.loads(data)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"tx-input envelope is not valid JSON: {exc}") from exc
    if not isinstance(fields, dict):
        raise ValidationError("tx-input envelope must be a JSON object")
    return fields


def build_registry() -> TxInputRegistry:
    """Registry populated with every shipped driver, frozen."""
    from .drivers import ALL_DRIVERS

    registry = TxInputRegistry()
    for driver in ALL_DRIVERS:
        registry.register_all(driver.BASE_INPUTS, driver.VARIANT_INPUTS)
    return registry.freeze()


@lru_cache
def default_registry() -> TxInputRegistry:
    """Process-wide frozen registry shared by the factory."""
    return build_registry()


__all__ = [
    "DEFAULT_ALIASES",
    "Payload",
    "TYPE_FIELD",
    "TxInputRegistry",
    "build_registry",
    "default_registry",
]
