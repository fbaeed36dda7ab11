"""Unified exception hierarchy for sardis-crosschain.

All crosschain errors inherit from CrosschainException, enabling:
- Consistent handling of input, insufficiency, capability and registry errors
- Machine-readable error codes for callers that persist or relay failures
- Structured details for logs

Usage:
    from sardis_crosschain.exceptions import (
        CrosschainException,
        InsufficientFundsError,
        NotSupportedError,
    )

    try:
        tx = builder.transfer(args, tx_input)
    except InsufficientFundsError as e:
        logger.warning("transfer rejected: %s", e.to_dict())

No error raised here is retried by the library. Retry policy belongs to the
network-facing client collaborators.
"""
from __future__ import annotations

from typing import Any, Optional


class CrosschainException(Exception):
    """Base exception for all crosschain errors.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code (e.g., "VALIDATION_ERROR")
        details: Optional additional context
    """

    error_code: str = "CROSSCHAIN_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a serializable error payload."""
        result = {
            "error": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Input Errors
# =============================================================================

class ValidationError(CrosschainException):
    """Invalid input data or parameters."""

    error_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details=details)


class InvalidAddressError(ValidationError):
    """Address could not be decoded for the target chain."""

    error_code = "INVALID_ADDRESS"

    def __init__(
        self,
        address: str,
        chain: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        message = f"invalid address '{address}'"
        if chain:
            message += f" for {chain}"
        if reason:
            message += f": {reason}"
        details: dict[str, Any] = {"address": address}
        if chain:
            details["chain"] = chain
        super().__init__(message, field="address", details=details)


class AmountParseError(ValidationError):
    """Amount string is not a valid integer or decimal."""

    error_code = "AMOUNT_PARSE_ERROR"

    def __init__(self, value: Any, kind: str = "integer") -> None:
        super().__init__(
            f"not a valid {kind} amount: {value!r}",
            field="amount",
            details={"value": str(value)},
        )


class UnsupportedAssetError(ValidationError):
    """Asset type is not understood by the builder."""

    error_code = "UNSUPPORTED_ASSET"


# =============================================================================
# Insufficiency Errors
# =============================================================================

class InsufficientFundsError(CrosschainException):
    """Amount plus fee exceeds the funds available to the transaction."""

    error_code = "INSUFFICIENT_FUNDS"

    def __init__(
        self,
        message: str,
        available: Optional[str] = None,
        required: Optional[str] = None,
        shortfall: Optional[str] = None,
        chain: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        details = details or {}
        if available is not None:
            details["available"] = available
        if required is not None:
            details["required"] = required
        if shortfall is not None:
            details["shortfall"] = shortfall
        if chain:
            details["chain"] = chain
        super().__init__(message, details=details)


# =============================================================================
# Capability Errors
# =============================================================================

class NotSupportedError(CrosschainException):
    """Operation is not implemented for this chain or asset combination."""

    error_code = "NOT_SUPPORTED"

    def __init__(
        self,
        operation: str,
        chain: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{operation} is not supported"
        if chain:
            message += f" for {chain}"
        details = details or {}
        details["operation"] = operation
        if chain:
            details["chain"] = chain
        super().__init__(message, details=details)


# =============================================================================
# Registry Errors
# =============================================================================

class RegistryError(CrosschainException):
    """Base class for transaction-input registry errors."""

    error_code = "REGISTRY_ERROR"


class DuplicateRegistrationError(RegistryError):
    """A tag was registered twice. Programmer error, raised at startup."""

    error_code = "DUPLICATE_REGISTRATION"

    def __init__(self, tag: str, new_type: type, existing_type: type) -> None:
        super().__init__(
            f"input {new_type.__name__} for '{tag}' duplicates {existing_type.__name__}",
            details={
                "tag": tag,
                "type": new_type.__name__,
                "existing_type": existing_type.__name__,
            },
        )


class RegistryFrozenError(RegistryError):
    """Registration attempted after the registry was frozen."""

    error_code = "REGISTRY_FROZEN"


class UnknownTxInputTypeError(RegistryError):
    """No input type is registered for a tag."""

    error_code = "UNKNOWN_TX_INPUT_TYPE"

    def __init__(self, tag: str) -> None:
        super().__init__(f"no tx-input mapped for '{tag}'", details={"tag": tag})


class TxInputTypeMismatchError(RegistryError):
    """Decoded input does not have the expected capability or chain."""

    error_code = "TX_INPUT_TYPE_MISMATCH"


# =============================================================================
# Client Errors
# =============================================================================

class RPCError(CrosschainException):
    """Node returned a JSON-RPC error or could not be reached."""

    error_code = "RPC_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        details: dict[str, Any] = {}
        if code is not None:
            details["code"] = code
        if data is not None:
            details["data"] = data
        super().__init__(message, details=details)
        self.code = code
        self.data = data


class BroadcastError(CrosschainException):
    """Node rejected a signed transaction.

    ``reason`` is a ClientError value from :mod:`sardis_crosschain.client`.
    """

    error_code = "BROADCAST_ERROR"

    def __init__(self, message: str, reason: str, tx_hash: Optional[str] = None) -> None:
        details: dict[str, Any] = {"reason": reason}
        if tx_hash:
            details["tx_hash"] = tx_hash
        super().__init__(message, details=details)
        self.reason = reason
        self.tx_hash = tx_hash


__all__ = [
    "CrosschainException",
    "ValidationError",
    "InvalidAddressError",
    "AmountParseError",
    "UnsupportedAssetError",
    "InsufficientFundsError",
    "NotSupportedError",
    "RegistryError",
    "DuplicateRegistrationError",
    "RegistryFrozenError",
    "UnknownTxInputTypeError",
    "TxInputTypeMismatchError",
    "RPCError",
    "BroadcastError",
]
