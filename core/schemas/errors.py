"""
Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy across the oracle.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the oracle."""

    # Schema & Validation Errors
    SCHEMA_VALIDATION_ERROR = "SCHEMA_VALIDATION_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"
    PARSE_ERROR = "PARSE_ERROR"

    # Generation Errors
    GENERATION_FAILED = "GENERATION_FAILED"
    GENERATION_EMPTY = "GENERATION_EMPTY"
    QUOTA_EXCEEDED = "QUOTA_EXCEEDED"

    # Ledger Errors
    LEDGER_ALREADY_RESOLVED = "LEDGER_ALREADY_RESOLVED"
    LEDGER_UNAUTHORIZED = "LEDGER_UNAUTHORIZED"
    LEDGER_MARKET_NOT_OPEN = "LEDGER_MARKET_NOT_OPEN"
    LEDGER_ALREADY_DISBURSED = "LEDGER_ALREADY_DISBURSED"
    LEDGER_ERROR = "LEDGER_ERROR"

    # Content Store Errors
    CONTENT_STORE_ERROR = "CONTENT_STORE_ERROR"

    # Market State Errors
    MARKET_NOT_FOUND = "MARKET_NOT_FOUND"
    MARKET_EXISTS = "MARKET_EXISTS"
    RESOLUTION_IN_PROGRESS = "RESOLUTION_IN_PROGRESS"
    MARKET_ALREADY_RESOLVED = "MARKET_ALREADY_RESOLVED"
    INVALID_TRANSITION = "INVALID_TRANSITION"

    # Side Effects
    SIDE_EFFECT_FAILED = "SIDE_EFFECT_FAILED"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class OracleError(BaseModel):
    """
    Base error model for structured error communication.

    Used for passing errors between modules (and over the API) without
    exceptions.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.LEDGER_ALREADY_RESOLVED],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )

    def to_exception(self) -> "OracleException":
        """Convert this error model to a raised exception."""
        return OracleException(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class OracleException(Exception):
    """
    Base exception for all oracle errors.

    Carries structured error information and can be converted to/from
    OracleError models.
    """

    def __init__(
        self,
        message: str,
        code: str = "ORACLE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    def to_error_model(self) -> OracleError:
        """Convert this exception to an OracleError model."""
        return OracleError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class CanonicalizationException(OracleException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


# -----------------------------------------------------------------------------
# Generation
# -----------------------------------------------------------------------------

class GenerationError(OracleException):
    """Terminal generation failure (retry budget exhausted)."""

    def __init__(
        self,
        message: str,
        attempts: int | None = None,
        details: dict[str, Any] | None = None,
        code: str = ErrorCodes.GENERATION_FAILED,
    ) -> None:
        full_details = details or {}
        if attempts is not None:
            full_details["attempts"] = attempts
        super().__init__(
            message=message,
            code=code,
            details=full_details,
            retryable=False,
        )


class EmptyGenerationError(GenerationError):
    """The provider returned zero candidate outputs."""

    def __init__(self, message: str = "No candidates returned") -> None:
        super().__init__(message=message, code=ErrorCodes.GENERATION_EMPTY)


class QuotaExceededError(OracleException):
    """Provider signalled a quota / rate-limit condition (HTTP 429)."""

    def __init__(
        self,
        message: str = "Quota exceeded",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.QUOTA_EXCEEDED,
            details=details,
            retryable=True,
        )


class ParseError(OracleException):
    """Model output did not match the expected schema."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.PARSE_ERROR,
            details=details,
            retryable=False,
        )


# -----------------------------------------------------------------------------
# Ledger / content store
# -----------------------------------------------------------------------------

class LedgerErrorKind:
    """Ledger rejection categories."""

    ALREADY_RESOLVED = "AlreadyResolved"
    UNAUTHORIZED = "Unauthorized"
    MARKET_NOT_OPEN = "MarketNotOpen"
    ALREADY_DISBURSED = "AlreadyDisbursed"
    OTHER = "Other"


_LEDGER_CODES = {
    LedgerErrorKind.ALREADY_RESOLVED: ErrorCodes.LEDGER_ALREADY_RESOLVED,
    LedgerErrorKind.UNAUTHORIZED: ErrorCodes.LEDGER_UNAUTHORIZED,
    LedgerErrorKind.MARKET_NOT_OPEN: ErrorCodes.LEDGER_MARKET_NOT_OPEN,
    LedgerErrorKind.ALREADY_DISBURSED: ErrorCodes.LEDGER_ALREADY_DISBURSED,
}


class LedgerError(OracleException):
    """
    The ledger rejected a call.

    Always terminal: the settlement layer never retries a ledger call.
    """

    def __init__(
        self,
        message: str,
        kind: str = LedgerErrorKind.OTHER,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["kind"] = kind
        super().__init__(
            message=message,
            code=_LEDGER_CODES.get(kind, ErrorCodes.LEDGER_ERROR),
            details=full_details,
            retryable=False,
        )
        self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class ContentStoreError(OracleException):
    """Pinning to the content-addressable store failed."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CONTENT_STORE_ERROR,
            details=details,
            retryable=True,
        )


# -----------------------------------------------------------------------------
# Market state
# -----------------------------------------------------------------------------

class MarketNotFoundError(OracleException):
    """No market is registered under the given id."""

    def __init__(self, market_id: str) -> None:
        super().__init__(
            message=f"Market not found: {market_id}",
            code=ErrorCodes.MARKET_NOT_FOUND,
            details={"market_id": market_id},
        )


class MarketExistsError(OracleException):
    """A market with the given id is already registered."""

    def __init__(self, market_id: str) -> None:
        super().__init__(
            message=f"Market already exists: {market_id}",
            code=ErrorCodes.MARKET_EXISTS,
            details={"market_id": market_id},
        )


class ResolutionInProgressError(OracleException):
    """A resolution for this market is already in flight."""

    def __init__(self, market_id: str, status: str) -> None:
        super().__init__(
            message=f"Resolution already in progress for {market_id} (status={status})",
            code=ErrorCodes.RESOLUTION_IN_PROGRESS,
            details={"market_id": market_id, "status": status},
        )


class MarketAlreadyResolvedError(OracleException):
    """The market already carries a committed outcome."""

    def __init__(self, market_id: str, status: str) -> None:
        super().__init__(
            message=f"Market {market_id} is already settled (status={status})",
            code=ErrorCodes.MARKET_ALREADY_RESOLVED,
            details={"market_id": market_id, "status": status},
        )


class InvalidTransitionError(OracleException):
    """A state machine was asked to make a transition its table does not allow."""

    def __init__(
        self,
        source: str,
        target: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details.update({"from": source, "to": target})
        super().__init__(
            message=f"Invalid transition {source} -> {target}",
            code=ErrorCodes.INVALID_TRANSITION,
            details=full_details,
        )


class SideEffectError(OracleException):
    """A post-settlement side effect failed. Never fails the primary workflow."""

    def __init__(
        self,
        message: str,
        effect: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if effect:
            full_details["effect"] = effect
        super().__init__(
            message=message,
            code=ErrorCodes.SIDE_EFFECT_FAILED,
            details=full_details,
            retryable=True,
        )
