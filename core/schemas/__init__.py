"""
Schemas & Canonicalization

Public API for the schema package: domain models, canonical serialization
and the error taxonomy.
"""

from .versioning import TRANSCRIPT_SCHEMA_VERSION

from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_bytes,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
)

from .errors import (
    CanonicalizationException,
    ContentStoreError,
    EmptyGenerationError,
    ErrorCodes,
    GenerationError,
    InvalidTransitionError,
    LedgerError,
    LedgerErrorKind,
    MarketAlreadyResolvedError,
    MarketExistsError,
    MarketNotFoundError,
    OracleError,
    OracleException,
    ParseError,
    QuotaExceededError,
    ResolutionInProgressError,
    SideEffectError,
)

from .evidence import UNVERIFIED_FACT, EvidenceItem, Fact
from .logs import LogEntry, Sentiment, Speaker, Workflow
from .market import Market, MarketStatus, Outcome
from .reconsideration import (
    EvidenceAnalysis,
    Recommendation,
    ReconsiderationRequest,
    ReconsiderationResult,
    SuggestedOutcome,
)
from .stake import DisbursementFailure, DistributionResult, StakeRecord
from .transcript import AnchorResult, TranscriptBundle
from .verdict import Decision, Verdict

__all__ = [
    # Versioning
    "TRANSCRIPT_SCHEMA_VERSION",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_bytes",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    # Errors
    "CanonicalizationException",
    "ContentStoreError",
    "EmptyGenerationError",
    "ErrorCodes",
    "GenerationError",
    "InvalidTransitionError",
    "LedgerError",
    "LedgerErrorKind",
    "MarketAlreadyResolvedError",
    "MarketExistsError",
    "MarketNotFoundError",
    "OracleError",
    "OracleException",
    "ParseError",
    "QuotaExceededError",
    "ResolutionInProgressError",
    "SideEffectError",
    # Domain
    "AnchorResult",
    "Decision",
    "DisbursementFailure",
    "DistributionResult",
    "EvidenceAnalysis",
    "EvidenceItem",
    "Fact",
    "LogEntry",
    "Market",
    "MarketStatus",
    "Outcome",
    "Recommendation",
    "ReconsiderationRequest",
    "ReconsiderationResult",
    "Sentiment",
    "Speaker",
    "StakeRecord",
    "SuggestedOutcome",
    "TranscriptBundle",
    "UNVERIFIED_FACT",
    "Verdict",
    "Workflow",
]
