"""
Schemas & Canonicalization
File: transcript.py

Purpose: The evidentiary bundle pinned when a market is settled.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .evidence import EvidenceItem, Fact
from .logs import LogEntry
from .verdict import Decision
from .versioning import TRANSCRIPT_SCHEMA_VERSION


class TranscriptBundle(BaseModel):
    """
    Immutable once pinned. Serialized with ``dumps_canonical`` so the same
    bundle always yields the same bytes.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: str = Field(default=TRANSCRIPT_SCHEMA_VERSION)
    market_id: str
    ledger_address: str
    question: str
    facts: list[Fact] = Field(default_factory=list)
    decision: Decision
    reasoning: str = ""
    agent_logs: list[LogEntry] = Field(default_factory=list)
    evidence: list[EvidenceItem] = Field(default_factory=list)
    timestamp: datetime


class AnchorResult(BaseModel):
    """
    CID of the transcript and its 32-byte digest (hex) for the ledger field.

    ``pinned`` is False when the content store was unavailable and the CID is
    the locally derived placeholder.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    cid: str
    digest: str = Field(..., min_length=64, max_length=64)
    pinned: bool = True

    @property
    def digest_bytes(self) -> bytes:
        return bytes.fromhex(self.digest)
