"""
Schemas & Canonicalization
File: evidence.py

Purpose: Evidence submitted against a market and the facts derived from it.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EvidenceItem(BaseModel):
    """
    A piece of evidence pinned to the content store by a submitter.

    Evidence is append-only per market: never deleted, only accumulated and
    fed to the Evidence Analyzer.
    """

    model_config = ConfigDict(extra="forbid")

    cid: str = Field(..., description="Content identifier of the pinned evidence", min_length=1)
    description: str = Field(default="", description="Free-text description")
    submitter: str = Field(default="anonymous", description="Submitter identity")
    filename: str | None = Field(default=None, description="Original filename, if any")
    submitted_at: datetime = Field(default_factory=_utcnow)

    def descriptor(self) -> str:
        """Single-line descriptor used in analyzer prompts."""
        text = self.description or self.filename or "evidence"
        return f"{text} (IPFS: {self.cid})"


class Fact(BaseModel):
    """
    A fact extracted by the Evidence Analyzer.

    Ephemeral: only persisted as part of the transcript bundle.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    text: str
    confidence: int = Field(default=70, ge=0, le=100)

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        if v is None:
            return 70
        return max(0, min(100, int(round(float(v)))))


# Emitted when research fails; the Judge will see zero-confidence input.
UNVERIFIED_FACT = Fact(text="Unable to verify facts due to agent error.", confidence=0)
