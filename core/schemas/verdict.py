"""
Schemas & Canonicalization
File: verdict.py

Purpose: Decision produced by the Verdict Judge.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Decision(str, Enum):
    YES = "YES"
    NO = "NO"
    UNCERTAIN = "UNCERTAIN"

    @property
    def is_terminal(self) -> bool:
        return self is not Decision.UNCERTAIN


class Verdict(BaseModel):
    """
    A single Judge pass.

    ``iteration`` is the 1-based count of Judge passes so far for this
    resolution; it strictly increases across passes.
    """

    model_config = ConfigDict(extra="forbid")

    decision: Decision = Decision.UNCERTAIN
    reasoning: str = ""
    confidence: int = Field(default=0, ge=0, le=100)
    key_evidence: list[str] = Field(default_factory=list)
    iteration: int = Field(default=1, ge=1)

    @classmethod
    def uncertain(cls, reasoning: str, iteration: int) -> "Verdict":
        return cls(
            decision=Decision.UNCERTAIN,
            reasoning=reasoning,
            confidence=0,
            iteration=iteration,
        )
