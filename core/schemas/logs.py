"""
Schemas & Canonicalization
File: logs.py

Purpose: Observable log entries shared by the resolution and
reconsideration workflows.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Speaker(str, Enum):
    RESEARCHER = "Researcher"
    JUDGE = "Judge"
    EXECUTOR = "Executor"
    SYSTEM = "System"


class Sentiment(str, Enum):
    NEUTRAL = "Neutral"
    POSITIVE = "Positive"
    NEGATIVE = "Negative"


class Workflow(str, Enum):
    RESOLUTION = "resolution"
    RECONSIDERATION = "reconsideration"


class LogEntry(BaseModel):
    """
    One entry in the append-only log stream.

    ``seq`` is assigned by the log store and gives the global creation order.
    """

    model_config = ConfigDict(extra="forbid")

    seq: int = 0
    speaker: Speaker
    message: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    sentiment: Sentiment = Sentiment.NEUTRAL
    market_id: str | None = None
    workflow: Workflow = Workflow.RESOLUTION
