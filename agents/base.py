"""
Agent Base Classes

An agent is one node of a workflow. It gets its collaborators from an
AgentContext and hands back an AgentResult. Expected failures (no model
configured, provider outage, malformed output) never raise: the result is
marked failed and still carries the node's safe default, so the workflow
keeps moving.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass, field
from typing import Any, ClassVar, Optional, TYPE_CHECKING

from core.schemas.logs import Sentiment, Speaker

if TYPE_CHECKING:
    from agents.context import AgentContext


@dataclass
class AgentResult:
    output: Any
    success: bool = True
    error: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, error: str, output: Any = None, **metadata: Any) -> "AgentResult":
        return cls(output=output, success=False, error=error, metadata=metadata)


class BaseAgent(ABC):
    """
    Subclasses set ``name``, the ``speaker`` their transcript lines are
    attributed to and the ``failure_label`` shown when they fall back.
    """

    name: ClassVar[str] = ""
    speaker: ClassVar[Speaker] = Speaker.SYSTEM
    failure_label: ClassVar[str] = "Error"

    def fail(self, ctx: "AgentContext", error: str, output: Any, **metadata: Any) -> AgentResult:
        """Log the failure and return the safe default as a failed result."""
        ctx.error(f"{self.name} failed: {error}")
        ctx.emit(self.speaker, f"{self.failure_label}: {error}", Sentiment.NEGATIVE)
        return AgentResult.failure(error, output, agent=self.name, **metadata)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
