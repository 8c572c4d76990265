"""
Agents

The oracle's workflow nodes:
- EvidenceAnalyzer: question + evidence -> scored facts
- VerdictJudge: facts -> YES / NO / UNCERTAIN
- ReconsiderationAnalyzer / ReconsiderationJudge: advisory review of a
  settled market

Agents receive an AgentContext and return an AgentResult; they never raise
for expected failures.
"""

from .base import AgentResult, BaseAgent
from .context import AgentContext, Clock, FrozenClock, RealClock
from .judge import VerdictJudge
from .reconsideration import ReconsiderationAnalyzer, ReconsiderationJudge
from .researcher import EvidenceAnalyzer, ResearchFindings

__all__ = [
    "AgentContext",
    "AgentResult",
    "BaseAgent",
    "Clock",
    "EvidenceAnalyzer",
    "FrozenClock",
    "RealClock",
    "ReconsiderationAnalyzer",
    "ReconsiderationJudge",
    "ResearchFindings",
    "VerdictJudge",
]
