"""
Reconsideration Agents

Analyze and Judge nodes of the advisory reconsideration workflow.
"""

from .analyzer import AnalyzeResponse, ReconsiderationAnalyzer, failed_analysis
from .judge import ReconsiderationJudge, ReconsiderationJudgment

__all__ = [
    "AnalyzeResponse",
    "ReconsiderationAnalyzer",
    "ReconsiderationJudge",
    "ReconsiderationJudgment",
    "failed_analysis",
]
