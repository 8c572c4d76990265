"""
Judge Agent

VerdictJudge: question + scored facts -> YES / NO / UNCERTAIN.
"""

from .agent import JudgeResponse, VerdictJudge

__all__ = [
    "JudgeResponse",
    "VerdictJudge",
]
