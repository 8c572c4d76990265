"""
Researcher Agent

EvidenceAnalyzer: question + evidence (+ optional source content) -> scored facts.
"""

from .agent import EvidenceAnalyzer, ResearchFindings, ResearchResponse
from .sources import fetch_source_content, html_to_text

__all__ = [
    "EvidenceAnalyzer",
    "ResearchFindings",
    "ResearchResponse",
    "fetch_source_content",
    "html_to_text",
]
