"""
Evidence Analyzer

Turns a market question, any submitted evidence and optional source content
into an ordered list of facts with confidence scores.

Fails closed: on generation failure or any mismatch with the output schema
the result is a single "unable to verify" fact with confidence 0.
"""

from __future__ import annotations

from typing import Annotated, Optional, Sequence, Union, TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from agents.base import AgentResult, BaseAgent
from core.llm import RESEARCH_POLICY, decode_strict
from core.schemas import (
    UNVERIFIED_FACT,
    EvidenceItem,
    Fact,
    OracleException,
    Sentiment,
    Speaker,
)

from .prompts import (
    EVIDENCE_SECTION_TEMPLATE,
    SOURCE_SECTION_TEMPLATE,
    SYSTEM_PROMPT,
    USER_PROMPT_TEMPLATE,
)

if TYPE_CHECKING:
    from agents.context import AgentContext

DEFAULT_CONFIDENCE = 70
POSITIVE_THRESHOLD = 70

Confidence = Annotated[float, Field(ge=0, le=100)]


class ResearchResponse(BaseModel):
    """Wire shape of the model's answer."""

    model_config = ConfigDict(extra="ignore")

    facts: list[str]
    confidences: Optional[list[Optional[Confidence]]] = None
    sources: list[str] = Field(default_factory=list)
    summary: str = ""


class ResearchFindings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    facts: list[Fact] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    summary: str = ""
    degraded: bool = False

    @property
    def average_confidence(self) -> int:
        if not self.facts:
            return 0
        return round(sum(f.confidence for f in self.facts) / len(self.facts))

    @classmethod
    def unverified(cls, reason: str) -> "ResearchFindings":
        return cls(facts=[UNVERIFIED_FACT], summary=reason, degraded=True)


def _sentiment(confidence: float) -> Sentiment:
    return Sentiment.POSITIVE if confidence > POSITIVE_THRESHOLD else Sentiment.NEUTRAL


def _descriptor(item: Union[EvidenceItem, str]) -> str:
    return item.descriptor() if isinstance(item, EvidenceItem) else str(item)


class EvidenceAnalyzer(BaseAgent):
    """
    Researcher node of the resolution workflow.
    """

    name = "EvidenceAnalyzer"
    speaker = Speaker.RESEARCHER
    failure_label = "Research error"

    def build_prompt(
        self,
        question: str,
        evidence: Sequence[Union[EvidenceItem, str]] = (),
        source_content: Optional[str] = None,
        source_url: Optional[str] = None,
    ) -> str:
        evidence_section = ""
        if evidence:
            evidence_section = EVIDENCE_SECTION_TEMPLATE.format(
                count=len(evidence),
                items="\n".join(f"- {_descriptor(e)}" for e in evidence),
            )
        source_section = ""
        if source_content:
            source_section = SOURCE_SECTION_TEMPLATE.format(
                url=source_url or "source",
                content=source_content,
            )
        return USER_PROMPT_TEMPLATE.format(
            question=question,
            evidence_section=evidence_section,
            source_section=source_section,
        )

    def run(
        self,
        ctx: "AgentContext",
        question: str,
        evidence: Sequence[Union[EvidenceItem, str]] = (),
        source_content: Optional[str] = None,
        source_url: Optional[str] = None,
    ) -> AgentResult:
        """
        Research ``question``.

        Returns:
            AgentResult with ResearchFindings as output (always present)
        """
        ctx.emit(Speaker.RESEARCHER, f'Researching: "{question[:50]}..."')
        if evidence:
            ctx.emit(
                Speaker.RESEARCHER,
                f"PRIORITY: Analyzing {len(evidence)} user-submitted evidence source(s)",
                Sentiment.POSITIVE,
            )

        if ctx.generation is None:
            return self._fail(ctx, "No generation client configured")

        prompt = self.build_prompt(question, evidence, source_content, source_url)
        try:
            raw = ctx.generation.generate(
                prompt, system_prompt=SYSTEM_PROMPT, policy=RESEARCH_POLICY
            )
            response = decode_strict(raw, ResearchResponse)
        except OracleException as e:
            return self._fail(ctx, e.message)
        except Exception as e:
            return self._fail(ctx, str(e))

        findings = self._to_findings(response)
        ctx.emit(
            Speaker.RESEARCHER,
            f"Found {len(findings.facts)} facts. Avg confidence: {findings.average_confidence}%",
            _sentiment(findings.average_confidence),
        )
        for i, fact in enumerate(findings.facts, start=1):
            ctx.emit(
                Speaker.RESEARCHER,
                f"[{i}] {fact.text[:80]} ({fact.confidence}% confident)",
                _sentiment(fact.confidence),
            )

        return AgentResult(
            output=findings,
            metadata={
                "agent": self.name,
                "fact_count": len(findings.facts),
                "average_confidence": findings.average_confidence,
                "evidence_count": len(evidence),
                "had_source_content": bool(source_content),
            },
        )

    @staticmethod
    def _to_findings(response: ResearchResponse) -> ResearchFindings:
        confidences = list(response.confidences or [])
        facts = []
        for i, text in enumerate(response.facts):
            score = confidences[i] if i < len(confidences) else None
            facts.append(Fact(text=text, confidence=DEFAULT_CONFIDENCE if score is None else score))
        return ResearchFindings(facts=facts, sources=response.sources, summary=response.summary)

    def _fail(self, ctx: "AgentContext", error: str) -> AgentResult:
        return self.fail(ctx, error, ResearchFindings.unverified(error))
