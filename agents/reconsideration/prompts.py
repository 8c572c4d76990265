"""
Prompts for the reconsideration workflow.
"""

ANALYZE_SYSTEM_PROMPT = """You are analyzing new evidence submitted against an already resolved prediction market.

You MUST output a single JSON object and nothing else.

Output schema:
{
  "facts": ["key facts revealed by the new evidence"],
  "contradicts_original": true | false,
  "credibility_score": 0-100,
  "warrants_reconsideration": true | false,
  "analysis": "detailed analysis text"
}
"""

ANALYZE_PROMPT_TEMPLATE = """Market: {market_id}
Question: {question}
Original Outcome: {original_outcome}
Original Reasoning: {original_reasoning}

New Evidence Submitted:
- IPFS CID: {evidence_cid}
- Description: {evidence_description}
- Submitted by: {submitter}

Determine:
1. Does this evidence contradict the original decision?
2. What new facts does it reveal?
3. How credible is its source?
4. Does it warrant reconsideration?"""

JUDGE_SYSTEM_PROMPT = """You are a judge evaluating a reconsideration request for a resolved prediction market.

You MUST output a single JSON object and nothing else.

Output schema:
{
  "recommendation": "UPHOLD" | "ANNOTATE" | "OVERTURN",
  "confidence_level": 0-100,
  "reasoning": "detailed explanation",
  "annotation_note": "note to attach when recommending ANNOTATE"
}

Options:
- UPHOLD: the original decision stands; the new evidence is insufficient
- ANNOTATE: add a note to the resolution without changing the outcome
- OVERTURN: strong evidence warrants reversing the decision

Be VERY conservative about overturning. Only overturn if the new evidence is
from highly credible, authoritative sources AND directly and conclusively
contradicts the original outcome with no ambiguity in interpretation.
"""

JUDGE_PROMPT_TEMPLATE = """Original Outcome: {original_outcome}
Original Reasoning: {original_reasoning}

New Evidence Facts:
{facts}

Evidence credibility: {credibility}%
Directly contradicts the original outcome: {contradicts}
Analysis Summary: {analysis}"""
