"""
LLM Decoding Controls

Decoding parameters passed to every provider call. Research and judging
run at temperature 0 with JSON output so the strict decoder has something
well-formed to validate.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DecodingPolicy:
    """
    Decoding parameters for a provider call.

    json_mode=True asks the provider for a JSON object response where the
    provider supports it.
    """
    temperature: float = 0.0
    top_p: float = 1.0
    seed: Optional[int] = 42
    max_tokens: int = 2048
    json_mode: bool = True
    stop_sequences: tuple[str, ...] = field(default_factory=tuple)


def policy_to_provider_args(policy: DecodingPolicy, provider: str = "openai") -> Dict[str, Any]:
    """Map a DecodingPolicy onto provider SDK keyword arguments."""
    args: Dict[str, Any] = {
        "temperature": policy.temperature,
        "max_tokens": policy.max_tokens,
        "top_p": policy.top_p,
    }
    if provider == "openai":
        if policy.seed is not None:
            args["seed"] = policy.seed
        if policy.stop_sequences:
            args["stop"] = list(policy.stop_sequences)
    elif provider == "anthropic":
        # Anthropic rejects temperature and top_p together
        args.pop("top_p")
        if policy.stop_sequences:
            args["stop_sequences"] = list(policy.stop_sequences)
    return args


RESEARCH_POLICY = DecodingPolicy(temperature=0.0, max_tokens=2048)
JUDGE_POLICY = DecodingPolicy(temperature=0.0, max_tokens=1024)
