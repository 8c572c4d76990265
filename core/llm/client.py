"""
LLM Client

Binds a provider to a default decoding policy and makes exactly one
provider call per request. Pacing and retries belong to GenerationClient.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

from .determinism import DecodingPolicy

if TYPE_CHECKING:
    from .providers import LLMProvider

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    content: str
    model: str
    provider: str
    input_tokens: int = 0
    output_tokens: int = 0
    finish_reason: str = "stop"
    # zero when the provider returned no candidate at all (e.g. safety block)
    candidates: int = 1

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    @property
    def is_empty(self) -> bool:
        return self.candidates == 0 or not self.content.strip()


class LLMClient:
    """
    Usage:
        client = LLMClient(create_provider("google", api_key="..."))
        reply = client.generate("Did event X occur?", system_prompt="Answer in JSON")
    """

    def __init__(self, provider: "LLMProvider", *, default_policy: Optional[DecodingPolicy] = None) -> None:
        self.provider = provider
        self.default_policy = default_policy or DecodingPolicy()

    def chat(
        self,
        messages: list[dict[str, Any]],
        *,
        policy: Optional[DecodingPolicy] = None,
        system_prompt: Optional[str] = None,
    ) -> LLMResponse:
        if system_prompt:
            messages = [{"role": "system", "content": system_prompt}, *messages]
        response = self.provider.chat(messages, policy=policy or self.default_policy)
        logger.debug(
            "%s/%s: %d chars, %d tokens, finish=%s",
            response.provider, response.model, len(response.content),
            response.total_tokens, response.finish_reason,
        )
        return response

    def generate(
        self,
        prompt: str,
        *,
        policy: Optional[DecodingPolicy] = None,
        system_prompt: Optional[str] = None,
    ) -> LLMResponse:
        return self.chat(
            [{"role": "user", "content": prompt}], policy=policy, system_prompt=system_prompt
        )
