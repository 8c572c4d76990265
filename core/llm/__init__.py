"""
LLM access for the agents.

- providers: OpenAI, Anthropic, Google Gemini and a scripted mock
- LLMClient: one provider call
- GenerationClient: pacing, quota waits and bounded retries
- parsing: strict schema decoding of model output
"""

from .client import LLMClient, LLMResponse
from .determinism import (
    JUDGE_POLICY,
    RESEARCH_POLICY,
    DecodingPolicy,
    policy_to_provider_args,
)
from .generation import GenerationClient
from .parsing import decode_strict, strip_code_fence
from .providers import (
    PROVIDER_ENV_KEYS,
    PROVIDERS,
    AnthropicProvider,
    GoogleProvider,
    LLMProvider,
    MockProvider,
    OpenAIProvider,
    create_provider,
    is_quota_error,
    split_system,
)

__all__ = [
    "LLMClient",
    "LLMResponse",
    "DecodingPolicy",
    "JUDGE_POLICY",
    "RESEARCH_POLICY",
    "policy_to_provider_args",
    "GenerationClient",
    "decode_strict",
    "strip_code_fence",
    "LLMProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "GoogleProvider",
    "MockProvider",
    "PROVIDERS",
    "PROVIDER_ENV_KEYS",
    "create_provider",
    "is_quota_error",
    "split_system",
]
