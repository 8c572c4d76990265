"""
LLM Providers

One adapter per model vendor. Each adapter turns a list of chat messages
plus a DecodingPolicy into a single SDK call and an LLMResponse.

A vendor rate-limit response surfaces as QuotaExceededError; every other
SDK failure propagates unchanged and counts against the retry budget of
GenerationClient.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Union

from core.schemas.errors import QuotaExceededError

from .client import LLMResponse
from .determinism import DecodingPolicy, policy_to_provider_args


PROVIDER_ENV_KEYS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
    "google": "GOOGLE_API_KEY",
}

Messages = list[dict[str, Any]]


def is_quota_error(exc: BaseException) -> bool:
    """
    True if ``exc`` is a provider rate-limit / quota response.

    openai and anthropic carry the HTTP status on ``status_code``,
    google-genai on ``code``.
    """
    if 429 in (getattr(exc, "status_code", None), getattr(exc, "code", None)):
        return True
    return "RESOURCE_EXHAUSTED" in str(exc)


def split_system(messages: Messages) -> tuple[Optional[str], Messages]:
    """Pull system messages out for SDKs that take them as a separate argument."""
    system = [m["content"] for m in messages if m["role"] == "system"]
    rest = [m for m in messages if m["role"] != "system"]
    return ("\n".join(system) if system else None), rest


def _proxied_http_client(proxy: Optional[str]):
    if not proxy:
        return None
    import httpx
    return httpx.Client(proxy=proxy)


class LLMProvider(ABC):
    """
    Base class for vendor adapters.

    Subclasses set ``name`` and ``default_model`` and implement ``_call``.
    The SDK client is built lazily on first use so that importing this
    module never requires a vendor package.
    """

    name: str = ""
    default_model: str = ""

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        api_key: Optional[str] = None,
        proxy: Optional[str] = None,
    ) -> None:
        self.model = model or self.default_model
        env_var = PROVIDER_ENV_KEYS.get(self.name)
        self.api_key = api_key or (os.getenv(env_var) if env_var else None)
        self.proxy = proxy
        self._client: Any = None

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = self._build_client()
        return self._client

    def _build_client(self) -> Any:
        return None

    def chat(self, messages: Messages, *, policy: DecodingPolicy) -> LLMResponse:
        """
        Send one chat request.

        Raises:
            QuotaExceededError: the vendor is rate limiting us
        """
        try:
            return self._call(messages, policy)
        except QuotaExceededError:
            raise
        except Exception as e:
            if is_quota_error(e):
                raise QuotaExceededError(
                    f"{self.name} quota exceeded: {e}",
                    details={"provider": self.name},
                ) from e
            raise

    @abstractmethod
    def _call(self, messages: Messages, policy: DecodingPolicy) -> LLMResponse:
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(model={self.model!r})"


class OpenAIProvider(LLMProvider):
    """Chat Completions API. ``base_url`` points it at any compatible endpoint."""

    name = "openai"
    default_model = "gpt-4o"

    def __init__(self, model: Optional[str] = None, *, base_url: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(model, **kwargs)
        self.base_url = base_url

    def _build_client(self) -> Any:
        from openai import OpenAI

        return OpenAI(
            api_key=self.api_key,
            base_url=self.base_url,
            http_client=_proxied_http_client(self.proxy),
        )

    def _call(self, messages: Messages, policy: DecodingPolicy) -> LLMResponse:
        request = policy_to_provider_args(policy, self.name)
        if policy.json_mode:
            request["response_format"] = {"type": "json_object"}
        completion = self.client.chat.completions.create(
            model=self.model, messages=messages, **request
        )

        if not completion.choices:
            return LLMResponse(content="", model=self.model, provider=self.name, candidates=0)
        first = completion.choices[0]
        usage = completion.usage
        return LLMResponse(
            content=first.message.content or "",
            model=completion.model,
            provider=self.name,
            input_tokens=usage.prompt_tokens if usage else 0,
            output_tokens=usage.completion_tokens if usage else 0,
            finish_reason=first.finish_reason or "stop",
            candidates=len(completion.choices),
        )


class AnthropicProvider(LLMProvider):
    name = "anthropic"
    default_model = "claude-sonnet-4-20250514"

    def _build_client(self) -> Any:
        from anthropic import Anthropic

        kwargs: dict[str, Any] = {"api_key": self.api_key}
        http_client = _proxied_http_client(self.proxy)
        if http_client is not None:
            kwargs["http_client"] = http_client
        return Anthropic(**kwargs)

    def _call(self, messages: Messages, policy: DecodingPolicy) -> LLMResponse:
        system, turns = split_system(messages)
        request = policy_to_provider_args(policy, self.name)
        if system:
            request["system"] = system
        message = self.client.messages.create(model=self.model, messages=turns, **request)

        # Anthropic has no JSON mode; the strict decoder strips any fences
        texts = [block.text for block in message.content if getattr(block, "text", None)]
        usage = message.usage
        return LLMResponse(
            content="".join(texts),
            model=message.model,
            provider=self.name,
            input_tokens=usage.input_tokens if usage else 0,
            output_tokens=usage.output_tokens if usage else 0,
            finish_reason=message.stop_reason or "stop",
            candidates=1 if texts else 0,
        )


class GoogleProvider(LLMProvider):
    """
    Gemini via the google-genai SDK.

    Gemini calls the assistant role "model"; a response that was blocked
    comes back with no candidates, which GenerationClient treats as an
    empty generation rather than a retryable failure.
    """

    name = "google"
    default_model = "gemini-2.5-flash"

    def _build_client(self) -> Any:
        from google import genai

        return genai.Client(api_key=self.api_key)

    def _call(self, messages: Messages, policy: DecodingPolicy) -> LLMResponse:
        from google.genai import types

        system, turns = split_system(messages)
        contents = [
            types.Content(
                role="user" if m["role"] == "user" else "model",
                parts=[types.Part(text=m["content"])],
            )
            for m in turns
        ]
        config = types.GenerateContentConfig(
            temperature=policy.temperature,
            top_p=policy.top_p,
            max_output_tokens=policy.max_tokens,
            system_instruction=system,
            response_mime_type="application/json" if policy.json_mode else None,
            stop_sequences=list(policy.stop_sequences) or None,
        )
        response = self.client.models.generate_content(
            model=self.model, contents=contents, config=config
        )

        candidates = getattr(response, "candidates", None) or []
        text = ""
        if candidates:
            parts = getattr(candidates[0].content, "parts", None) or []
            text = "".join(p.text for p in parts if getattr(p, "text", None))
        usage = getattr(response, "usage_metadata", None)
        return LLMResponse(
            content=text,
            model=self.model,
            provider=self.name,
            input_tokens=getattr(usage, "prompt_token_count", 0) or 0,
            output_tokens=getattr(usage, "candidates_token_count", 0) or 0,
            candidates=len(candidates),
        )


MockResponse = Union[str, Exception]


class MockProvider(LLMProvider):
    """
    Scripted provider for tests.

    ``responses`` are served in order and cycle once exhausted. An
    Exception in the script is raised instead of returned, which is how
    tests simulate quota errors and outages.
    """

    name = "mock"
    default_model = "mock-model"

    def __init__(
        self,
        model: Optional[str] = None,
        *,
        responses: Optional[list[MockResponse]] = None,
        response_fn: Optional[Callable[[Messages, DecodingPolicy], MockResponse]] = None,
    ) -> None:
        super().__init__(model)
        self.responses = list(responses or [])
        self.response_fn = response_fn
        self.calls: list[dict[str, Any]] = []
        self.call_count = 0

    def set_responses(self, responses: list[MockResponse]) -> None:
        self.responses = list(responses)
        self.call_count = 0

    def _call(self, messages: Messages, policy: DecodingPolicy) -> LLMResponse:
        self.calls.append({"messages": messages, "policy": policy})
        if self.response_fn is not None:
            scripted = self.response_fn(messages, policy)
        elif self.responses:
            scripted = self.responses[self.call_count % len(self.responses)]
        else:
            scripted = '{"result": "mock response"}'
        self.call_count += 1

        if isinstance(scripted, Exception):
            raise scripted
        return LLMResponse(
            content=scripted,
            model=self.model,
            provider=self.name,
            input_tokens=100,
            output_tokens=50,
            candidates=1 if scripted else 0,
        )


PROVIDERS: dict[str, type[LLMProvider]] = {
    cls.name: cls for cls in (OpenAIProvider, AnthropicProvider, GoogleProvider, MockProvider)
}


def create_provider(
    provider_name: str,
    model: Optional[str] = None,
    proxy: Optional[str] = None,
    **kwargs: Any,
) -> LLMProvider:
    """
    Build a provider by name (openai, anthropic, google, mock).

    Keyword arguments a provider does not take are dropped, so callers can
    pass the full LLM config section regardless of vendor.
    """
    try:
        cls = PROVIDERS[provider_name.lower()]
    except KeyError:
        raise ValueError(f"Unknown provider: {provider_name}") from None

    if cls is MockProvider:
        allowed = {k: v for k, v in kwargs.items() if k in ("responses", "response_fn")}
        return MockProvider(model, **allowed)
    if cls is not OpenAIProvider:
        kwargs.pop("base_url", None)
    return cls(model, proxy=proxy, **kwargs)
