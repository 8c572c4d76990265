"""
Agent Context

Everything an agent may touch, handed to it per call: the paced generation
client, the HTTP client for source pages, the observable log stream, the
runtime config and a clock. Agents never build their own clients.

A context is bound to one market and one workflow with ``for_market``;
``emit`` then tags every log line accordingly.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Protocol, TYPE_CHECKING

from core.schemas.logs import LogEntry, Sentiment, Speaker, Workflow
from core.store.logs import LogStore

if TYPE_CHECKING:
    from core.config import RuntimeConfig
    from core.http import HttpClient
    from core.llm import GenerationClient

AGENT_LOGGER = "prophecy.agents"


class Clock(Protocol):
    def now(self) -> datetime:
        ...


class RealClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock:
    """Always returns the same instant; used by mocks and deterministic runs."""

    def __init__(self, frozen_time: Optional[datetime] = None) -> None:
        self.frozen_time = frozen_time or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self.frozen_time


@dataclass
class AgentContext:
    """
    Usage:
        ctx = AgentContext.create(config, logs=log_store)
        result = EvidenceAnalyzer().run(ctx.for_market("m1"), question, evidence)
    """

    generation: Optional["GenerationClient"] = None
    http: Optional["HttpClient"] = None
    logs: LogStore = field(default_factory=LogStore)
    config: Optional["RuntimeConfig"] = None
    clock: Clock = field(default_factory=RealClock)
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(AGENT_LOGGER))
    market_id: Optional[str] = None
    workflow: Workflow = Workflow.RESOLUTION

    @classmethod
    def create(
        cls,
        config: "RuntimeConfig",
        *,
        logs: Optional[LogStore] = None,
        sleep: Callable[[float], None] = time.sleep,
        deterministic: bool = False,
    ) -> "AgentContext":
        """
        Build a context from runtime config.

        Without an API key (and a non-mock provider) ``generation`` stays
        None and every agent answers with its safe default.
        """
        from core.http import HttpClient
        from core.llm import DecodingPolicy, GenerationClient, LLMClient, create_provider

        llm_cfg = config.llm
        generation = None
        if llm_cfg.api_key or llm_cfg.provider == "mock":
            provider = create_provider(
                llm_cfg.provider,
                model=llm_cfg.model,
                proxy=config.proxy,
                api_key=llm_cfg.api_key,
                base_url=llm_cfg.base_url,
            )
            policy = DecodingPolicy(temperature=llm_cfg.temperature, max_tokens=llm_cfg.max_tokens)
            generation = GenerationClient.from_config(
                LLMClient(provider, default_policy=policy), config.generation, sleep=sleep
            )

        logger = logging.getLogger(AGENT_LOGGER)
        if config.debug:
            logger.setLevel(logging.DEBUG)

        return cls(
            generation=generation,
            http=HttpClient.from_config(config.http, proxy=config.proxy),
            logs=logs or LogStore(window=config.resolution.log_window),
            config=config,
            clock=FrozenClock() if deterministic else RealClock(),
            logger=logger,
        )

    @classmethod
    def create_mock(
        cls,
        *,
        llm_responses: Optional[list[Any]] = None,
        logs: Optional[LogStore] = None,
        market_id: Optional[str] = None,
    ) -> "AgentContext":
        """Scripted MockProvider, no delays, frozen clock."""
        from core.llm import GenerationClient, LLMClient, MockProvider

        generation = GenerationClient(
            LLMClient(MockProvider(responses=llm_responses or [])),
            pacing_delay_s=0.0,
            quota_wait_s=0.0,
            retry_backoff_s=0.0,
            sleep=lambda _s: None,
        )
        return cls(
            generation=generation,
            logs=logs or LogStore(),
            clock=FrozenClock(),
            market_id=market_id,
        )

    def for_market(self, market_id: Optional[str], workflow: Optional[Workflow] = None) -> "AgentContext":
        return replace(self, market_id=market_id, workflow=workflow or self.workflow)

    def with_generation(self, generation: "GenerationClient") -> "AgentContext":
        return replace(self, generation=generation)

    def now(self) -> datetime:
        return self.clock.now()

    def emit(self, speaker: Speaker, message: str, sentiment: Sentiment = Sentiment.NEUTRAL) -> LogEntry:
        """Append to the observable log stream, tagged with this context's market and workflow."""
        return self.logs.append(
            speaker,
            message,
            sentiment=sentiment,
            market_id=self.market_id,
            workflow=self.workflow,
        )

    def warning(self, msg: str, *args: Any) -> None:
        self.logger.warning(msg, *args)

    def error(self, msg: str, *args: Any) -> None:
        self.logger.error(msg, *args)
