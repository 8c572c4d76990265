"""
Generation Client

Wraps an LLMClient with the pacing / quota / retry contract the agents rely on:

- a fixed pacing delay before every provider call
- on QuotaExceededError: sleep a longer fixed interval and retry in place,
  without spending the retry budget (bounded separately by max_quota_waits)
- on any other failure: retry up to max_attempts with a fixed backoff
- zero candidate outputs: EmptyGenerationError, no retry

Failures propagate to the calling agent, which owns the fallback.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, TYPE_CHECKING

from core.schemas.errors import EmptyGenerationError, GenerationError, QuotaExceededError

from .client import LLMClient
from .determinism import DecodingPolicy

if TYPE_CHECKING:
    from core.config.runtime import GenerationConfig

logger = logging.getLogger(__name__)


class GenerationClient:
    """
    Paced, retrying text generation.

    ``sleep`` is injectable so tests run without real delays.
    """

    def __init__(
        self,
        llm: LLMClient,
        *,
        pacing_delay_s: float = 4.0,
        quota_wait_s: float = 10.0,
        retry_backoff_s: float = 2.0,
        max_attempts: int = 3,
        max_quota_waits: int = 5,
        policy: Optional[DecodingPolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.llm = llm
        self.pacing_delay_s = pacing_delay_s
        self.quota_wait_s = quota_wait_s
        self.retry_backoff_s = retry_backoff_s
        self.max_attempts = max_attempts
        self.max_quota_waits = max_quota_waits
        self.policy = policy
        self._sleep = sleep

    @classmethod
    def from_config(
        cls,
        llm: LLMClient,
        config: "GenerationConfig",
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "GenerationClient":
        return cls(
            llm,
            pacing_delay_s=config.pacing_delay_s,
            quota_wait_s=config.quota_wait_s,
            retry_backoff_s=config.retry_backoff_s,
            max_attempts=config.max_attempts,
            max_quota_waits=config.max_quota_waits,
            sleep=sleep,
        )

    def with_pacing(self, pacing_delay_s: float) -> "GenerationClient":
        """Copy of this client with a different pacing delay, same provider."""
        return GenerationClient(
            self.llm,
            pacing_delay_s=pacing_delay_s,
            quota_wait_s=self.quota_wait_s,
            retry_backoff_s=self.retry_backoff_s,
            max_attempts=self.max_attempts,
            max_quota_waits=self.max_quota_waits,
            policy=self.policy,
            sleep=self._sleep,
        )

    @property
    def provider_name(self) -> str:
        return self.llm.provider.name

    def generate(
        self,
        prompt: str,
        *,
        system_prompt: Optional[str] = None,
        policy: Optional[DecodingPolicy] = None,
    ) -> str:
        """
        Generate raw text for ``prompt``.

        Raises:
            EmptyGenerationError: provider returned no candidates
            GenerationError: retry or quota budget exhausted
        """
        effective_policy = policy or self.policy
        attempt = 0
        quota_waits = 0
        last_error: Optional[Exception] = None

        while attempt < self.max_attempts:
            self._sleep(self.pacing_delay_s)
            try:
                response = self.llm.generate(
                    prompt, policy=effective_policy, system_prompt=system_prompt
                )
            except QuotaExceededError as e:
                quota_waits += 1
                if quota_waits > self.max_quota_waits:
                    raise GenerationError(
                        f"Quota still exhausted after {self.max_quota_waits} waits",
                        attempts=attempt,
                        details={"quota_waits": quota_waits - 1},
                    ) from e
                logger.warning(
                    "Rate limit hit (%s), waiting %.0fs", self.provider_name, self.quota_wait_s
                )
                self._sleep(self.quota_wait_s)
                continue
            except Exception as e:
                attempt += 1
                last_error = e
                logger.warning(
                    "Generation attempt %d/%d failed: %s", attempt, self.max_attempts, e
                )
                if attempt < self.max_attempts:
                    self._sleep(self.retry_backoff_s)
                continue

            if response.is_empty:
                raise EmptyGenerationError()
            return response.content

        raise GenerationError(
            f"Generation failed after {self.max_attempts} attempts: {last_error}",
            attempts=self.max_attempts,
        ) from last_error

