"""Retry/backoff controller around a whole generation attempt."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
)

from cv_tailor.config import RetryConfig
from cv_tailor.errors import GenerationFailedError
from cv_tailor.pipeline.error_classifier import classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 4.0

    @classmethod
    def from_config(cls, config: RetryConfig) -> RetryPolicy:
        return cls(
            max_retries=config.max_retries,
            base_delay=config.base_delay,
            max_delay=config.max_delay,
        )

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delay_after(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""
        return min(self.base_delay * 2 ** (attempt - 1), self.max_delay)


@dataclass
class RetryState:
    """Transient bookkeeping for one operation; dropped once it settles."""

    max_attempts: int
    attempt: int = 0
    last_error: BaseException | None = None
    last_delay: float = 0.0


async def run_with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    on_attempt: Callable[[RetryState], None] | None = None,
) -> T:
    """Run ``operation`` until it succeeds or a classified error ends it.

    Every attempt re-invokes the whole operation. Non-retryable errors stop
    immediately; retryable ones are retried with exponential backoff until
    ``policy.max_attempts`` is reached. The only exception that escapes is
    ``GenerationFailedError``.
    """
    policy = policy or RetryPolicy()
    state = RetryState(max_attempts=policy.max_attempts)

    def _before_sleep(retry_state: RetryCallState) -> None:
        state.last_delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        classification = classify_error(state.last_error)
        logger.info(
            "Attempt %d/%d failed (%s), retrying in %.1fs",
            state.attempt,
            state.max_attempts,
            classification.kind.value,
            state.last_delay,
        )

    retrying = AsyncRetrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=lambda retry_state: policy.delay_after(retry_state.attempt_number),
        retry=retry_if_exception(lambda exc: classify_error(exc).retryable),
        before_sleep=_before_sleep,
        sleep=sleep,
        reraise=True,
    )

    try:
        async for attempt in retrying:
            with attempt:
                state.attempt += 1
                if on_attempt:
                    on_attempt(state)
                try:
                    return await operation()
                except Exception as exc:
                    state.last_error = exc
                    raise
    except GenerationFailedError:
        raise
    except Exception as exc:
        classification = classify_error(exc)
        logger.warning(
            "Generation failed after %d attempt(s): %s (%s)",
            state.attempt,
            classification.message,
            classification.kind.value,
        )
        raise GenerationFailedError(classification, attempts=state.attempt) from exc
