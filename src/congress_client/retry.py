from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from .config import ClientConfig
from .dispatcher import Dispatcher, RawResponse
from .envelope import RequestDescriptor
from .errors import CongressApiError
from .normalizer import classify
from .utils import LOGGER_NAME

Sleep = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    backoff_base: float = 0.5
    backoff_cap: float = 60.0
    jitter: float = 0.2

    @classmethod
    def from_config(cls, config: ClientConfig) -> "RetryPolicy":
        return cls(
            max_attempts=config.max_attempts,
            backoff_base=config.backoff_base,
            backoff_cap=config.backoff_cap,
            jitter=config.jitter,
        )

    def delay_before(self, attempt: int, rng: random.Random) -> float:
        """
        Seconds to wait before ``attempt`` (1-indexed, so the first retry is 2).

        base * 2**(attempt-2), spread by +/- jitter, then capped.
        """
        delay = self.backoff_base * (2 ** max(0, attempt - 2))
        if self.jitter:
            delay *= rng.uniform(1.0 - self.jitter, 1.0 + self.jitter)
        return max(0.0, min(self.backoff_cap, delay))


@dataclass
class RetryState:
    attempt: int
    max_attempts: int
    next_delay: float = 0.0

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts


class RetryEngine:
    """
    Runs one logical call through the dispatcher, re-attempting transient failures.

    Only errors the normalizer classifies as retryable (429 and 5xx) are tried
    again. When the budget runs out the last classified error is returned as it
    was classified. Waiting happens through ``sleep`` (``asyncio.sleep`` by
    default), so a backoff only pauses the call that is backing off, and
    cancelling that call while it sleeps means no further attempt is made.
    """

    def __init__(self, dispatcher: Dispatcher, policy: RetryPolicy, *,
                 sleep: Optional[Sleep] = None, rng: Optional[random.Random] = None,
                 logger: Optional[logging.Logger] = None):
        self.dispatcher = dispatcher
        self.policy = policy
        self.sleep = sleep or asyncio.sleep
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    async def execute(self, descriptor: RequestDescriptor) -> Union[RawResponse, CongressApiError]:
        state = RetryState(attempt=0, max_attempts=self.policy.max_attempts)
        while True:
            state.attempt += 1
            outcome = await self.dispatcher.send(descriptor)
            if isinstance(outcome, RawResponse):
                return outcome

            error = classify(outcome)
            if not error.retryable:
                return error
            if state.exhausted:
                self.logger.warning(
                    f"Giving up on /{descriptor.path} after {state.attempt} attempts: {error}")
                return error

            if error.retry_after:
                state.next_delay = error.retry_after
            else:
                state.next_delay = self.policy.delay_before(state.attempt + 1, self.rng)
            self.logger.warning(
                f"API request to /{descriptor.path} failed with {error} "
                f"(attempt {state.attempt}/{state.max_attempts}); retrying in {state.next_delay:.2f}s")
            await self.sleep(state.next_delay)
