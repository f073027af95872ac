"""
Module: delivery/retry.py
Description: Retry policy and backoff strategy for webhook delivery.

Implements exponential backoff with symmetric jitter, rate-limit
hint parsing and the tenacity wait/retry hooks used by the
delivery engine.
"""

import math
import random
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from tenacity import RetryCallState
from tenacity.wait import wait_base

from ezhook.models.outcome import DeliveryOutcome
from ezhook.utils.logger import get_logger

logger = get_logger(__name__)

RATE_LIMIT_STATUS = 429
JITTER_RATIO = 0.2
# 2.0 ** 1024 overflows a float
MAX_BACKOFF_EXPONENT = 1023

RETRY_HINT_HEADERS = ("retry-after", "x-ratelimit-reset-after")


class RetryPolicy(BaseModel):
    """
    Retry budget and backoff bounds for one delivery engine.

    Immutable once built. Partial overrides are merged over the
    defaults (3 retries, 1s base delay, 60s cap).

    Attributes:
        max_retries: Automatic re-attempts after the first attempt
        base_delay_ms: Delay of the zeroth backoff step in milliseconds
        max_delay_ms: Cap applied to the exponential term in milliseconds
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    max_retries: int = Field(default=3, ge=0, alias="maxRetries")
    base_delay_ms: float = Field(default=1000, gt=0, alias="baseDelay")
    max_delay_ms: float = Field(default=60000, gt=0, alias="maxDelay")

    @model_validator(mode='after')
    def check_delay_bounds(self) -> 'RetryPolicy':
        """Reject a cap below the base delay."""
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError(
                f"max_delay_ms ({self.max_delay_ms}) must be >= "
                f"base_delay_ms ({self.base_delay_ms})"
            )
        return self

    @classmethod
    def merged(
        cls,
        overrides: Union['RetryPolicy', Mapping[str, Any], None] = None
    ) -> 'RetryPolicy':
        """
        Merge caller overrides over the default policy.

        Args:
            overrides: A complete policy, a partial mapping, or None

        Returns:
            The effective RetryPolicy

        Raises:
            pydantic.ValidationError: If a value is out of range
        """
        if overrides is None:
            return cls()
        if isinstance(overrides, RetryPolicy):
            return overrides
        return cls.model_validate(dict(overrides))


def parse_retry_after(headers: Mapping[str, str]) -> Optional[float]:
    """
    Extract the rate-limit hint from response headers.

    Prefers retry-after and falls back to x-ratelimit-reset-after.
    Both are read as (fractional) seconds.

    Args:
        headers: Response headers (httpx.Headers or any mapping)

    Returns:
        Hint in milliseconds, or None when absent or not a finite positive number
    """
    lowered = {key.lower(): value for key, value in headers.items()}
    raw = None
    for name in RETRY_HINT_HEADERS:
        if name in lowered:
            raw = lowered[name]
            break

    if raw is None:
        return None

    try:
        seconds = float(raw)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparseable retry hint", value=raw)
        return None

    if not math.isfinite(seconds) or seconds <= 0:
        return None
    return seconds * 1000


def compute_backoff(
    policy: RetryPolicy,
    retry_number: int,
    rng: Callable[[float, float], float] = random.uniform
) -> float:
    """
    Compute the delay before the given retry.

    exponential = min(max_delay, base_delay * 2 ** retry_number)
    delay = max(0, exponential + exponential * 0.2 * uniform(-0.5, 0.5))

    Args:
        policy: Active retry policy
        retry_number: 1 for the first retry, 2 for the second, ...
        rng: Uniform random source, injectable for tests

    Returns:
        Delay in milliseconds
    """
    exponent = min(retry_number, MAX_BACKOFF_EXPONENT)
    exponential = min(policy.max_delay_ms, policy.base_delay_ms * 2.0 ** exponent)
    jitter = exponential * JITTER_RATIO * rng(-0.5, 0.5)
    return max(0.0, exponential + jitter)


def is_retryable(outcome: DeliveryOutcome) -> bool:
    """Rate limits, transport failures and 5xx responses are retried."""
    status = outcome.status_code
    return (
        status == RATE_LIMIT_STATUS
        or outcome.is_transport_failure
        or 500 <= status < 600
    )


class wait_backoff_or_retry_after(wait_base):
    """
    Tenacity wait strategy for webhook delivery.

    A 429 outcome carrying a retry hint waits exactly that long; every
    other retry waits the jittered exponential backoff.
    """

    def __init__(
        self,
        policy: RetryPolicy,
        rng: Callable[[float, float], float] = random.uniform
    ):
        self.policy = policy
        self.rng = rng

    def delay_ms(self, outcome: DeliveryOutcome, retry_number: int) -> float:
        if outcome.status_code == RATE_LIMIT_STATUS and outcome.retry_after_ms is not None:
            return outcome.retry_after_ms
        return compute_backoff(self.policy, retry_number, self.rng)

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome.result()
        # attempt_number counts finished attempts, i.e. the retry about to start
        return self.delay_ms(outcome, retry_state.attempt_number) / 1000
