"""
Module: errors.py
Description: Exception hierarchy for ezhook.

Delivery failures are returned as DeliveryOutcome values; callers that
prefer exceptions convert them with raise_for_outcome().

Key Components:
- EzHookError: Base class for all library errors
- ValidationError: Payload exceeds a provider size/count limit
- WebhookError, RateLimitError, WebhookNotFoundError: Failed deliveries
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ezhook.models.outcome import DeliveryOutcome


class EzHookError(Exception):
    """Base error for the ezhook library."""


class ValidationError(EzHookError, ValueError):
    """
    Raised when a payload violates a provider limit.

    Attributes:
        field: Dotted name of the offending field
        max_length: Limit that was exceeded, if any
        actual_length: Observed length or count, if known
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        max_length: Optional[int] = None,
        actual_length: Optional[int] = None
    ):
        super().__init__(message)
        self.field = field
        self.max_length = max_length
        self.actual_length = actual_length


class WebhookError(EzHookError):
    """
    Raised for a failed webhook request.

    Attributes:
        status_code: HTTP status, 0 when no response was received
        retry_after_ms: Provider-requested wait in milliseconds, if any
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        retry_after_ms: Optional[float] = None
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retry_after_ms = retry_after_ms


class RateLimitError(WebhookError):
    """Raised when the provider keeps answering 429."""

    def __init__(self, retry_after_ms: Optional[float] = None):
        super().__init__("Rate limit exceeded", 429, retry_after_ms)


class WebhookNotFoundError(WebhookError):
    """Raised when the webhook URL is unknown or was deleted."""

    def __init__(self):
        super().__init__("Webhook not found or invalid URL", 404)


def raise_for_outcome(outcome: "DeliveryOutcome") -> "DeliveryOutcome":
    """
    Raise the typed error matching a failed outcome.

    Args:
        outcome: Result of DeliveryEngine.send()

    Returns:
        The outcome unchanged when it is successful

    Raises:
        RateLimitError: For 429 outcomes
        WebhookNotFoundError: For 404 outcomes
        WebhookError: For every other failure, including transport failures
    """
    if outcome.ok:
        return outcome
    if outcome.status_code == 429:
        raise RateLimitError(outcome.retry_after_ms)
    if outcome.status_code == 404:
        raise WebhookNotFoundError()
    raise WebhookError(
        outcome.error_message or f"HTTP {outcome.status_code}",
        outcome.status_code,
        outcome.retry_after_ms
    )
