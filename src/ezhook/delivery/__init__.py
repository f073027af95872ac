"""
Package: delivery
Description: Webhook delivery mechanisms.

Provides the HTTP delivery engine and the retry policy / backoff
strategy it uses for transient failures.
"""

from .engine import DeliveryEngine
from .retry import RetryPolicy, compute_backoff, is_retryable, parse_retry_after

__all__ = [
    "DeliveryEngine",
    "RetryPolicy",
    "compute_backoff",
    "is_retryable",
    "parse_retry_after",
]
