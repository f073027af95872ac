"""
Package: ezhook
Description: Webhook message builder and delivery client.

Builds size-checked webhook payloads (content, rich embeds) and
delivers them with bounded retries, exponential backoff with jitter,
rate-limit hint handling, per-attempt timeout and cancellation.
"""

from .client.webhook import Webhook
from .delivery.engine import DeliveryEngine
from .delivery.retry import RetryPolicy
from .errors import (
    EzHookError,
    RateLimitError,
    ValidationError,
    WebhookError,
    WebhookNotFoundError,
    raise_for_outcome,
)
from .models import (
    DeliveryOutcome,
    Embed,
    EmbedAuthor,
    EmbedField,
    EmbedFooter,
    EmbedImage,
    EmbedProvider,
    EmbedThumbnail,
    EmbedVideo,
    RequestOptions,
    WebhookMessage,
    WebhookModification,
)
from .utils.logger import configure_logging

__version__ = "0.3.0"

__all__ = [
    "Webhook",
    "DeliveryEngine",
    "RetryPolicy",
    "DeliveryOutcome",
    "RequestOptions",
    "Embed",
    "EmbedAuthor",
    "EmbedField",
    "EmbedFooter",
    "EmbedImage",
    "EmbedProvider",
    "EmbedThumbnail",
    "EmbedVideo",
    "WebhookMessage",
    "WebhookModification",
    "EzHookError",
    "ValidationError",
    "WebhookError",
    "RateLimitError",
    "WebhookNotFoundError",
    "raise_for_outcome",
    "configure_logging",
]
