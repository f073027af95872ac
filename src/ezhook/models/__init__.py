"""
Module: models
Description: Package initialization for Pydantic data models.

This package contains all data models used by ezhook:
- DeliveryOutcome / RequestOptions: delivery result and per-call options
- Embed and its sub-objects: rich content blocks
- WebhookMessage / WebhookModification: POST and PATCH payloads
"""

from .outcome import DeliveryOutcome, RequestOptions
from .embed import (
    Embed,
    EmbedAuthor,
    EmbedField,
    EmbedFooter,
    EmbedImage,
    EmbedProvider,
    EmbedThumbnail,
    EmbedVideo,
)
from .message import WebhookMessage, WebhookModification

__all__ = [
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
]
