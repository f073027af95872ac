"""
Module: webhook.py
Description: High-level webhook client.

Assembles a WebhookMessage through chainable setters, validates it
against provider limits and hands it to the DeliveryEngine.

Key Components:
- Webhook: Message builder plus send / modify / get / is_valid

Dependencies: ezhook.delivery, ezhook.models, ezhook.config
"""

from typing import Any, Mapping, Optional, Union

from ezhook.config.settings import Settings, settings as default_settings
from ezhook.delivery.engine import DeliveryEngine, OptionsLike
from ezhook.delivery.retry import RetryPolicy
from ezhook.errors import ValidationError
from ezhook.models.embed import Embed
from ezhook.models.limits import CONTENT_MAX_LENGTH, EMBEDS_MAX_COUNT, check_length
from ezhook.models.message import WebhookMessage, WebhookModification
from ezhook.models.outcome import DeliveryOutcome
from ezhook.utils.logger import get_logger

logger = get_logger(__name__)


class Webhook:
    """
    Client for a single webhook URL.

    Example:
        >>> webhook = Webhook(url, {"max_retries": 5})
        >>> webhook.set_username("Deploy Bot").set_content("Deploy finished")
        >>> outcome = await webhook.send()
        >>> outcome.ok
        True
    """

    def __init__(
        self,
        webhook_url: str,
        retry_policy: Union[RetryPolicy, Mapping[str, Any], None] = None,
        **engine_kwargs: Any
    ):
        """
        Initialize the webhook client.

        Args:
            webhook_url: Webhook URL
            retry_policy: Full policy or partial overrides merged over the defaults
            **engine_kwargs: Passed through to DeliveryEngine (timeout_ms, transport, ...)
        """
        self.engine = DeliveryEngine(webhook_url, retry_policy, **engine_kwargs)
        self.message = WebhookMessage()

    @classmethod
    def from_settings(
        cls,
        webhook_url: str,
        config: Optional[Settings] = None,
        **engine_kwargs: Any
    ) -> 'Webhook':
        """Build a client whose retry policy, timeout and User-Agent come from settings."""
        config = config or default_settings
        engine_kwargs.setdefault("timeout_ms", config.timeout_ms)
        engine_kwargs.setdefault("user_agent", config.user_agent)
        return cls(webhook_url, config.retry_policy(), **engine_kwargs)

    @property
    def webhook_url(self) -> str:
        return self.engine.webhook_url

    def set_username(self, username: str) -> 'Webhook':
        self.message.username = username
        return self

    def set_avatar_url(self, url: str) -> 'Webhook':
        self.message.avatar_url = url
        return self

    def set_tts(self, flag: bool) -> 'Webhook':
        self.message.tts = flag
        return self

    def set_content(self, content: str) -> 'Webhook':
        """Set the message text (up to 2000 characters)."""
        check_length(content, CONTENT_MAX_LENGTH, "content", "Content length")
        self.message.content = content
        return self

    def add_embed(self, embed: Embed) -> 'Webhook':
        """Append an embed (up to 10 per message)."""
        embeds = list(self.message.embeds or [])
        if len(embeds) >= EMBEDS_MAX_COUNT:
            raise ValidationError(
                f"Embeds length exceeds {EMBEDS_MAX_COUNT}",
                field="embeds",
                max_length=EMBEDS_MAX_COUNT
            )
        embeds.append(embed)
        self.message.embeds = embeds
        return self

    def validate(self) -> None:
        """Raise ValidationError if the message breaks a provider limit."""
        self.message.validate_limits()

    def to_payload(self) -> dict:
        return self.message.to_payload()

    async def send(self, options: OptionsLike = None) -> DeliveryOutcome:
        """
        Validate and POST the assembled message.

        Raises:
            ValidationError: If the message breaks a provider limit
        """
        self.validate()
        return await self.engine.send("POST", self.message, options)

    async def modify(
        self,
        modification: Union[WebhookModification, Mapping[str, Any]],
        options: OptionsLike = None
    ) -> DeliveryOutcome:
        """PATCH the webhook's own settings (name, avatar, channel)."""
        if not isinstance(modification, WebhookModification):
            modification = WebhookModification.model_validate(dict(modification))
        return await self.engine.send("PATCH", modification, options)

    async def get(self, options: OptionsLike = None) -> DeliveryOutcome:
        """GET the webhook resource; the body is in outcome.response_body."""
        return await self.engine.send("GET", None, options)

    async def is_valid(self) -> bool:
        """Check, with a single attempt, whether the webhook URL answers 2xx."""
        check_engine = self.engine.with_retry_policy(RetryPolicy(max_retries=0))
        outcome = await check_engine.send("GET")
        logger.debug("Webhook validity checked", status_code=outcome.status_code)
        return outcome.ok

    def get_retry_policy(self) -> RetryPolicy:
        return self.engine.retry_policy
