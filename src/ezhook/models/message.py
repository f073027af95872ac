"""
Module: message.py
Description: Webhook message and modification payload models.

Key Components:
- WebhookMessage: POST body (content, identity overrides, embeds)
- WebhookModification: PATCH body for renaming / re-avatar-ing a webhook

Dependencies: pydantic, typing
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ezhook.models.embed import Embed, check_field
from ezhook.models.limits import (
    CONTENT_MAX_LENGTH,
    DESCRIPTION_MAX_LENGTH,
    EMBEDS_MAX_COUNT,
    FIELDS_MAX_COUNT,
    TITLE_MAX_LENGTH,
    check_length,
)


class WebhookMessage(BaseModel):
    """
    Message delivered by a webhook POST.

    Attributes:
        username: Overrides the webhook's default username
        avatar_url: Overrides the webhook's default avatar
        tts: Whether the message is read aloud
        content: Message text (up to 2000 characters)
        embeds: Rich content blocks (up to 10)
    """

    model_config = ConfigDict(validate_assignment=True)

    username: Optional[str] = None
    avatar_url: Optional[str] = None
    tts: Optional[bool] = None
    content: Optional[str] = Field(default=None, max_length=CONTENT_MAX_LENGTH)
    embeds: Optional[List[Embed]] = Field(default=None, max_length=EMBEDS_MAX_COUNT)

    def validate_limits(self) -> None:
        """
        Re-check every provider limit on the assembled message.

        Catches violations introduced by mutating nested objects in
        place, which bypasses assignment validation.

        Raises:
            ValidationError: On the first violated limit
        """
        check_length(self.content, CONTENT_MAX_LENGTH, "content", "Content length")
        check_length(self.embeds, EMBEDS_MAX_COUNT, "embeds", "Embeds length")

        for embed in self.embeds or []:
            check_length(embed.title, TITLE_MAX_LENGTH, "title", "Title length")
            check_length(
                embed.description, DESCRIPTION_MAX_LENGTH, "description", "Description length"
            )
            check_length(embed.fields, FIELDS_MAX_COUNT, "fields", "Fields length")
            for field in embed.fields or []:
                check_field(field.name, field.value)

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready representation with unset values dropped."""
        return self.model_dump(mode="json", exclude_none=True)


class WebhookModification(BaseModel):
    """Fields accepted when modifying the webhook itself (PATCH)."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    avatar: Optional[str] = Field(default=None, description="Image data URI")
    channel_id: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
