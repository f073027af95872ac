"""
Module: embed.py
Description: Rich embed models for webhook messages.

Defines the embed block and its nested sub-objects with the provider
limits enforced both by pydantic constraints and by the builder
methods, which raise ezhook.errors.ValidationError.

Key Components:
- Embed: Rich content block with chainable setters
- EmbedField, EmbedFooter, EmbedAuthor, EmbedProvider: Text sub-objects
- EmbedImage, EmbedThumbnail, EmbedVideo: Media sub-objects

Dependencies: pydantic, datetime, typing
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from ezhook.errors import ValidationError
from ezhook.models.limits import (
    DESCRIPTION_MAX_LENGTH,
    FIELD_NAME_MAX_LENGTH,
    FIELD_VALUE_MAX_LENGTH,
    FIELDS_MAX_COUNT,
    TITLE_MAX_LENGTH,
    check_length,
)


class EmbedFooter(BaseModel):
    """Footer line of an embed."""

    text: str = Field(..., max_length=2048)
    icon_url: Optional[str] = None
    proxy_icon_url: Optional[str] = None


class EmbedMedia(BaseModel):
    """Image-like attachment referenced by URL."""

    url: str
    height: Optional[int] = Field(default=None, ge=0)
    width: Optional[int] = Field(default=None, ge=0)


class EmbedImage(EmbedMedia):
    pass


class EmbedThumbnail(EmbedMedia):
    pass


class EmbedVideo(EmbedMedia):
    pass


class EmbedProvider(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None


class EmbedAuthor(BaseModel):
    name: str = Field(..., max_length=256)
    url: Optional[str] = None
    icon_url: Optional[str] = None


class EmbedField(BaseModel):
    """
    Name/value pair displayed inside an embed.

    Attributes:
        name: Field title (up to 256 characters)
        value: Field body (required, up to 1024 characters)
        inline: Whether the field may share a row with its neighbours
    """

    name: str = Field(..., max_length=FIELD_NAME_MAX_LENGTH)
    value: str = Field(..., min_length=1, max_length=FIELD_VALUE_MAX_LENGTH)
    inline: bool = False


def check_field(name: Optional[str], value: Optional[str]) -> None:
    """Validate one embed field's name and value."""
    check_length(name, FIELD_NAME_MAX_LENGTH, "field.name", "Field name length")
    if not value:
        raise ValidationError("Field value is required", field="field.value")
    check_length(value, FIELD_VALUE_MAX_LENGTH, "field.value", "Field value length")


class Embed(BaseModel):
    """
    Embedded rich content for a webhook message.

    Setters validate provider limits, raise ValidationError on
    violation and return the embed for chaining.

    Example:
        >>> embed = (
        ...     Embed()
        ...     .set_title("Deploy finished")
        ...     .set_color("#00ff00")
        ...     .add_field("Service", "api", inline=True)
        ... )
        >>> embed.to_payload()["type"]
        'rich'
    """

    model_config = ConfigDict(validate_assignment=True)

    title: Optional[str] = Field(default=None, max_length=TITLE_MAX_LENGTH)
    type: Literal["rich"] = "rich"
    url: Optional[str] = None
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    timestamp: Optional[str] = Field(default=None, description="ISO 8601 timestamp")
    color: Optional[int] = Field(default=None, ge=0, le=0xFFFFFF)
    footer: Optional[EmbedFooter] = None
    image: Optional[EmbedImage] = None
    thumbnail: Optional[EmbedThumbnail] = None
    video: Optional[EmbedVideo] = None
    provider: Optional[EmbedProvider] = None
    author: Optional[EmbedAuthor] = None
    fields: Optional[List[EmbedField]] = Field(default=None, max_length=FIELDS_MAX_COUNT)

    def set_title(self, title: str) -> 'Embed':
        check_length(title, TITLE_MAX_LENGTH, "title", "Title length")
        self.title = title
        return self

    def set_url(self, url: str) -> 'Embed':
        self.url = url
        return self

    def set_description(self, description: str) -> 'Embed':
        check_length(description, DESCRIPTION_MAX_LENGTH, "description", "Description length")
        self.description = description
        return self

    def set_timestamp(self, date: Optional[datetime] = None) -> 'Embed':
        """Set the embed timestamp, defaulting to now (UTC)."""
        self.timestamp = (date or datetime.now(timezone.utc)).isoformat()
        return self

    def set_color(self, color: Union[int, str]) -> 'Embed':
        """
        Set the embed color.

        Args:
            color: Integer RGB value or hex string such as "#ff0000"

        Raises:
            ValidationError: If the color is not a valid 24-bit RGB value
        """
        if isinstance(color, str):
            try:
                color = int(color.lstrip('#'), 16)
            except ValueError:
                raise ValidationError(f"Invalid color: {color!r}", field="color")
        if not 0 <= color <= 0xFFFFFF:
            raise ValidationError(f"Color out of range: {color}", field="color")
        self.color = color
        return self

    def set_footer(
        self,
        footer: Union[EmbedFooter, str],
        icon_url: Optional[str] = None,
        proxy_icon_url: Optional[str] = None
    ) -> 'Embed':
        if isinstance(footer, str):
            footer = EmbedFooter(text=footer, icon_url=icon_url, proxy_icon_url=proxy_icon_url)
        self.footer = footer
        return self

    def set_image(
        self,
        image: Union[EmbedImage, str],
        height: Optional[int] = None,
        width: Optional[int] = None
    ) -> 'Embed':
        if isinstance(image, str):
            image = EmbedImage(url=image, height=height, width=width)
        self.image = image
        return self

    def set_thumbnail(
        self,
        thumbnail: Union[EmbedThumbnail, str],
        height: Optional[int] = None,
        width: Optional[int] = None
    ) -> 'Embed':
        if isinstance(thumbnail, str):
            thumbnail = EmbedThumbnail(url=thumbnail, height=height, width=width)
        self.thumbnail = thumbnail
        return self

    def set_video(
        self,
        video: Union[EmbedVideo, str],
        height: Optional[int] = None,
        width: Optional[int] = None
    ) -> 'Embed':
        if isinstance(video, str):
            video = EmbedVideo(url=video, height=height, width=width)
        self.video = video
        return self

    def set_provider(self, provider: Union[EmbedProvider, str], url: Optional[str] = None) -> 'Embed':
        if isinstance(provider, str):
            provider = EmbedProvider(name=provider, url=url)
        self.provider = provider
        return self

    def set_author(
        self,
        author: Union[EmbedAuthor, str],
        url: Optional[str] = None,
        icon_url: Optional[str] = None
    ) -> 'Embed':
        if isinstance(author, str):
            author = EmbedAuthor(name=author, url=url, icon_url=icon_url)
        self.author = author
        return self

    def add_field(
        self,
        field: Union[EmbedField, str],
        value: Optional[str] = None,
        inline: bool = False
    ) -> 'Embed':
        """
        Append a field to the embed.

        Args:
            field: EmbedField instance, or the field name
            value: Field value when field is a name
            inline: Inline flag when field is a name

        Raises:
            ValidationError: If the embed already has 25 fields or the
                name/value violate their limits
        """
        current = list(self.fields or [])
        if len(current) >= FIELDS_MAX_COUNT:
            raise ValidationError(
                f"Fields length exceeds {FIELDS_MAX_COUNT}",
                field="fields",
                max_length=FIELDS_MAX_COUNT
            )

        if isinstance(field, EmbedField):
            check_field(field.name, field.value)
        else:
            check_field(field, value)
            field = EmbedField(name=field, value=value, inline=inline)

        current.append(field)
        self.fields = current
        return self

    def set_fields(self, fields: List[EmbedField]) -> 'Embed':
        """Replace all fields at once (up to 25)."""
        check_length(fields, FIELDS_MAX_COUNT, "fields", "Fields length")
        for field in fields:
            check_field(field.name, field.value)
        self.fields = list(fields)
        return self

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready representation with unset values dropped."""
        return self.model_dump(mode="json", exclude_none=True)
