"""
Module: limits.py
Description: Provider size and count limits for webhook payloads.
"""

from typing import Optional, Sized

from ezhook.errors import ValidationError

CONTENT_MAX_LENGTH = 2000
EMBEDS_MAX_COUNT = 10
TITLE_MAX_LENGTH = 256
DESCRIPTION_MAX_LENGTH = 4096
FIELDS_MAX_COUNT = 25
FIELD_NAME_MAX_LENGTH = 256
FIELD_VALUE_MAX_LENGTH = 1024


def check_length(value: Optional[Sized], limit: int, field: str, label: str) -> None:
    """
    Raise ValidationError if value is longer than limit.

    Args:
        value: String or collection to measure (None passes)
        limit: Maximum allowed length
        field: Field name reported on the error
        label: Human-readable name used in the message
    """
    if value is None:
        return
    if len(value) > limit:
        raise ValidationError(
            f"{label} exceeds {limit}",
            field=field,
            max_length=limit,
            actual_length=len(value)
        )
