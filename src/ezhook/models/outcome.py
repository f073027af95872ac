"""
Module: outcome.py
Description: Delivery result and per-call option models.

Key Components:
- DeliveryOutcome: Uniform result of one top-level send() call
- RequestOptions: Per-call headers, cancellation event and timeout

Dependencies: pydantic, asyncio, typing
"""

import asyncio
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

TRANSPORT_FAILURE_STATUS = 0


class DeliveryOutcome(BaseModel):
    """
    Result of delivering one payload to the webhook endpoint.

    A status_code of 0 means no HTTP response was obtained (network
    error, timeout or cancellation). ok is True exactly when
    status_code is in the 2xx range.

    Attributes:
        ok: Whether the terminating attempt returned 2xx
        status_code: HTTP status of the terminating attempt, 0 for transport failure
        retry_after_ms: Rate-limit hint sent by the provider, in milliseconds
        response_body: Response body text, if any
        error_message: Failure description for unsuccessful outcomes
    """

    model_config = ConfigDict(frozen=True)

    ok: bool = Field(..., description="True iff status_code is 2xx")
    status_code: int = Field(..., ge=0, description="HTTP status, 0 for transport failure")
    retry_after_ms: Optional[float] = Field(
        default=None,
        description="Provider-requested wait in milliseconds"
    )
    response_body: Optional[str] = Field(default=None, description="Response body text")
    error_message: Optional[str] = Field(default=None, description="Failure description")

    @model_validator(mode='after')
    def check_ok_matches_status(self) -> 'DeliveryOutcome':
        """Keep ok consistent with the status code."""
        if self.ok != (200 <= self.status_code < 300):
            raise ValueError(
                f"ok={self.ok} is inconsistent with status_code={self.status_code}"
            )
        return self

    @property
    def is_transport_failure(self) -> bool:
        return self.status_code == TRANSPORT_FAILURE_STATUS

    @classmethod
    def transport_failure(cls, message: str) -> 'DeliveryOutcome':
        """Build the outcome for an attempt that produced no HTTP response."""
        return cls(
            ok=False,
            status_code=TRANSPORT_FAILURE_STATUS,
            error_message=message or "Network error"
        )


class RequestOptions(BaseModel):
    """
    Per-call options for a single send() and its internal retries.

    Attributes:
        cancel_event: Event that aborts the in-flight attempt once set
        headers: Extra headers layered over the defaults (caller wins)
        timeout_ms: Per-attempt timeout in milliseconds
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    cancel_event: Optional[asyncio.Event] = Field(
        default=None,
        description="Cancellation signal for the in-flight attempt"
    )
    headers: Dict[str, str] = Field(
        default_factory=dict,
        description="Extra request headers"
    )
    timeout_ms: Optional[float] = Field(
        default=None,
        gt=0,
        description="Per-attempt timeout in milliseconds"
    )
