"""
Module: delivery/engine.py
Description: Webhook delivery engine.

Turns a payload into an HTTP call against a single webhook URL,
classifies the response and drives a bounded retry loop with
exponential backoff, jitter, per-attempt timeout and cancellation.

Key Components:
- DeliveryEngine: send() entry point returning a DeliveryOutcome
- Response classification (success / retryable / terminal)
- Per-attempt timeout and cancellation racing

Dependencies: httpx, tenacity, pydantic, asyncio
"""

import asyncio
import json
import random
from typing import Any, Awaitable, Callable, Mapping, Optional, Union

import httpx
from pydantic import BaseModel
from tenacity import AsyncRetrying, RetryCallState, retry_if_result, stop_after_attempt

from ezhook.delivery.retry import (
    RetryPolicy,
    is_retryable,
    parse_retry_after,
    wait_backoff_or_retry_after,
)
from ezhook.models.outcome import DeliveryOutcome, RequestOptions
from ezhook.utils.logger import get_logger

logger = get_logger(__name__)

ALLOWED_METHODS = ("GET", "POST", "PATCH")

OptionsLike = Union[RequestOptions, Mapping[str, Any], None]


class DeliveryEngine:
    """
    HTTP delivery engine for one webhook URL.

    Retry state lives in the per-call tenacity controller, so one engine
    can serve overlapping send() calls. Each attempt opens its own
    short-lived httpx.AsyncClient.

    Attributes:
        webhook_url: Destination URL for every request
        retry_policy: Effective (merged, immutable) retry policy
        timeout_ms: Default per-attempt timeout, overridable per call

    Example:
        >>> engine = DeliveryEngine(url, {"max_retries": 2})
        >>> outcome = await engine.send("POST", {"content": "hi"})
        >>> outcome.ok
        True
    """

    def __init__(
        self,
        webhook_url: str,
        retry_policy: Union[RetryPolicy, Mapping[str, Any], None] = None,
        *,
        timeout_ms: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        rng: Callable[[float, float], float] = random.uniform
    ):
        """
        Initialize the delivery engine.

        Args:
            webhook_url: Webhook URL for delivery
            retry_policy: Full policy or partial overrides merged over the defaults
            timeout_ms: Default per-attempt timeout in milliseconds
            user_agent: Optional User-Agent header value
            transport: Optional httpx transport (tests, proxies)
            sleep: Coroutine used for backoff waits, defaults to asyncio.sleep
            rng: Uniform random source for jitter

        Raises:
            ValueError: If webhook_url is invalid or timeout_ms is not positive
            pydantic.ValidationError: If the retry policy is out of range
        """
        if not webhook_url or not isinstance(webhook_url, str):
            raise ValueError("webhook_url must be a non-empty string")
        if not webhook_url.startswith(('http://', 'https://')):
            raise ValueError("webhook_url must be a valid HTTP/HTTPS URL")
        if timeout_ms is not None and timeout_ms <= 0:
            raise ValueError("timeout_ms must be positive")

        self.webhook_url = webhook_url
        self.timeout_ms = timeout_ms
        self.user_agent = user_agent
        self._retry_policy = RetryPolicy.merged(retry_policy)
        self._transport = transport
        self._sleep = sleep or asyncio.sleep
        self._rng = rng

        logger.info(
            "Delivery engine initialized",
            host=httpx.URL(webhook_url).host,
            max_retries=self._retry_policy.max_retries,
            base_delay_ms=self._retry_policy.base_delay_ms,
            max_delay_ms=self._retry_policy.max_delay_ms
        )

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    def with_retry_policy(
        self,
        retry_policy: Union[RetryPolicy, Mapping[str, Any], None]
    ) -> 'DeliveryEngine':
        """Copy of this engine sharing everything but the retry policy."""
        return DeliveryEngine(
            self.webhook_url,
            retry_policy,
            timeout_ms=self.timeout_ms,
            user_agent=self.user_agent,
            transport=self._transport,
            sleep=self._sleep,
            rng=self._rng
        )

    async def send(
        self,
        method: str,
        payload: Any = None,
        options: OptionsLike = None
    ) -> DeliveryOutcome:
        """
        Deliver a payload, retrying transient failures.

        Rate limits (429), transport failures and 5xx responses are
        retried up to max_retries times. Other statuses end the call
        immediately. HTTP and network failures are reported in the
        returned outcome, never raised.

        Args:
            method: GET, POST or PATCH
            payload: JSON-serializable body, ignored for GET
            options: RequestOptions or an equivalent mapping

        Returns:
            DeliveryOutcome of the attempt that ended the loop

        Raises:
            ValueError: If the method is unsupported
            TypeError: If the payload cannot be JSON-encoded
            pydantic.ValidationError: If options are malformed
        """
        method = self._normalize_method(method)
        request_options = self._coerce_options(options)
        body = None if method == "GET" else self._encode(payload)
        headers = self._build_headers(method, request_options.headers)
        timeout_ms = request_options.timeout_ms or self.timeout_ms

        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._retry_policy.max_retries + 1),
            wait=wait_backoff_or_retry_after(self._retry_policy, self._rng),
            retry=retry_if_result(is_retryable),
            sleep=self._sleep,
            before_sleep=self._log_retry,
            retry_error_callback=self._on_retries_exhausted,
        )

        outcome = await retrying(
            self._attempt,
            method,
            body,
            headers,
            request_options.cancel_event,
            timeout_ms
        )

        if outcome.ok:
            logger.info(
                "Webhook delivered",
                method=method,
                status_code=outcome.status_code
            )
        else:
            logger.warning(
                "Webhook delivery failed",
                method=method,
                status_code=outcome.status_code,
                error=outcome.error_message
            )
        return outcome

    async def _attempt(
        self,
        method: str,
        body: Optional[bytes],
        headers: httpx.Headers,
        cancel_event: Optional[asyncio.Event],
        timeout_ms: Optional[float]
    ) -> DeliveryOutcome:
        """Run one HTTP exchange raced against timeout and cancellation."""
        logger.debug("Attempting webhook delivery", method=method)

        request_task = asyncio.ensure_future(self._exchange(method, body, headers))
        waiters = {request_task}
        cancel_task = None
        if cancel_event is not None:
            cancel_task = asyncio.ensure_future(cancel_event.wait())
            waiters.add(cancel_task)

        try:
            done, _ = await asyncio.wait(
                waiters,
                timeout=timeout_ms / 1000 if timeout_ms else None,
                return_when=asyncio.FIRST_COMPLETED
            )

            if request_task in done:
                try:
                    response = request_task.result()
                except httpx.HTTPError as e:
                    return DeliveryOutcome.transport_failure(str(e))
                except Exception as e:
                    # Transports may raise plain OSErrors outside httpx's hierarchy
                    return DeliveryOutcome.transport_failure(str(e))
                return self._classify(response)

            if cancel_task is not None and cancel_task in done:
                return DeliveryOutcome.transport_failure("Request cancelled")

            return DeliveryOutcome.transport_failure(
                f"Request timed out after {timeout_ms:g}ms"
            )

        finally:
            pending = [task for task in waiters if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

    async def _exchange(
        self,
        method: str,
        body: Optional[bytes],
        headers: httpx.Headers
    ) -> httpx.Response:
        # Timeouts are enforced by _attempt, not by httpx
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=httpx.Timeout(None)
        ) as client:
            return await client.request(
                method,
                self.webhook_url,
                content=body,
                headers=headers
            )

    @staticmethod
    def _classify(response: httpx.Response) -> DeliveryOutcome:
        """Shape an HTTP response into a DeliveryOutcome."""
        text = response.text or None
        retry_after_ms = parse_retry_after(response.headers)

        if response.is_success:
            return DeliveryOutcome(
                ok=True,
                status_code=response.status_code,
                retry_after_ms=retry_after_ms,
                response_body=text
            )

        return DeliveryOutcome(
            ok=False,
            status_code=response.status_code,
            retry_after_ms=retry_after_ms,
            response_body=text,
            error_message=text or response.reason_phrase or f"HTTP {response.status_code}"
        )

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome.result()
        logger.warning(
            "Retrying webhook delivery",
            status_code=outcome.status_code,
            retry_number=retry_state.attempt_number,
            delay_ms=round(retry_state.next_action.sleep * 1000, 1),
            error=outcome.error_message
        )

    @staticmethod
    def _on_retries_exhausted(retry_state: RetryCallState) -> DeliveryOutcome:
        """Return the last classified outcome once the budget is spent."""
        logger.warning(
            "Retry budget exhausted",
            attempts=retry_state.attempt_number
        )
        return retry_state.outcome.result()

    @staticmethod
    def _normalize_method(method: str) -> str:
        if not isinstance(method, str) or method.upper() not in ALLOWED_METHODS:
            raise ValueError(f"method must be one of: {', '.join(ALLOWED_METHODS)}")
        return method.upper()

    @staticmethod
    def _coerce_options(options: OptionsLike) -> RequestOptions:
        if options is None:
            return RequestOptions()
        if isinstance(options, RequestOptions):
            return options
        return RequestOptions.model_validate(dict(options))

    @staticmethod
    def _encode(payload: Any) -> bytes:
        if isinstance(payload, BaseModel):
            payload = payload.model_dump(mode="json", exclude_none=True)
        return json.dumps(payload).encode("utf-8")

    def _build_headers(self, method: str, extra: Mapping[str, str]) -> httpx.Headers:
        """Default headers with caller headers layered on top (case-insensitive)."""
        headers = httpx.Headers()
        if method != "GET":
            headers["Content-Type"] = "application/json"
        if self.user_agent:
            headers["User-Agent"] = self.user_agent
        headers.update(extra)
        return headers
