"""Retry with exponential backoff for Jira HTTP requests.

Used by the transport only. Callers above it (tool handlers, the user
resolver) never retry on their own.
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, Optional, Set

import httpx

from .exceptions import (
    JiraAPIError,
    JiraAuthError,
    JiraNotFoundError,
    JiraRateLimitError,
    JiraTimeoutError,
)

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES: Set[int] = {429, 500, 502, 503, 504}

AUTH_FAILURE_CODES: Set[int] = {401, 403}

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 1.0
DEFAULT_MAX_DELAY = 30.0

MAX_ERROR_BODY_CHARS = 500


async def retry_with_backoff(
    fn: Callable[..., Awaitable[Any]],
    *args: Any,
    operation: str = "",
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    **kwargs: Any,
) -> Any:
    """Execute an async request function, retrying transient failures.

    Retries HTTP 429/500/502/503/504 and httpx.ConnectError/TimeoutException
    with full-jitter exponential backoff (Retry-After wins on 429).
    401/403 and other 4xx responses are raised on the first attempt.

    Raises:
        JiraAuthError: On 401/403.
        JiraNotFoundError: On 404.
        JiraRateLimitError: On 429 after exhausting retries.
        JiraAPIError: On any other HTTP error status.
        JiraTimeoutError: On connection failure or timeout after exhausting retries.
    """
    for attempt in range(max_retries + 1):
        try:
            return await fn(*args, **kwargs)

        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            body = _response_body(exc.response)

            if status in AUTH_FAILURE_CODES:
                raise JiraAuthError(
                    f"Authentication failed: HTTP {status}. "
                    "Check ATLASSIAN_USER_EMAIL and ATLASSIAN_API_TOKEN.",
                    operation=operation,
                ) from exc

            if status in RETRYABLE_STATUS_CODES and attempt < max_retries:
                delay = _compute_delay(attempt, base_delay, max_delay, exc.response)
                logger.warning(
                    "Retryable HTTP %d from Jira%s (attempt %d/%d), waiting %.1fs",
                    status,
                    f" during {operation}" if operation else "",
                    attempt + 1,
                    max_retries,
                    delay,
                )
                await asyncio.sleep(delay)
                continue

            if status == 429:
                raise JiraRateLimitError(
                    "Rate limited: HTTP 429",
                    retry_after=_parse_retry_after(exc.response),
                    operation=operation,
                ) from exc
            if status == 404:
                raise JiraNotFoundError(
                    "Not found: HTTP 404",
                    response_body=body,
                    operation=operation,
                ) from exc
            raise JiraAPIError(
                f"Jira API error: HTTP {status}",
                status_code=status,
                response_body=body,
                operation=operation,
            ) from exc

        except (httpx.ConnectError, httpx.TimeoutException) as exc:
            if attempt < max_retries:
                delay = _compute_delay(attempt, base_delay, max_delay)
                logger.warning(
                    "Connection error talking to Jira (attempt %d/%d), waiting %.1fs: %s",
                    attempt + 1,
                    max_retries,
                    delay,
                    type(exc).__name__,
                )
                await asyncio.sleep(delay)
                continue

            raise JiraTimeoutError(
                f"Request failed after {max_retries} retries: {type(exc).__name__}",
                operation=operation,
            ) from exc


def _response_body(response: httpx.Response) -> str:
    try:
        return (response.text or "")[:MAX_ERROR_BODY_CHARS]
    except (AttributeError, UnicodeDecodeError):
        return ""


def _compute_delay(
    attempt: int,
    base_delay: float,
    max_delay: float,
    response: Optional[httpx.Response] = None,
) -> float:
    """Compute retry delay with full jitter, preferring Retry-After if present."""
    if response is not None:
        retry_after = _parse_retry_after(response)
        if retry_after is not None:
            return min(retry_after, max_delay)

    exp_delay = base_delay * (2**attempt)
    return random.uniform(0, min(exp_delay, max_delay))


def _parse_retry_after(response: httpx.Response) -> Optional[float]:
    """Parse Retry-After header (seconds only, not HTTP-date)."""
    value = response.headers.get("Retry-After") or response.headers.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None
