"""Tests for retry_with_backoff and supporting functions."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from jira_mcp.connectors.exceptions import (
    JiraAPIError,
    JiraAuthError,
    JiraNotFoundError,
    JiraRateLimitError,
    JiraTimeoutError,
)
from jira_mcp.connectors.retry import _compute_delay, _parse_retry_after, retry_with_backoff

pytestmark = pytest.mark.asyncio


def _make_http_error(status_code: int, retry_after=None, text=None) -> httpx.HTTPStatusError:
    """Build a mock httpx.HTTPStatusError with the given status code."""
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    response.text = text if text is not None else f"Error {status_code}"
    response.headers = {"Retry-After": str(retry_after)} if retry_after else {}
    request = MagicMock(spec=httpx.Request)
    return httpx.HTTPStatusError(f"{status_code}", request=request, response=response)


@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_success_no_retry(mock_sleep):
    fn = AsyncMock(return_value="ok")

    assert await retry_with_backoff(fn, max_retries=3) == "ok"
    assert fn.await_count == 1
    mock_sleep.assert_not_awaited()


@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_retry_on_503_then_success(mock_sleep):
    fn = AsyncMock(side_effect=[_make_http_error(503), "ok"])

    assert await retry_with_backoff(fn, max_retries=3, base_delay=0.01) == "ok"
    assert fn.await_count == 2
    assert mock_sleep.await_count == 1


@pytest.mark.parametrize("status", [401, 403])
@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_auth_errors_not_retried(mock_sleep, status):
    fn = AsyncMock(side_effect=_make_http_error(status))

    with pytest.raises(JiraAuthError, match="Authentication failed"):
        await retry_with_backoff(fn, operation="GET /rest/api/3/myself", max_retries=3)

    assert fn.await_count == 1
    mock_sleep.assert_not_awaited()


@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_404_raises_not_found_with_body(mock_sleep):
    fn = AsyncMock(side_effect=_make_http_error(404, text='{"errorMessages":["Issue does not exist"]}'))

    with pytest.raises(JiraNotFoundError) as exc_info:
        await retry_with_backoff(fn, operation="GET /rest/api/3/issue/X-1")

    assert exc_info.value.status_code == 404
    assert "Issue does not exist" in exc_info.value.response_body
    assert exc_info.value.operation == "GET /rest/api/3/issue/X-1"
    assert fn.await_count == 1


@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_400_not_retried(mock_sleep):
    fn = AsyncMock(side_effect=_make_http_error(400))

    with pytest.raises(JiraAPIError) as exc_info:
        await retry_with_backoff(fn, max_retries=3)

    assert exc_info.value.status_code == 400
    assert fn.await_count == 1


@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_500_exhausts_retries(mock_sleep):
    fn = AsyncMock(side_effect=_make_http_error(500))

    with pytest.raises(JiraAPIError, match="HTTP 500"):
        await retry_with_backoff(fn, max_retries=2, base_delay=0.01)

    assert fn.await_count == 3
    assert mock_sleep.await_count == 2


@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_429_exhausts_retries_and_keeps_retry_after(mock_sleep):
    fn = AsyncMock(side_effect=_make_http_error(429, retry_after=60))

    with pytest.raises(JiraRateLimitError) as exc_info:
        await retry_with_backoff(fn, max_retries=1, base_delay=0.01)

    assert exc_info.value.retry_after == 60.0
    assert fn.await_count == 2


@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_connect_error_retried_then_timeout_error(mock_sleep):
    fn = AsyncMock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(JiraTimeoutError, match="ConnectError"):
        await retry_with_backoff(fn, max_retries=2, base_delay=0.01)

    assert fn.await_count == 3


@patch("jira_mcp.connectors.retry.asyncio.sleep", new_callable=AsyncMock)
async def test_zero_retries_makes_single_attempt(mock_sleep):
    fn = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

    with pytest.raises(JiraTimeoutError):
        await retry_with_backoff(fn, max_retries=0)

    assert fn.await_count == 1
    mock_sleep.assert_not_awaited()


async def test_retry_after_header_caps_delay():
    response = MagicMock(spec=httpx.Response)
    response.headers = {"Retry-After": "120"}

    assert _parse_retry_after(response) == 120.0
    assert _compute_delay(0, 1.0, 30.0, response) == 30.0


async def test_unparseable_retry_after():
    response = MagicMock(spec=httpx.Response)
    response.headers = {"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}

    assert _parse_retry_after(response) is None


async def test_jittered_delay_bounds():
    for attempt in range(5):
        delay = _compute_delay(attempt, 1.0, 10.0)
        assert 0 <= delay <= min(10.0, 2 ** attempt)
