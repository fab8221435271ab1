"""Tests for the picker and directory user search strategies."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from jira_mcp.connectors.exceptions import AuthMissingError, JiraAPIError, JiraAuthError
from jira_mcp.users import SearchResult, UserRecord, search_users, search_users_with_picker

pytestmark = pytest.mark.asyncio

PICKER_RESPONSE = {
    "users": {
        "users": [
            {
                "accountId": "557058:user-id-123",
                "emailAddress": "john.doe@example.com",
                "displayName": "John Doe",
                "active": True,
                "avatarUrl": "https://example.com/a.png",
            },
        ],
        "total": 1,
    },
    "groups": {"groups": [], "total": 0},
}


@patch("jira_mcp.users.search.fetch_jira", new_callable=AsyncMock)
async def test_picker_builds_encoded_request(mock_fetch, credentials):
    mock_fetch.return_value = PICKER_RESPONSE

    result = await search_users_with_picker("john.doe@example.com", credentials)

    mock_fetch.assert_awaited_once_with(
        credentials,
        "/rest/api/3/groupuserpicker?query=john.doe%40example.com&maxResults=10&showAvatar=false",
    )
    assert result.ok
    assert result.candidates == [
        UserRecord(
            account_id="557058:user-id-123",
            email_address="john.doe@example.com",
            display_name="John Doe",
            active=True,
        )
    ]


@patch("jira_mcp.users.search.fetch_jira", new_callable=AsyncMock)
async def test_picker_without_users_section_is_empty_not_failed(mock_fetch, credentials):
    mock_fetch.return_value = {"groups": {"groups": [], "total": 0}}

    result = await search_users_with_picker("john", credentials)

    assert result.ok
    assert result.candidates == []
    assert not result.has_candidates


@patch("jira_mcp.users.search.fetch_jira", new_callable=AsyncMock)
async def test_picker_network_error_becomes_failed_result(mock_fetch, credentials):
    error = httpx.ConnectError("Network error")
    mock_fetch.side_effect = error

    result = await search_users_with_picker("john.doe@example.com", credentials)

    assert not result.ok
    assert result.failure is error
    assert result.candidates == []


@patch("jira_mcp.users.search.fetch_jira", new_callable=AsyncMock)
async def test_picker_malformed_payload_becomes_failed_result(mock_fetch, credentials):
    mock_fetch.return_value = ["not", "an", "object"]

    result = await search_users_with_picker("john", credentials)

    assert not result.ok
    assert isinstance(result.failure, ValueError)


@patch("jira_mcp.users.search.fetch_jira", new_callable=AsyncMock)
async def test_directory_builds_encoded_request(mock_fetch, credentials):
    mock_fetch.return_value = [
        {
            "accountId": "557058:user-id-123",
            "emailAddress": "john.doe@example.com",
            "displayName": "John Doe",
            "name": "johndoe",
            "active": True,
        },
    ]

    result = await search_users("John Doe", credentials)

    mock_fetch.assert_awaited_once_with(
        credentials,
        "/rest/api/3/user/search?query=John%20Doe&maxResults=10",
    )
    assert result.has_candidates
    assert result.candidates[0].name == "johndoe"
    assert result.candidates[0].account_id == "557058:user-id-123"


@patch("jira_mcp.users.search.fetch_jira", new_callable=AsyncMock)
async def test_directory_permission_denied_becomes_failed_result(mock_fetch, credentials):
    mock_fetch.side_effect = JiraAuthError("Authentication failed: HTTP 403")

    result = await search_users("johndoe", credentials)

    assert not result.ok
    assert isinstance(result.failure, JiraAuthError)


@patch("jira_mcp.users.search.fetch_jira", new_callable=AsyncMock)
async def test_directory_api_error_becomes_failed_result(mock_fetch, credentials):
    mock_fetch.side_effect = JiraAPIError("Jira API error: HTTP 500", status_code=500)

    result = await search_users("johndoe", credentials)

    assert not result.ok


@patch("jira_mcp.users.search.fetch_jira", new_callable=AsyncMock)
async def test_auth_missing_from_transport_becomes_failed_result(mock_fetch, credentials):
    mock_fetch.side_effect = AuthMissingError("user search")

    directory = await search_users("johndoe", credentials)
    picker = await search_users_with_picker("johndoe", credentials)

    assert isinstance(directory.failure, AuthMissingError)
    assert isinstance(picker.failure, AuthMissingError)


async def test_search_result_helpers():
    assert SearchResult().ok
    assert not SearchResult().has_candidates
    assert SearchResult(candidates=[UserRecord(account_id="x")]).has_candidates
    failed = SearchResult.failed(RuntimeError("boom"))
    assert not failed.ok
    assert not failed.has_candidates
