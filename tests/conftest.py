"""Test configuration and fixtures."""

import os

import pytest

# Set test environment variables BEFORE importing the package
os.environ["ENVIRONMENT"] = "test"
for _var in ("ATLASSIAN_SITE_NAME", "ATLASSIAN_USER_EMAIL", "ATLASSIAN_API_TOKEN"):
    os.environ.pop(_var, None)

from jira_mcp.config import get_settings
from jira_mcp.connectors.transport import JiraCredentials
from jira_mcp.users import clear_user_cache


@pytest.fixture(autouse=True)
def isolate_state():
    """Reset cached settings and the process-wide user cache around each test."""
    get_settings.cache_clear()
    clear_user_cache()
    yield
    clear_user_cache()
    get_settings.cache_clear()


@pytest.fixture
def credentials() -> JiraCredentials:
    """Credentials for a fake Jira site."""
    return JiraCredentials(
        site_name="test",
        user_email="admin@example.com",
        api_token="test-token",
    )


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
