"""Credential lookup and authenticated requests against the Jira Cloud REST API."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..config import Settings, get_settings
from .exceptions import AuthMissingError
from .http_client import get_http_client
from .retry import retry_with_backoff

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JiraCredentials:
    """Basic-auth credentials for a Jira Cloud site."""

    site_name: str
    user_email: str
    api_token: str

    @property
    def base_url(self) -> str:
        return f"https://{self.site_name}.atlassian.net"

    def __repr__(self) -> str:
        return f"JiraCredentials(site_name={self.site_name!r}, user_email={self.user_email!r})"


def get_credentials(settings: Optional[Settings] = None) -> Optional[JiraCredentials]:
    """Build credentials from settings, or None if any value is missing."""
    settings = settings or get_settings()
    if not settings.has_credentials():
        logger.debug("Atlassian credentials are not fully configured")
        return None
    return JiraCredentials(
        site_name=settings.atlassian_site_name,
        user_email=settings.atlassian_user_email,
        api_token=settings.atlassian_api_token,
    )


def require_credentials(operation: str = "") -> JiraCredentials:
    """Like get_credentials(), but raise AuthMissingError instead of returning None."""
    credentials = get_credentials()
    if credentials is None:
        raise AuthMissingError(operation)
    return credentials


async def fetch_jira(
    credentials: JiraCredentials,
    path: str,
    method: str = "GET",
    json: Optional[Dict[str, Any]] = None,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    """Send a request to ``credentials.base_url + path`` and return the decoded JSON.

    Returns None for empty responses (e.g. 204 No Content from PUT).
    Non-2xx responses raise the JiraError subclasses from retry_with_backoff().
    """
    url = f"{credentials.base_url}{path}"
    settings = get_settings()

    async def _do_request():
        client = get_http_client()
        response = await client.request(
            method,
            url,
            auth=(credentials.user_email, credentials.api_token),
            json=json,
            params=params,
        )
        response.raise_for_status()
        return response

    logger.debug("%s %s", method, path)
    response = await retry_with_backoff(
        _do_request,
        operation=f"{method} {path.split('?', 1)[0]}",
        max_retries=settings.jira_max_retries,
    )

    if response.status_code == 204 or not response.content:
        return None
    return response.json()
