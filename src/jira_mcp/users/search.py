"""User search strategies against the Jira REST API.

Each strategy returns a SearchResult. Transport and payload failures are
logged and reported through SearchResult.failure so the resolver can fall
through to the next strategy; they are never raised.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from ..connectors.exceptions import JiraError
from ..connectors.transport import JiraCredentials, fetch_jira
from .models import UserRecord

logger = logging.getLogger(__name__)

# Vendor-side cap on candidates per search call
SEARCH_MAX_RESULTS = 10


@dataclass
class SearchResult:
    """Outcome of one strategy call: candidates, or the failure that prevented a search."""

    candidates: List[UserRecord] = field(default_factory=list)
    failure: Optional[Exception] = None

    @classmethod
    def failed(cls, exc: Exception) -> "SearchResult":
        return cls(failure=exc)

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def has_candidates(self) -> bool:
        return self.ok and bool(self.candidates)


def _parse_users(payload: Any) -> List[UserRecord]:
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of users, got {type(payload).__name__}")
    return [UserRecord.model_validate(item) for item in payload]


async def search_users_with_picker(query: str, credentials: JiraCredentials) -> SearchResult:
    """Search with the group/user picker endpoint.

    Works without "Browse users and groups" permission and is the more
    reliable endpoint for email queries.
    """
    path = (
        f"/rest/api/3/groupuserpicker?query={quote(query, safe='')}"
        f"&maxResults={SEARCH_MAX_RESULTS}&showAvatar=false"
    )
    logger.debug("Searching users with picker for: %s", query)

    try:
        response = await fetch_jira(credentials, path)
        if not isinstance(response, dict):
            raise ValueError(f"Expected a picker object, got {type(response).__name__}")
        users_section = response.get("users")
        if not isinstance(users_section, dict):
            logger.debug("Picker response has no users section")
            return SearchResult()
        users = _parse_users(users_section.get("users", []))
    except (JiraError, httpx.HTTPError, ValidationError, ValueError) as exc:
        logger.error("Failed to search users with picker: %s", exc)
        return SearchResult.failed(exc)

    logger.debug("Found %d users", len(users))
    return SearchResult(candidates=users)


async def search_users(query: str, credentials: JiraCredentials) -> SearchResult:
    """Search with the user directory endpoint.

    Requires "Browse users and groups" permission; best for usernames and
    display names.
    """
    path = f"/rest/api/3/user/search?query={quote(query, safe='')}&maxResults={SEARCH_MAX_RESULTS}"
    logger.debug("Searching users for: %s", query)

    try:
        users = _parse_users(await fetch_jira(credentials, path))
    except (JiraError, httpx.HTTPError, ValidationError, ValueError) as exc:
        logger.error("Failed to search users: %s", exc)
        return SearchResult.failed(exc)

    logger.debug("Found %d users", len(users))
    return SearchResult(candidates=users)
