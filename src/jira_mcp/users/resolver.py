"""Resolve emails, usernames and display names to Jira accountIds."""

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Sequence

from ..connectors.exceptions import AuthMissingError
from ..connectors.transport import JiraCredentials, get_credentials
from . import search
from .cache import UserCache
from .classifier import is_account_id, is_email
from .models import UserRecord
from .search import SearchResult

logger = logging.getLogger(__name__)

SearchFn = Callable[[str, JiraCredentials], Awaitable[SearchResult]]
CredentialsProvider = Callable[[], Optional[JiraCredentials]]


def _always(identifier: str) -> bool:
    return True


@dataclass(frozen=True)
class SearchStrategy:
    """One link of the fallback chain."""

    name: str
    search: SearchFn
    applies: Callable[[str], bool] = _always


def default_strategies() -> List[SearchStrategy]:
    """Picker for emails, then directory search, then picker as a last resort."""
    return [
        SearchStrategy("picker", search.search_users_with_picker, applies=is_email),
        SearchStrategy("directory", search.search_users),
        SearchStrategy("picker-fallback", search.search_users_with_picker),
    ]


def choose_user(users: Sequence[UserRecord], identifier: str) -> Optional[UserRecord]:
    """Prefer an exact (case-insensitive) email/name/display name match, else the first user."""
    if not users:
        return None
    for user in users:
        if user.matches(identifier):
            return user
    return users[0]


def _credentials_from_settings() -> Optional[JiraCredentials]:
    return get_credentials()


class UserResolver:
    """Turns a caller-supplied user identifier into an accountId.

    Owns its UserCache. Nothing is cached unless a candidate with a
    non-empty accountId was found.
    """

    def __init__(
        self,
        cache: Optional[UserCache] = None,
        strategies: Optional[Sequence[SearchStrategy]] = None,
        credentials_provider: Optional[CredentialsProvider] = None,
    ):
        self.cache = cache if cache is not None else UserCache()
        self.strategies = list(strategies) if strategies is not None else default_strategies()
        self._credentials_provider = credentials_provider or _credentials_from_settings

    async def resolve(self, identifier: str) -> Optional[str]:
        """Resolve an identifier (email, username, display name or accountId).

        Returns None when no user matches. Raises AuthMissingError when a
        search is needed but credentials are not configured.
        """
        if not identifier:
            return None

        if is_account_id(identifier):
            logger.debug("Identifier is already an accountId: %s", identifier)
            return identifier

        cached = self.cache.get(identifier)
        if cached is not None:
            return cached

        logger.debug("Resolving user identifier: %s", identifier)

        credentials = self._credentials_provider()
        if credentials is None:
            raise AuthMissingError("user search")

        users = await self._search(identifier, credentials)
        user = choose_user(users, identifier)

        if user is not None and user.account_id:
            self.cache.set(identifier, user.account_id)
            logger.debug("Resolved to accountId: %s", user.account_id)
            return user.account_id

        logger.warning("Could not resolve user identifier: %s", identifier)
        return None

    async def _search(self, identifier: str, credentials: JiraCredentials) -> List[UserRecord]:
        # First strategy with a non-empty candidate list wins
        for strategy in self.strategies:
            if not strategy.applies(identifier):
                continue
            result = await strategy.search(identifier, credentials)
            if result.has_candidates:
                logger.debug(
                    "Strategy %s returned %d candidates", strategy.name, len(result.candidates)
                )
                return result.candidates
            if not result.ok:
                logger.debug("Strategy %s failed, falling back", strategy.name)
        return []

    def clear_cache(self):
        self.cache.clear()


default_resolver = UserResolver()


async def resolve_user_identifier(identifier: str) -> Optional[str]:
    """Resolve an identifier with the process-wide resolver."""
    return await default_resolver.resolve(identifier)


def clear_user_cache():
    """Drop every cached identifier -> accountId mapping."""
    default_resolver.clear_cache()
