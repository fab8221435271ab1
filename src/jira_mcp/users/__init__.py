"""User identifier resolution."""

from .cache import UserCache
from .classifier import is_account_id, is_email
from .models import UserRecord
from .resolver import (
    SearchStrategy,
    UserResolver,
    clear_user_cache,
    default_resolver,
    resolve_user_identifier,
)
from .search import SearchResult, search_users, search_users_with_picker

__all__ = [
    "SearchResult",
    "SearchStrategy",
    "UserCache",
    "UserRecord",
    "UserResolver",
    "clear_user_cache",
    "default_resolver",
    "is_account_id",
    "is_email",
    "resolve_user_identifier",
    "search_users",
    "search_users_with_picker",
]
