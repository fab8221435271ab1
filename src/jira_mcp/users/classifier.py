"""Shape checks for user identifiers."""

import re

# "557058:..." style prefixed ids, or bare UUID-shaped ids
_ACCOUNT_ID_PREFIX = re.compile(r"[0-9a-f]{1,8}:")
_ACCOUNT_ID_UUID = re.compile(r"[0-9a-f-]{36}")

_EMAIL = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def is_account_id(identifier: str) -> bool:
    """Check if a string already looks like a Jira accountId."""
    return bool(
        _ACCOUNT_ID_PREFIX.match(identifier) or _ACCOUNT_ID_UUID.fullmatch(identifier)
    )


def is_email(identifier: str) -> bool:
    """Check if a string looks like an email address.

    Deliberately loose: anything shaped like local@domain.tld passes.
    """
    return bool(_EMAIL.fullmatch(identifier))
