"""Jira user payloads as returned by the user search endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserRecord(BaseModel):
    """A Jira user candidate. Unknown vendor fields are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    account_id: Optional[str] = Field(default=None, alias="accountId")
    account_type: Optional[str] = Field(default=None, alias="accountType")
    email_address: Optional[str] = Field(default=None, alias="emailAddress")
    name: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    active: Optional[bool] = None

    def matches(self, identifier: str) -> bool:
        """True if email, login name or display name equals identifier, ignoring case."""
        wanted = identifier.lower()
        return any(
            value is not None and value.lower() == wanted
            for value in (self.email_address, self.name, self.display_name)
        )
