"""Jira connector exception types.

The transport raises these from fetch_jira(); tool handlers let them bubble
up to JiraConnector.execute_tool(), which turns them into error text.
User search strategies catch everything except AuthMissingError.
"""

from typing import Optional


class JiraError(Exception):
    """Base exception for all Jira errors."""

    def __init__(self, message: str, operation: str = ""):
        self.message = message
        self.operation = operation
        super().__init__(message)


class AuthMissingError(JiraError):
    """Atlassian credentials are not configured."""

    def __init__(self, operation: str = ""):
        message = "Atlassian credentials are not configured"
        if operation:
            message = f"{message} (required for {operation})"
        super().__init__(message, operation)


class JiraAuthError(JiraError):
    """Jira rejected the credentials (401/403)."""

    pass


class JiraRateLimitError(JiraError):
    """Rate limit exceeded (429). Includes retry_after hint if available."""

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        operation: str = "",
    ):
        self.retry_after = retry_after
        super().__init__(message, operation)


class JiraAPIError(JiraError):
    """Jira returned a non-2xx response."""

    def __init__(
        self,
        message: str,
        status_code: int = 0,
        response_body: str = "",
        operation: str = "",
    ):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, operation)


class JiraNotFoundError(JiraAPIError):
    """Resource not found (404)."""

    def __init__(self, message: str, response_body: str = "", operation: str = ""):
        super().__init__(
            message,
            status_code=404,
            response_body=response_body,
            operation=operation,
        )


class JiraValidationError(JiraError):
    """Invalid input provided to a Jira tool."""

    pass


class JiraTimeoutError(JiraError):
    """Request timed out or the connection failed."""

    pass
