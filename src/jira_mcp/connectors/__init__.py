"""Jira connector: transport, tool definitions and handlers."""

from .base import BaseConnector
from .exceptions import AuthMissingError, JiraError

__all__ = ["AuthMissingError", "BaseConnector", "JiraError"]
