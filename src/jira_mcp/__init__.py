"""Jira MCP: Jira Cloud tools for MCP clients."""

__version__ = "0.1.0"
