"""Base connector interface."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List

from mcp import types

logger = logging.getLogger(__name__)


class BaseConnector(ABC):
    """Base class for tool connectors."""

    def __init__(self):
        self._name = self.__class__.__name__.lower().replace("connector", "")

    @property
    def name(self) -> str:
        """Connector name, also used as the tool name prefix."""
        return self._name

    @property
    def tool_prefix(self) -> str:
        return f"{self.name}_"

    @property
    @abstractmethod
    def display_name(self) -> str:
        """Human-readable display name."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Connector description."""
        pass

    @abstractmethod
    async def get_tools(self) -> List[types.Tool]:
        """Get available tools for this connector."""
        pass

    @abstractmethod
    async def execute_tool(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """Execute a tool action (tool name without the connector prefix)."""
        pass

    def strip_prefix(self, tool_name: str) -> str:
        """Map a public tool name like ``jira_get_issue`` to its action ``get_issue``."""
        if tool_name.startswith(self.tool_prefix):
            return tool_name[len(self.tool_prefix):]
        return tool_name
