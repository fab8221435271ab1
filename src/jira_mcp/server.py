"""MCP server exposing the Jira connector over stdio."""

import asyncio
import logging
import uuid
from typing import Any, Dict, List, Optional

from mcp import types
from mcp.server import Server

from .config import get_settings
from .connectors.http_client import close_http_client
from .connectors.jira import JiraConnector
from .observability.logging import clear_log_context, configure_logging, set_log_context

logger = logging.getLogger(__name__)


class JiraMCPServer:
    """Registers JiraConnector tools with an MCP ``Server``."""

    def __init__(self, connector: Optional[JiraConnector] = None):
        self.connector = connector or JiraConnector()
        self.server = Server("jira-mcp")
        self._tool_names: Optional[set] = None
        self._setup_handlers()

    def _setup_handlers(self):
        """Set up MCP protocol handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> List[types.Tool]:
            return await self.list_tools()

        @self.server.call_tool()
        async def handle_call_tool(
            name: str, arguments: Optional[Dict[str, Any]] = None
        ) -> List[types.TextContent]:
            return await self.call_tool(name, arguments)

    async def list_tools(self) -> List[types.Tool]:
        tools = await self.connector.get_tools()
        self._tool_names = {tool.name for tool in tools}
        logger.debug("Returning %d tools", len(tools))
        return tools

    async def _resolve_tool_target(self, name: str) -> Optional[str]:
        """Map a public tool name to the connector action, or None if unknown."""
        if self._tool_names is None:
            await self.list_tools()
        if name not in self._tool_names:
            return None
        return self.connector.strip_prefix(name)

    async def call_tool(
        self, name: str, arguments: Optional[Dict[str, Any]] = None
    ) -> List[types.TextContent]:
        """Handle a tool call and wrap the result as text content."""
        if not arguments:
            arguments = {}

        action = await self._resolve_tool_target(name)
        if action is None:
            return [types.TextContent(type="text", text=f"Unknown tool: {name}")]

        set_log_context(tool_name=name, request_id=uuid.uuid4().hex[:8])
        logger.info("Tool call: %s", name)
        try:
            result = await self.connector.execute_tool(action, arguments)
            return [types.TextContent(type="text", text=result)]
        except Exception as e:
            logger.exception("Tool execution failed: %s", name)
            return [types.TextContent(type="text", text=f"Error executing tool: {e}")]
        finally:
            clear_log_context()

    async def run_stdio(self):
        """Serve MCP over stdin/stdout until the client disconnects."""
        from mcp.server.stdio import stdio_server

        try:
            async with stdio_server() as (read_stream, write_stream):
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await close_http_client()


def main():
    """Console entry point."""
    settings = get_settings()
    configure_logging(
        environment=settings.environment,
        log_level=settings.effective_log_level(),
    )

    if not settings.has_credentials():
        logger.warning(
            "ATLASSIAN_SITE_NAME, ATLASSIAN_USER_EMAIL and ATLASSIAN_API_TOKEN are not all set; "
            "tool calls will fail until they are configured"
        )

    logger.info("Starting %s %s", settings.app_name, settings.app_version)
    asyncio.run(JiraMCPServer().run_stdio())


if __name__ == "__main__":
    main()
