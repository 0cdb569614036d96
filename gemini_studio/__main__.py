# gemini_studio/__main__.py
"""
Entry point for gemini-studio MCP server.

CRITICAL: Server imports configure_logging() first to prevent stdout pollution.

This module coordinates lifecycle initialization before starting the MCP server.
FastMCP doesn't have built-in lifecycle hooks, so we handle it manually.
"""

import asyncio
import logging

# Import server (which configures logging before anything else)
from gemini_studio.server import initialize_lifecycle, mcp

logger = logging.getLogger(__name__)


async def main() -> None:
    """
    Main entry point.

    Initializes lifecycle (storage + processor + signals) and then runs MCP server.
    """
    lifecycle = await initialize_lifecycle()

    logger.info("Starting MCP server on stdio transport")
    try:
        await mcp.run_stdio_async()
    finally:
        await lifecycle.shutdown(timeout=5.0)


if __name__ == "__main__":
    asyncio.run(main())
