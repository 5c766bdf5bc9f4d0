"""MCP server exposing the site metadata lookup as a tool."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict

from mcp.server.fastmcp import FastMCP

from .client import get_site_meta
from .config import ExtractionConfig

logger = logging.getLogger("sitemeta.mcp")
logger.setLevel(logging.ERROR)

mcp = FastMCP(name="sitemeta")


@mcp.tool()
async def site_meta(url: str) -> Dict[str, str]:
    """Return title, description, preview image and URL for a web page."""
    config = ExtractionConfig.from_env()
    # Playwright's sync API refuses to run on an active event loop.
    meta = await asyncio.to_thread(get_site_meta, url, config)
    return meta.to_dict()


def main() -> None:
    """Entry point for running the MCP server."""
    logging.basicConfig(level=logging.ERROR)
    mcp.run()


if __name__ == "__main__":
    main()
