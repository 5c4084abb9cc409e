#!/usr/bin/env python3
"""
Android Credentials MCP Server

Exposes the keystore tools via Model Context Protocol using FastMCP.

Usage:
    # Run with HTTP transport (default)
    python mcp_server.py

    # Run with custom port
    python mcp_server.py --port 8001

    # Run with STDIO transport (for local testing)
    python mcp_server.py --stdio

Environment Variables:
    MCP_PORT                  - Server port (default: 4002)
    KEYTOOL_PATH / JAVA_PATH  - JDK executables (default: from PATH)
    ANDROID_CREDENTIALS_HOME  - Tool cache directory for the PEPK jar
"""
import argparse
import logging
import os

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from android_credentials.tools import register_all_tools

logger = logging.getLogger("android_credentials.mcp")

mcp = FastMCP("android-credentials")

tools = register_all_tools(mcp)


@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> PlainTextResponse:
    """Health check endpoint for container orchestration."""
    return PlainTextResponse("OK")


def main() -> None:
    """Entry point for the MCP server."""
    parser = argparse.ArgumentParser(description="Android Credentials MCP Server")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.getenv("MCP_PORT", "4002")),
        help="HTTP server port (default: 4002)",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="HTTP server host (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--stdio",
        action="store_true",
        help="Use STDIO transport instead of HTTP",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper())
    logger.info("Registered %d tools: %s", len(tools), tools)

    if args.stdio:
        logger.info("Starting with STDIO transport")
        mcp.run(transport="stdio")
    else:
        logger.info("Starting HTTP server on %s:%s", args.host, args.port)
        mcp.run(transport="http", host=args.host, port=args.port)


if __name__ == "__main__":
    main()
