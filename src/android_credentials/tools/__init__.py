"""
Android credential tools for FastMCP.

Usage:
    from fastmcp import FastMCP
    from android_credentials.tools import register_all_tools

    mcp = FastMCP("my-server")
    register_all_tools(mcp)
"""
from typing import List

from fastmcp import FastMCP

from .keystore_tool import register_tools as register_keystore


def register_all_tools(mcp: FastMCP) -> List[str]:
    """
    Register all android credential tools with a FastMCP server.

    Args:
        mcp: FastMCP server instance

    Returns:
        List of registered tool names
    """
    register_keystore(mcp)

    return [
        "keystore_fingerprints",
        "generate_upload_keystore",
        "export_encrypted_private_key",
    ]


__all__ = ["register_all_tools"]
