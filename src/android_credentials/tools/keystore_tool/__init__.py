"""
Keystore Tool - Fingerprint, generate and export Android signing keystores.

Requires a JDK on PATH.
"""

from .keystore_tool import register_tools

__all__ = ["register_tools"]
