"""
Configuration for android credential tooling.

Everything is read from environment variables with sensible defaults:

    ANDROID_CREDENTIALS_HOME  -> tool cache directory (default ~/.android-credentials)
    KEYTOOL_PATH              -> keytool executable
    JAVA_PATH                 -> java executable (runs the PEPK jar)
    PEPK_DOWNLOAD_URL         -> where the PEPK jar is fetched from
    PEPK_DOWNLOAD_TIMEOUT     -> download timeout in seconds
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import BaseModel

DEFAULT_HOME = Path.home() / ".android-credentials"
PEPK_JAR_NAME = "android_tools_pepk.jar"
PEPK_DOWNLOAD_URL = "https://www.gstatic.com/play-apps-publisher-rapid/signing-tool/prod/pepk.jar"

KEYTOOL_EXECUTABLE = "keytool.exe" if sys.platform == "win32" else "keytool"
JAVA_EXECUTABLE = "java.exe" if sys.platform == "win32" else "java"


def get_env_var(
    name: str,
    default: str | None = None,
    required: bool = False,
) -> str | None:
    """
    Get an environment variable with optional default and required validation.

    Args:
        name: Name of the environment variable
        default: Default value if not set
        required: If True, raises ValueError when not set and no default

    Returns:
        The environment variable value or default

    Raises:
        ValueError: If required=True and variable is not set with no default
    """
    value = os.environ.get(name, default)
    if required and value is None:
        raise ValueError(
            f"Required environment variable '{name}' is not set. "
            f"Please set it before using this tool."
        )
    return value


class CredentialsConfig(BaseModel):
    """Resolved settings shared by the keystore services."""

    home: Path = DEFAULT_HOME
    keytool: str = KEYTOOL_EXECUTABLE
    java: str = JAVA_EXECUTABLE
    pepk_url: str = PEPK_DOWNLOAD_URL
    download_timeout: float = 60.0

    @property
    def pepk_path(self) -> Path:
        """Local cache location of the PEPK jar."""
        return self.home / PEPK_JAR_NAME

    @classmethod
    def from_env(cls) -> CredentialsConfig:
        """Build a config from environment variables, falling back to defaults."""
        home = get_env_var("ANDROID_CREDENTIALS_HOME")
        timeout = get_env_var("PEPK_DOWNLOAD_TIMEOUT", "60")
        return cls(
            home=Path(home).expanduser() if home else DEFAULT_HOME,
            keytool=get_env_var("KEYTOOL_PATH", KEYTOOL_EXECUTABLE),
            java=get_env_var("JAVA_PATH", JAVA_EXECUTABLE),
            pepk_url=get_env_var("PEPK_DOWNLOAD_URL", PEPK_DOWNLOAD_URL),
            download_timeout=float(timeout),
        )
