"""
Data models and exceptions for Android signing credentials.

Secret values (keystore and key passwords) are held as ``SecretStr`` so they
never show up in ``repr()``, log records, or exception messages.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, SecretStr

# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class CredentialIdentity(BaseModel):
    """Lookup key for a stored credential record."""

    model_config = ConfigDict(frozen=True)

    username: str
    experience_name: str
    platform: str = "android"


class CredentialRecord(BaseModel):
    """
    Stored signing credentials for one app.

    Attributes:
        identity: Who/what the record belongs to
        keystore: The keystore file, base64 encoded
        keystore_password: Password protecting the keystore
        key_password: Password protecting the key entry
        keystore_alias: Alias of the key entry inside the keystore
    """

    model_config = ConfigDict(frozen=True)

    identity: CredentialIdentity
    keystore: str
    keystore_password: SecretStr
    key_password: SecretStr
    keystore_alias: str


class KeystoreSecrets(BaseModel):
    """The three values needed to use a keystore."""

    model_config = ConfigDict(frozen=True)

    keystore_password: SecretStr
    key_password: SecretStr
    key_alias: str

    def revealed(self) -> dict[str, str]:
        """Plain-text view, for callers that explicitly asked to see the secrets."""
        return {
            "keystore_password": self.keystore_password.get_secret_value(),
            "key_password": self.key_password.get_secret_value(),
            "key_alias": self.key_alias,
        }


class FingerprintSet(BaseModel):
    """Digests of a signing certificate. Safe to log."""

    model_config = ConfigDict(frozen=True)

    sha1_hex: str
    sha1_hex_colon_separated: str
    sha256_hex: str
    sha1_base64: str


class ToolResult(BaseModel):
    """Outcome of a finished external tool run."""

    executable: str
    args: list[str] = Field(default_factory=list)
    exit_code: int
    stdout: str = ""
    stderr: str = ""


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class AndroidCredentialsError(Exception):
    """Base exception for all android credential operations."""


class CredentialError(AndroidCredentialsError):
    """A credential record is missing or unusable."""


class CredentialNotFoundError(CredentialError):
    """No credential record exists for the requested identity."""

    def __init__(self, identity: CredentialIdentity):
        self.identity = identity
        super().__init__(
            "Unable to fetch credentials for this project. Are you sure they exist? "
            f"(experience={identity.experience_name}, platform={identity.platform})"
        )


class ToolError(AndroidCredentialsError):
    """Base for failures of external tools."""


class ToolExecutionError(ToolError):
    """
    An external tool could not run or exited non-zero.

    Attributes:
        command: Rendered command line with secret arguments masked
        exit_code: Process exit code, or None if it never ran
        stdout: Captured standard output
        stderr: Captured standard error
    """

    def __init__(
        self,
        message: str,
        *,
        command: str = "",
        exit_code: int | None = None,
        stdout: str = "",
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class ToolNotFoundError(ToolExecutionError):
    """The executable does not exist or is not on PATH."""

    def __init__(self, executable: str, *, command: str = ""):
        super().__init__(f"Executable not found: {executable}", command=command)
        self.executable = executable


class ProcessError(ToolError):
    """A child process could not be spawned."""


class ToolDownloadError(ToolError):
    """Fetching a tool binary failed."""

    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to download {url}: {reason}")
        self.url = url
        self.reason = reason


class KeyExportError(AndroidCredentialsError):
    """The PEPK tool failed to export the private key."""

    def __init__(self, exit_code: int | None, message: str | None = None):
        super().__init__(message or f"PEPK tool failed with return code {exit_code}")
        self.exit_code = exit_code


class CleanupError(AndroidCredentialsError):
    """A temporary file could not be removed. Reported, never raised to callers."""

    def __init__(self, path: str | Path, cause: OSError):
        super().__init__(f"Could not remove {path}: {cause.strerror or cause}")
        self.path = Path(path)
        self.cause = cause


class SessionProtocolError(AndroidCredentialsError):
    """Inputs were sent to an interactive session out of order."""
