"""
Keystore Tool - Android signing keystore operations over MCP.

Supports:
- Certificate fingerprints of an existing keystore
- Upload keystore generation
- PEPK encrypted private key export

Requires a JDK (keytool, java) on PATH or configured via KEYTOOL_PATH / JAVA_PATH.
"""

from __future__ import annotations

from typing import Any

from fastmcp import FastMCP

from android_credentials.config import CredentialsConfig
from android_credentials.export import PrivateKeyExportService
from android_credentials.fingerprints import CertificateFingerprintService
from android_credentials.generation import KeystoreGenerationService
from android_credentials.models import (
    AndroidCredentialsError,
    KeyExportError,
    ToolDownloadError,
    ToolExecutionError,
    ToolNotFoundError,
)
from android_credentials.process import ToolInvoker
from android_credentials.reporting import NullReporter, Reporter
from android_credentials.session import SessionFactory

JDK_HELP = "keytool and java are part of openJDK: http://openjdk.java.net/ - make sure they are on PATH"


def _tool_error(e: ToolExecutionError) -> dict[str, Any]:
    if isinstance(e, ToolNotFoundError):
        return {"error": f"{e.executable} not found", "help": JDK_HELP}
    result: dict[str, Any] = {"error": str(e), "exit_code": e.exit_code}
    if e.stderr:
        result["stderr"] = e.stderr
    return result


def register_tools(
    mcp: FastMCP,
    config: CredentialsConfig | None = None,
    invoker: ToolInvoker | None = None,
    session_factory: SessionFactory | None = None,
    reporter: Reporter | None = None,
) -> None:
    """Register keystore tools with the MCP server."""
    # stdout belongs to the MCP transport
    reporter = reporter or NullReporter()

    def _config() -> CredentialsConfig:
        return config or CredentialsConfig.from_env()

    @mcp.tool()
    async def keystore_fingerprints(
        keystore_path: str,
        keystore_password: str,
        key_alias: str,
    ) -> dict:
        """
        Compute the certificate fingerprints of a keystore entry.

        Use when registering an Android app with Google APIs or Facebook,
        which ask for the signing certificate's SHA-1/SHA-256 or key hash.

        Args:
            keystore_path: Path to the JKS keystore
            keystore_password: Keystore password
            key_alias: Alias of the key entry

        Returns:
            Dict with sha1, sha1_colon, sha256 and facebook_key_hash, or error dict
        """
        service = CertificateFingerprintService(invoker=invoker, config=_config(), reporter=reporter)
        try:
            fp = await service.compute_fingerprints(keystore_path, keystore_password, key_alias)
        except ToolExecutionError as e:
            return _tool_error(e)
        except AndroidCredentialsError as e:
            return {"error": str(e)}

        return {
            "keystore_path": keystore_path,
            "sha1": fp.sha1_hex,
            "sha1_colon": fp.sha1_hex_colon_separated,
            "sha256": fp.sha256_hex,
            "facebook_key_hash": fp.sha1_base64,
        }

    @mcp.tool()
    async def generate_upload_keystore(
        output_path: str,
        android_package_id: str,
        app_name: str,
        reveal_secrets: bool = False,
    ) -> dict:
        """
        Create a new upload keystore with random passwords.

        Args:
            output_path: Where to write the keystore
            android_package_id: Android package, used as the certificate CN
            app_name: App name, used to derive the key alias
            reveal_secrets: Include the generated passwords in the result

        Returns:
            Dict with output_path and key_alias (and passwords if requested), or error dict
        """
        service = KeystoreGenerationService(invoker=invoker, config=_config(), reporter=reporter)
        try:
            secrets = await service.create_upload_keystore(output_path, android_package_id, app_name)
        except ToolExecutionError as e:
            return _tool_error(e)

        if reveal_secrets:
            return {"output_path": output_path, **secrets.revealed()}
        return {
            "output_path": output_path,
            "key_alias": secrets.key_alias,
            "secrets_hidden": True,
        }

    @mcp.tool()
    async def export_encrypted_private_key(
        keystore_path: str,
        keystore_password: str,
        key_alias: str,
        key_password: str,
        encryption_key: str,
        output_path: str,
    ) -> dict:
        """
        Export a keystore's private key encrypted for Google Play App Signing.

        Downloads Google's PEPK tool on first use.

        Args:
            keystore_path: Path to the keystore
            keystore_password: Keystore password
            key_alias: Alias of the key entry
            key_password: Key password
            encryption_key: Encryption public key from the Play Console
            output_path: Where to write the encrypted key

        Returns:
            Dict with output_path, or error dict
        """
        service = PrivateKeyExportService(
            config=_config(), reporter=reporter, session_factory=session_factory
        )
        try:
            path = await service.export_encrypted_key(
                keystore_path,
                keystore_password,
                key_alias,
                key_password,
                encryption_key,
                output_path,
            )
        except ToolDownloadError as e:
            return {"error": str(e), "url": e.url}
        except KeyExportError as e:
            return {"error": str(e), "exit_code": e.exit_code}

        return {"output_path": str(path)}
