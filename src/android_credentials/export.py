"""
Encrypted private key export for Google Play App Signing.

Runs Google's PEPK tool, which reads the keystore and key passwords from the
console and writes the private key encrypted with Play's public key.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import httpx

from .config import CredentialsConfig
from .download import ensure_tool
from .models import KeyExportError, ProcessError, ToolExecutionError
from .reporting import Reporter, default_reporter
from .session import InteractiveToolSession, PasswordExchange, SessionFactory

logger = logging.getLogger(__name__)


class PrivateKeyExportService:
    """Exports a keystore's private key in PEPK's encrypted format."""

    def __init__(
        self,
        config: CredentialsConfig | None = None,
        reporter: Reporter | None = None,
        session_factory: SessionFactory | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.config = config or CredentialsConfig.from_env()
        self.reporter = reporter or default_reporter()
        self.session_factory = session_factory or InteractiveToolSession.open
        self.http_client = http_client

    async def ensure_pepk(self) -> Path:
        """Download the PEPK jar into the tool cache unless it is already there."""
        return await ensure_tool(
            self.config.pepk_path,
            self.config.pepk_url,
            reporter=self.reporter,
            timeout=self.config.download_timeout,
            client=self.http_client,
        )

    async def export_encrypted_key(
        self,
        keystore_path: str | os.PathLike,
        keystore_password: str,
        key_alias: str,
        key_password: str,
        encryption_key: str,
        output_path: str | os.PathLike,
    ) -> Path:
        """
        Export and encrypt the private key of ``key_alias``.

        Args:
            keystore_path: Keystore holding the key
            keystore_password: Password of the keystore
            key_alias: Alias of the key entry
            key_password: Password of the key entry
            encryption_key: Public encryption key shown in the Play Console
            output_path: Where the encrypted key is written

        Returns:
            ``output_path``; the file is the caller's from here on

        Raises:
            ToolDownloadError: The PEPK jar could not be fetched
            KeyExportError: The PEPK tool failed to start or exited non-zero
        """
        output_path = Path(output_path)
        pepk_path = await self.ensure_pepk()

        args = [
            "-jar",
            str(pepk_path),
            "--keystore",
            str(keystore_path),
            "--alias",
            key_alias,
            "--output",
            str(output_path),
            "--encryptionkey",
            encryption_key,
        ]

        try:
            session = await self.session_factory(self.config.java, args, dict(os.environ))
            exchange = PasswordExchange(session)
            exchange.send_store_password(keystore_password)
            exchange.send_key_password(key_password)
            await exchange.finish()
        except ToolExecutionError as e:
            raise KeyExportError(e.exit_code) from e
        except ProcessError as e:
            self.reporter.error(str(e))
            raise KeyExportError(None, f"PEPK tool failed to start: {e}") from e
        except OSError as e:
            raise KeyExportError(None, f"Lost the PEPK tool session: {e.strerror or e}") from e

        self.reporter.info(f"Exported and encrypted private app signing key to file {output_path}")
        return output_path
