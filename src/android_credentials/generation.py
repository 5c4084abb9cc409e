"""Upload keystore generation with keytool."""

from __future__ import annotations

import base64
import logging
import os
import uuid
from pathlib import Path

from .config import CredentialsConfig
from .models import KeystoreSecrets, ToolExecutionError, ToolResult
from .process import ToolInvoker
from .reporting import Reporter, default_reporter

logger = logging.getLogger(__name__)

KEY_ALGORITHM = "RSA"
KEY_SIZE = 2048
VALIDITY_DAYS = 10000


def distinguished_name(android_package_id: str) -> str:
    return f"CN={android_package_id},OU=,O=,L=,S=,C=US"


def generate_keystore_secrets(app_name: str) -> KeystoreSecrets:
    """Fresh random passwords; the alias is derived from the app name."""
    return KeystoreSecrets(
        keystore_password=uuid.uuid4().hex,
        key_password=uuid.uuid4().hex,
        key_alias=base64.b64encode(app_name.encode("utf-8")).decode("ascii"),
    )


class KeystoreGenerationService:
    """Creates new keystores with keytool -genkey."""

    def __init__(
        self,
        invoker: ToolInvoker | None = None,
        config: CredentialsConfig | None = None,
        reporter: Reporter | None = None,
    ):
        self.invoker = invoker or ToolInvoker()
        self.config = config or CredentialsConfig.from_env()
        self.reporter = reporter or default_reporter()

    async def create_keystore(
        self,
        keystore_path: str | os.PathLike,
        secrets: KeystoreSecrets,
        android_package_id: str,
    ) -> ToolResult:
        """Run keytool to create ``keystore_path`` protected by ``secrets``."""
        store_password = secrets.keystore_password.get_secret_value()
        key_password = secrets.key_password.get_secret_value()
        return await self.invoker.run(
            self.config.keytool,
            [
                "-genkey",
                "-v",
                "-storepass",
                store_password,
                "-keypass",
                key_password,
                "-keystore",
                str(keystore_path),
                "-alias",
                secrets.key_alias,
                "-keyalg",
                KEY_ALGORITHM,
                "-keysize",
                str(KEY_SIZE),
                "-validity",
                str(VALIDITY_DAYS),
                "-dname",
                distinguished_name(android_package_id),
            ],
            secrets=[store_password, key_password],
        )

    async def create_upload_keystore(
        self,
        output_path: str | os.PathLike,
        android_package_id: str,
        app_name: str,
    ) -> KeystoreSecrets:
        """
        Generate a new upload keystore at ``output_path``.

        Returns:
            The generated keystore password, key password and key alias

        Raises:
            ToolExecutionError: keytool is missing or failed; any partial
                keystore it left behind is removed
        """
        output_path = Path(output_path)
        secrets = generate_keystore_secrets(app_name)
        self.reporter.info(f"Generating upload keystore for {android_package_id} at {output_path}")

        existed = output_path.exists()
        try:
            await self.create_keystore(output_path, secrets, android_package_id)
        except ToolExecutionError:
            if not existed:
                try:
                    output_path.unlink()
                except FileNotFoundError:
                    pass
                except OSError as e:
                    logger.warning("Could not remove partial keystore %s: %s", output_path, e)
            raise

        logger.debug("Created keystore %s with alias %s", output_path, secrets.key_alias)
        return secrets
