"""Materialize a stored keystore on local disk."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
import os
import tempfile
from pathlib import Path

from .credential_service import CredentialService
from .models import (
    CredentialError,
    CredentialIdentity,
    CredentialNotFoundError,
    KeystoreSecrets,
)
from .reporting import Colors, Reporter, default_reporter

logger = logging.getLogger(__name__)


def format_keystore_credentials(secrets: KeystoreSecrets, title: str = "Keystore credentials") -> str:
    """Plain-text block with all three values. Only for explicit display."""
    values = secrets.revealed()
    return (
        f"{title}\n"
        f"    Keystore password: {Colors.bold(values['keystore_password'])}\n"
        f"    Key alias:         {Colors.bold(values['key_alias'])}\n"
        f"    Key password:      {Colors.bold(values['key_password'])}\n"
    )


def log_keystore_credentials(
    secrets: KeystoreSecrets,
    reporter: Reporter,
    title: str = "Keystore credentials",
) -> None:
    reporter.info(format_keystore_credentials(secrets, title))


def write_bytes_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to a temp file beside ``path`` and rename it into place."""
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class KeystoreBackupService:
    """
    Fetches a credential record and writes its keystore to disk.

    The written keystore belongs to the caller, who is responsible for
    deleting it once done.
    """

    def __init__(
        self,
        credential_service: CredentialService,
        reporter: Reporter | None = None,
    ):
        self.credential_service = credential_service
        self.reporter = reporter or default_reporter()

    async def backup(
        self,
        identity: CredentialIdentity,
        output_path: str | os.PathLike,
        reveal_secrets: bool = False,
    ) -> KeystoreSecrets:
        """
        Write the stored keystore for ``identity`` to ``output_path``.

        Args:
            identity: Which credentials to fetch
            output_path: Destination keystore file
            reveal_secrets: Also report the passwords and alias to the operator

        Returns:
            The keystore password, key password and key alias. Always
            returned; ``reveal_secrets`` only controls reporting.

        Raises:
            CredentialNotFoundError: No record exists for ``identity``
            CredentialError: The stored keystore is not valid base64
        """
        output_path = Path(output_path)
        self.reporter.info(f"Retrieving Android keystore for {identity.experience_name}")

        record = await self.credential_service.get_credentials_for_platform(identity)
        if record is None:
            raise CredentialNotFoundError(identity)

        try:
            keystore_bytes = base64.b64decode(record.keystore, validate=True)
        except binascii.Error as e:
            raise CredentialError(
                f"Stored keystore for {identity.experience_name} is not valid base64"
            ) from e

        self.reporter.info(f"Writing keystore to {output_path}...")
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, write_bytes_atomic, output_path, keystore_bytes)
        logger.debug("Wrote %d bytes to %s", len(keystore_bytes), output_path)

        secrets = KeystoreSecrets(
            keystore_password=record.keystore_password,
            key_password=record.key_password,
            key_alias=record.keystore_alias,
        )

        if reveal_secrets:
            self.reporter.info("Done writing keystore to disk.")
            log_keystore_credentials(secrets, self.reporter, "Save these important values as well:")
            self.reporter.info("Keystore saved!")
        return secrets
