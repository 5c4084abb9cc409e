"""
Certificate fingerprints for a keystore.

Exports the signing certificate with ``keytool -exportcert`` and derives the
digests app stores and SDKs ask for:

    Google Certificate Fingerprint     SHA-1, colon separated
    Google Certificate Hash (SHA-1)    SHA-1, upper hex
    Google Certificate Hash (SHA-256)  SHA-256, upper hex
    Facebook Key Hash                  SHA-1, base64
"""

from __future__ import annotations

import asyncio
import base64
import hashlib
import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from .config import CredentialsConfig
from .models import (
    CleanupError,
    FingerprintSet,
    ToolExecutionError,
    ToolNotFoundError,
    ToolResult,
)
from .process import ToolInvoker
from .reporting import Reporter, default_reporter

logger = logging.getLogger(__name__)


def colon_separated(hex_digest: str) -> str:
    """Insert a colon after every pair of characters, without a trailing one."""
    return ":".join(hex_digest[i : i + 2] for i in range(0, len(hex_digest), 2))


def fingerprints_from_certificate(data: bytes) -> FingerprintSet:
    """Compute every fingerprint representation of DER certificate bytes."""
    sha1 = hashlib.sha1(data)
    sha1_hex = sha1.hexdigest().upper()
    return FingerprintSet(
        sha1_hex=sha1_hex,
        sha1_hex_colon_separated=colon_separated(sha1_hex),
        sha256_hex=hashlib.sha256(data).hexdigest().upper(),
        sha1_base64=base64.b64encode(sha1.digest()).decode("ascii"),
    )


def report_fingerprints(fingerprints: FingerprintSet, reporter: Reporter) -> None:
    reporter.info(f"Google Certificate Fingerprint:     {fingerprints.sha1_hex_colon_separated}")
    reporter.info(f"Google Certificate Hash (SHA-1):    {fingerprints.sha1_hex}")
    reporter.info(f"Google Certificate Hash (SHA-256):  {fingerprints.sha256_hex}")
    reporter.info(f"Facebook Key Hash:                  {fingerprints.sha1_base64}")


@contextmanager
def scoped_file(path: str | os.PathLike, reporter: Reporter) -> Iterator[Path]:
    """
    Yield ``path`` and remove it on the way out, whatever happened.

    A file that was never created is fine. Any other removal failure is
    reported and does not replace the block's own result or exception.
    """
    path = Path(path)
    try:
        yield path
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            cleanup_error = CleanupError(path, e)
            logger.debug("Cleanup failed", exc_info=cleanup_error)
            reporter.error(str(cleanup_error))


class CertificateFingerprintService:
    """Computes certificate fingerprints of a keystore via keytool."""

    def __init__(
        self,
        invoker: ToolInvoker | None = None,
        config: CredentialsConfig | None = None,
        reporter: Reporter | None = None,
    ):
        self.invoker = invoker or ToolInvoker()
        self.config = config or CredentialsConfig.from_env()
        self.reporter = reporter or default_reporter()

    async def export_certificate(
        self,
        keystore_path: str | os.PathLike,
        keystore_password: str,
        key_alias: str,
        cert_file: str | os.PathLike,
    ) -> ToolResult:
        """Write the DER certificate of ``key_alias`` to ``cert_file``."""
        return await self.invoker.run(
            self.config.keytool,
            [
                "-exportcert",
                "-keystore",
                str(keystore_path),
                "-storepass",
                keystore_password,
                "-alias",
                key_alias,
                "-file",
                str(cert_file),
                "-noprompt",
                "-storetype",
                "JKS",
            ],
            secrets=[keystore_password],
        )

    async def compute_fingerprints(
        self,
        keystore_path: str | os.PathLike,
        keystore_password: str,
        key_alias: str,
    ) -> FingerprintSet:
        """
        Export the certificate of ``key_alias`` and fingerprint it.

        The exported certificate lives next to the keystore as
        ``<keystore_path>.cer`` and is always removed afterwards, so two
        concurrent calls for the same keystore path must not overlap.

        Raises:
            ToolNotFoundError: keytool is not installed or not on PATH
            ToolExecutionError: keytool failed (wrong password, unknown alias, ...)
                or exited cleanly without writing the certificate
        """
        with scoped_file(f"{keystore_path}.cer", self.reporter) as cert_file:
            try:
                await self.export_certificate(keystore_path, keystore_password, key_alias, cert_file)
            except ToolExecutionError as e:
                self._report_failure(e)
                raise

            loop = asyncio.get_running_loop()
            try:
                data = await loop.run_in_executor(None, cert_file.read_bytes)
            except OSError as e:
                # keytool exited 0 but left no readable certificate behind
                raise ToolExecutionError(
                    f"keytool did not write a certificate to {cert_file}: {e.strerror or e}",
                    exit_code=0,
                ) from e

        return fingerprints_from_certificate(data)

    async def log_keystore_hashes(
        self,
        keystore_path: str | os.PathLike,
        keystore_password: str,
        key_alias: str,
    ) -> FingerprintSet:
        """Compute the fingerprints and report them."""
        fingerprints = await self.compute_fingerprints(keystore_path, keystore_password, key_alias)
        report_fingerprints(fingerprints, self.reporter)
        return fingerprints

    def _report_failure(self, error: ToolExecutionError) -> None:
        if isinstance(error, ToolNotFoundError):
            self.reporter.warning(f"Are you sure you have {error.executable} installed?")
            self.reporter.info("keytool is part of openJDK: http://openjdk.java.net/")
            self.reporter.info("Also make sure that keytool is in your PATH after installation.")
        if error.stdout:
            self.reporter.info(error.stdout)
        if error.stderr:
            self.reporter.error(error.stderr)
