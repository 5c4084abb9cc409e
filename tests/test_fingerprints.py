"""Tests for CertificateFingerprintService."""

import base64
import hashlib
import re
from pathlib import Path

import pytest

from conftest import FakeInvoker, write_cert_to_file_arg
from android_credentials.fingerprints import (
    CertificateFingerprintService,
    colon_separated,
    fingerprints_from_certificate,
    report_fingerprints,
    scoped_file,
)
from android_credentials.models import ToolExecutionError, ToolNotFoundError

CERT = b"0\x82\x03\x0f0\x82\x01\xf7\xa0\x03\x02\x01\x02 not really DER but bytes are bytes"


@pytest.fixture
def keystore(tmp_path: Path) -> Path:
    """A keystore file on disk."""
    path = tmp_path / "upload.jks"
    path.write_bytes(b"keystore")
    return path


def _service(invoker, config, reporter) -> CertificateFingerprintService:
    return CertificateFingerprintService(invoker=invoker, config=config, reporter=reporter)


class TestFingerprintMath:
    """Tests for the digest helpers."""

    def test_colon_separated(self):
        """Pairs are joined by colons with no trailing separator."""
        assert colon_separated("AABBCC") == "AA:BB:CC"
        assert colon_separated("ABC") == "AB:C"
        assert colon_separated("") == ""

    def test_digests_match_hashlib(self):
        """Digests agree with hashlib and base64 directly."""
        fp = fingerprints_from_certificate(CERT)

        assert fp.sha1_hex == hashlib.sha1(CERT).hexdigest().upper()
        assert fp.sha256_hex == hashlib.sha256(CERT).hexdigest().upper()
        assert fp.sha1_base64 == base64.b64encode(hashlib.sha1(CERT).digest()).decode()

    @pytest.mark.parametrize("data", [b"", b"x", CERT, bytes(range(256)) * 4])
    def test_sha1_shapes(self, data):
        """Every input yields 40 hex SHA-1 chars with 19 colons and 64 hex SHA-256 chars."""
        fp = fingerprints_from_certificate(data)

        assert re.fullmatch(r"[0-9A-F]{40}", fp.sha1_hex)
        assert fp.sha1_hex_colon_separated.count(":") == 19
        assert not fp.sha1_hex_colon_separated.endswith(":")
        assert fp.sha1_hex_colon_separated.replace(":", "") == fp.sha1_hex
        assert re.fullmatch(r"[0-9A-F]{64}", fp.sha256_hex)

    def test_fingerprint_set_is_frozen(self):
        """FingerprintSet cannot be mutated."""
        fp = fingerprints_from_certificate(CERT)
        with pytest.raises(Exception):
            fp.sha1_hex = "nope"


class TestComputeFingerprints:
    """Tests for CertificateFingerprintService.compute_fingerprints."""

    @pytest.mark.asyncio
    async def test_returns_fingerprints_and_removes_cert(self, keystore, config, reporter):
        """Fingerprints are returned and the exported certificate is removed."""
        invoker = FakeInvoker(write_cert_to_file_arg(CERT))

        fp = await _service(invoker, config, reporter).compute_fingerprints(keystore, "storepw", "alias")

        assert fp == fingerprints_from_certificate(CERT)
        assert not Path(f"{keystore}.cer").exists()

    @pytest.mark.asyncio
    async def test_keytool_invocation(self, keystore, config, reporter):
        """keytool gets the exportcert flags and the password is marked secret."""
        invoker = FakeInvoker(write_cert_to_file_arg(CERT))

        await _service(invoker, config, reporter).compute_fingerprints(keystore, "storepw", "alias")

        call = invoker.calls[0]
        assert call["executable"] == "keytool"
        assert call["args"] == [
            "-exportcert",
            "-keystore",
            str(keystore),
            "-storepass",
            "storepw",
            "-alias",
            "alias",
            "-file",
            f"{keystore}.cer",
            "-noprompt",
            "-storetype",
            "JKS",
        ]
        assert call["secrets"] == ["storepw"]

    @pytest.mark.asyncio
    async def test_failed_export_cleans_up_and_surfaces_output(self, keystore, config, reporter):
        """A failed export removes the certificate and reports stdout and stderr."""

        def fail_after_writing(executable, args):
            write_cert_to_file_arg(CERT)(executable, args)
            raise ToolExecutionError(
                "keytool exited with code 1",
                exit_code=1,
                stdout="keytool error: java.io.IOException",
                stderr="Keystore was tampered with, or password was incorrect",
            )

        service = _service(FakeInvoker(fail_after_writing), config, reporter)

        with pytest.raises(ToolExecutionError) as exc_info:
            await service.compute_fingerprints(keystore, "storepw", "alias")

        assert exc_info.value.exit_code == 1
        assert not Path(f"{keystore}.cer").exists()
        assert "keytool error: java.io.IOException" in reporter.infos
        assert "Keystore was tampered with, or password was incorrect" in reporter.errors

    @pytest.mark.asyncio
    async def test_missing_keytool_gives_install_guidance(self, keystore, config, reporter):
        """Missing keytool warns and points at openJDK and PATH."""

        def missing(executable, args):
            raise ToolNotFoundError(executable)

        service = _service(FakeInvoker(missing), config, reporter)

        with pytest.raises(ToolNotFoundError):
            await service.compute_fingerprints(keystore, "storepw", "alias")

        assert any("keytool installed" in w for w in reporter.warnings)
        assert any("openJDK" in m for m in reporter.infos)
        assert any("PATH" in m for m in reporter.infos)
        assert not Path(f"{keystore}.cer").exists()

    @pytest.mark.asyncio
    async def test_clean_exit_without_certificate_raises_tool_error(
        self, keystore, config, reporter
    ):
        """keytool exiting 0 without writing the certificate is a tool error."""
        service = _service(FakeInvoker(), config, reporter)

        with pytest.raises(ToolExecutionError) as exc_info:
            await service.compute_fingerprints(keystore, "storepw", "alias")

        assert exc_info.value.exit_code == 0
        assert "did not write a certificate" in str(exc_info.value)
        assert "storepw" not in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    @pytest.mark.asyncio
    async def test_cleanup_error_does_not_override_result(
        self, keystore, config, reporter, monkeypatch
    ):
        """A failed removal is reported but the fingerprints still come back."""
        invoker = FakeInvoker(write_cert_to_file_arg(CERT))
        cert_path = Path(f"{keystore}.cer")
        original_unlink = Path.unlink

        def locked_unlink(self, missing_ok=False):
            if self == cert_path:
                raise PermissionError(13, "Permission denied")
            return original_unlink(self, missing_ok=missing_ok)

        monkeypatch.setattr(Path, "unlink", locked_unlink)

        fp = await _service(invoker, config, reporter).compute_fingerprints(keystore, "storepw", "alias")

        assert fp.sha1_hex == hashlib.sha1(CERT).hexdigest().upper()
        assert any("Could not remove" in e for e in reporter.errors)

    @pytest.mark.asyncio
    async def test_password_never_reported(self, keystore, config, reporter):
        """The keystore password never reaches the reporter."""

        def fail(executable, args):
            raise ToolExecutionError("keytool exited with code 1", exit_code=1, stderr="bad")

        with pytest.raises(ToolExecutionError):
            await _service(FakeInvoker(fail), config, reporter).compute_fingerprints(
                keystore, "storepw-secret", "alias"
            )

        assert "storepw-secret" not in reporter.text

    @pytest.mark.asyncio
    async def test_distinct_keystores_use_distinct_cert_paths(self, tmp_path, config, reporter):
        """Each keystore exports to its own certificate path."""
        invoker = FakeInvoker(write_cert_to_file_arg(CERT))
        service = _service(invoker, config, reporter)

        await service.compute_fingerprints(tmp_path / "a.jks", "pw", "alias")
        await service.compute_fingerprints(tmp_path / "b.jks", "pw", "alias")

        cert_files = [c["args"][c["args"].index("-file") + 1] for c in invoker.calls]
        assert cert_files == [f"{tmp_path / 'a.jks'}.cer", f"{tmp_path / 'b.jks'}.cer"]


class TestReporting:
    """Tests for fingerprint reporting."""

    def test_report_fingerprints_labels(self, reporter):
        """Four labelled lines are reported in a fixed order."""
        fp = fingerprints_from_certificate(CERT)

        report_fingerprints(fp, reporter)

        assert len(reporter.infos) == 4
        assert reporter.infos[0].startswith("Google Certificate Fingerprint:")
        assert reporter.infos[0].endswith(fp.sha1_hex_colon_separated)
        assert reporter.infos[1].endswith(fp.sha1_hex)
        assert reporter.infos[2].endswith(fp.sha256_hex)
        assert reporter.infos[3].startswith("Facebook Key Hash:")

    @pytest.mark.asyncio
    async def test_log_keystore_hashes(self, keystore, config, reporter):
        """log_keystore_hashes reports what it computes."""
        invoker = FakeInvoker(write_cert_to_file_arg(CERT))

        fp = await _service(invoker, config, reporter).log_keystore_hashes(keystore, "pw", "alias")

        assert fp.sha256_hex in reporter.text


class TestScopedFile:
    """Tests for scoped_file cleanup."""

    def test_missing_file_is_fine(self, tmp_path, reporter):
        """A file that was never created is not an error."""
        with scoped_file(tmp_path / "never-created", reporter):
            pass
        assert reporter.errors == []

    def test_removes_file_on_exception(self, tmp_path, reporter):
        """The file is removed even when the block raises."""
        target = tmp_path / "scratch"
        with pytest.raises(RuntimeError):
            with scoped_file(target, reporter) as path:
                path.write_text("x")
                raise RuntimeError("boom")
        assert not target.exists()
