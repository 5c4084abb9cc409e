"""Shared fakes and fixtures for the android_credentials tests."""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

import pytest

from android_credentials.config import CredentialsConfig
from android_credentials.models import ToolExecutionError, ToolResult


class RecordingReporter:
    """Reporter that keeps every message, by level."""

    def __init__(self):
        self.infos: list[str] = []
        self.warnings: list[str] = []
        self.errors: list[str] = []

    def info(self, message: str) -> None:
        self.infos.append(message)

    def warning(self, message: str) -> None:
        self.warnings.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)

    @property
    def text(self) -> str:
        return "\n".join(self.infos + self.warnings + self.errors)


class FakeInvoker:
    """
    Stands in for ToolInvoker.

    ``behavior`` receives (executable, args) and may write files or raise.
    """

    def __init__(self, behavior: Callable[[str, list[str]], None] | None = None):
        self.behavior = behavior
        self.calls: list[dict] = []

    async def run(self, executable: str, args: Sequence[str], secrets=()) -> ToolResult:
        args = list(args)
        self.calls.append({"executable": executable, "args": args, "secrets": list(secrets)})
        if self.behavior is not None:
            self.behavior(executable, args)
        return ToolResult(executable=executable, args=args, exit_code=0)


class FakeProcess:
    """Minimal asyncio.subprocess.Process replacement for sessions."""

    def __init__(self, returncode: int = 0):
        self.pid = 4242
        self.returncode = returncode
        self.stdin = None

    async def wait(self) -> int:
        return self.returncode


class FakeSession:
    """Interactive session that records lines instead of typing them."""

    def __init__(self, exit_code: int = 0):
        self.exit_code = exit_code
        self.lines: list[str] = []
        self.waited = False

    def write_line(self, value: str) -> None:
        self.lines.append(value)

    async def wait(self) -> None:
        self.waited = True
        if self.exit_code != 0:
            raise ToolExecutionError(
                f"java exited with code {self.exit_code}", exit_code=self.exit_code
            )


class FakeSessionFactory:
    """Records how sessions were opened and hands out a FakeSession."""

    def __init__(self, session: FakeSession | None = None, error: Exception | None = None):
        self.session = session or FakeSession()
        self.error = error
        self.calls: list[dict] = []

    async def __call__(self, executable, args, env=None) -> FakeSession:
        self.calls.append({"executable": executable, "args": list(args), "env": env})
        if self.error is not None:
            raise self.error
        return self.session


def write_cert_to_file_arg(cert: bytes) -> Callable[[str, list[str]], None]:
    """Behavior for FakeInvoker that mimics keytool -exportcert."""

    def behavior(executable: str, args: list[str]) -> None:
        if "-exportcert" in args:
            Path(args[args.index("-file") + 1]).write_bytes(cert)

    return behavior


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def config(tmp_path: Path) -> CredentialsConfig:
    """Config with an isolated tool cache directory."""
    return CredentialsConfig(home=tmp_path / "home", keytool="keytool", java="java")


@pytest.fixture
def fake_invoker() -> FakeInvoker:
    return FakeInvoker()


@pytest.fixture
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def pepk_jar(config: CredentialsConfig) -> Path:
    """A cached PEPK jar so no download is attempted."""
    config.home.mkdir(parents=True, exist_ok=True)
    config.pepk_path.write_bytes(b"PK\x03\x04 fake jar")
    return config.pepk_path


@pytest.fixture
def cleanup_env(monkeypatch):
    for name in (
        "ANDROID_CREDENTIALS_HOME",
        "KEYTOOL_PATH",
        "JAVA_PATH",
        "PEPK_DOWNLOAD_URL",
        "PEPK_DOWNLOAD_TIMEOUT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


Opener = Callable[[str, Sequence[str], dict | None], Awaitable[object]]


def pipe_session_factory(fds: dict, returncode: int = 0) -> Opener:
    """
    Session factory whose sessions write into an os.pipe instead of a pty.

    The read end is stored in ``fds["read"]`` so tests can inspect the exact
    bytes typed into the session.
    """
    from android_credentials.session import InteractiveToolSession

    async def open_session(executable, args, env=None):
        read_fd, write_fd = os.pipe()
        fds["read"] = read_fd
        fds["args"] = list(args)
        return InteractiveToolSession(FakeProcess(returncode), executable, write_fd)

    return open_session
