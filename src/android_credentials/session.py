"""
Interactive tool sessions over a pseudo-terminal.

Some tools (the PEPK jar among them) read passwords from the console only and
refuse piped stdin or command-line arguments. InteractiveToolSession starts
such a tool on a pty and lets the caller type lines into it.

PasswordExchange drives the keystore-password / key-password prompt sequence
as a small state machine:

    SPAWNED -> STORE_PASSWORD_SENT -> KEY_PASSWORD_SENT -> EXITED

Usage:
    session = await InteractiveToolSession.open("java", ["-jar", jar, ...])
    exchange = PasswordExchange(session)
    exchange.send_store_password(store_pw)
    exchange.send_key_password(key_pw)
    await exchange.finish()
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
from collections.abc import Awaitable, Callable, Mapping, Sequence
from enum import Enum
from typing import Protocol

from .models import ProcessError, SessionProtocolError, ToolExecutionError

if sys.platform != "win32":
    import pty

logger = logging.getLogger(__name__)

NEWLINE = "\r\n" if sys.platform == "win32" else "\n"


class InteractiveSession(Protocol):
    """What PasswordExchange needs from a session."""

    def write_line(self, value: str) -> None: ...

    async def wait(self) -> None: ...


SessionFactory = Callable[
    [str, Sequence[str], Mapping[str, str] | None], Awaitable[InteractiveSession]
]


class InteractiveToolSession:
    """
    A running child process attached to a pseudo-terminal.

    Terminal output is read and dropped: with echo still on, it can contain
    the lines that were written in.
    """

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        executable: str,
        master_fd: int | None = None,
    ):
        self._process = process
        self._executable = executable
        self._master_fd = master_fd
        self._closed = False
        if master_fd is not None:
            os.set_blocking(master_fd, False)
            asyncio.get_running_loop().add_reader(master_fd, self._drain)

    @classmethod
    async def open(
        cls,
        executable: str,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: str | os.PathLike | None = None,
    ) -> InteractiveToolSession:
        """
        Spawn ``executable`` with its stdio bound to a new pty.

        Raises:
            ProcessError: The child could not be spawned
        """
        env = dict(env) if env is not None else None
        if sys.platform == "win32":
            # No pty on Windows; the tool gets a plain pipe.
            try:
                proc = await asyncio.create_subprocess_exec(
                    executable,
                    *args,
                    stdin=asyncio.subprocess.PIPE,
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.DEVNULL,
                    env=env,
                    cwd=cwd,
                )
            except OSError as e:
                raise ProcessError(f"Could not start {executable}: {e.strerror or e}") from e
            return cls(proc, executable)

        master_fd, slave_fd = pty.openpty()
        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                *args,
                stdin=slave_fd,
                stdout=slave_fd,
                stderr=slave_fd,
                env=env,
                cwd=cwd,
                start_new_session=True,
            )
        except OSError as e:
            os.close(master_fd)
            raise ProcessError(f"Could not start {executable}: {e.strerror or e}") from e
        finally:
            os.close(slave_fd)

        logger.debug("Started %s (pid %s) on a pty", executable, proc.pid)
        return cls(proc, executable, master_fd)

    @property
    def pid(self) -> int:
        return self._process.pid

    def write_line(self, value: str) -> None:
        """Type ``value`` followed by the platform line terminator."""
        if self._closed:
            raise ProcessError(f"{self._executable} session is already closed")
        data = (value + NEWLINE).encode()
        if self._master_fd is not None:
            os.write(self._master_fd, data)
        else:
            self._process.stdin.write(data)

    async def wait(self) -> None:
        """
        Wait for the child to exit.

        Raises:
            ToolExecutionError: The child exited with a non-zero code
        """
        if self._master_fd is None and self._process.stdin is not None:
            self._process.stdin.close()
        try:
            exit_code = await self._process.wait()
        finally:
            self._close()

        if exit_code != 0:
            raise ToolExecutionError(
                f"{self._executable} exited with code {exit_code}",
                exit_code=exit_code,
            )

    def _drain(self) -> None:
        try:
            data = os.read(self._master_fd, 4096)
        except BlockingIOError:
            return
        except OSError:
            # EIO once the child side of the pty is gone
            data = b""
        if not data:
            self._stop_reading()

    def _stop_reading(self) -> None:
        if self._master_fd is not None and not self._closed:
            asyncio.get_running_loop().remove_reader(self._master_fd)

    def _close(self) -> None:
        if self._closed:
            return
        self._stop_reading()
        self._closed = True
        if self._master_fd is not None:
            os.close(self._master_fd)


class SessionState(Enum):
    SPAWNED = "spawned"
    STORE_PASSWORD_SENT = "store_password_sent"
    KEY_PASSWORD_SENT = "key_password_sent"
    EXITED = "exited"


_NEXT_STATE = {
    SessionState.SPAWNED: SessionState.STORE_PASSWORD_SENT,
    SessionState.STORE_PASSWORD_SENT: SessionState.KEY_PASSWORD_SENT,
    SessionState.KEY_PASSWORD_SENT: SessionState.EXITED,
}


class PasswordExchange:
    """Keystore password, then key password, then exit. Nothing else is allowed."""

    def __init__(self, session: InteractiveSession):
        self.session = session
        self.state = SessionState.SPAWNED
        self.history: list[SessionState] = [SessionState.SPAWNED]

    def send_store_password(self, password: str) -> None:
        self._advance(SessionState.STORE_PASSWORD_SENT)
        self.session.write_line(password)

    def send_key_password(self, password: str) -> None:
        self._advance(SessionState.KEY_PASSWORD_SENT)
        self.session.write_line(password)

    async def finish(self) -> None:
        """Wait for the tool to exit. Raises whatever the session raises."""
        self._check(SessionState.EXITED)
        try:
            await self.session.wait()
        finally:
            self.state = SessionState.EXITED
            self.history.append(SessionState.EXITED)

    def _check(self, target: SessionState) -> None:
        if _NEXT_STATE.get(self.state) is not target:
            raise SessionProtocolError(
                f"Cannot move from {self.state.value} to {target.value}"
            )

    def _advance(self, target: SessionState) -> None:
        self._check(target)
        self.state = target
        self.history.append(target)
