"""
ToolInvoker - run external command-line tools without blocking the event loop.

Usage:
    invoker = ToolInvoker()
    result = await invoker.run("keytool", ["-list", "-keystore", path], secrets=[password])
    print(result.stdout)
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from collections.abc import Iterable, Sequence

from .models import ToolExecutionError, ToolNotFoundError, ToolResult

logger = logging.getLogger(__name__)

REDACTED = "******"


def render_command(executable: str, args: Sequence[str], secrets: Iterable[str] = ()) -> str:
    """Render a command line for messages, masking any secret arguments."""
    hidden = {s for s in secrets if s}
    parts = [executable, *(REDACTED if arg in hidden else arg for arg in args)]
    return shlex.join(parts)


class ToolInvoker:
    """Runs a tool to completion and captures its output."""

    def __init__(self, encoding: str = "utf-8"):
        self._encoding = encoding

    async def run(
        self,
        executable: str,
        args: Sequence[str],
        secrets: Iterable[str] = (),
    ) -> ToolResult:
        """
        Run ``executable`` with ``args`` and wait for it to exit.

        Args:
            executable: Program name or path
            args: Arguments, passed without a shell
            secrets: Argument values to mask in logs and error messages

        Returns:
            ToolResult with exit code and decoded output

        Raises:
            ToolNotFoundError: The executable does not exist
            ToolExecutionError: The process could not start or exited non-zero
        """
        args = list(args)
        hidden = {s for s in secrets if s}
        command = render_command(executable, args, hidden)
        logger.debug("Running %s", command)

        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(executable, command=command) from e
        except OSError as e:
            raise ToolExecutionError(
                f"Could not start {executable}: {e.strerror or e}", command=command
            ) from e

        out, err = await proc.communicate()
        result = ToolResult(
            executable=executable,
            args=[REDACTED if arg in hidden else arg for arg in args],
            exit_code=proc.returncode,
            stdout=out.decode(self._encoding, errors="replace"),
            stderr=err.decode(self._encoding, errors="replace"),
        )

        if result.exit_code != 0:
            raise ToolExecutionError(
                f"{executable} exited with code {result.exit_code}",
                command=command,
                exit_code=result.exit_code,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        return result
