"""One-shot ``lucid`` subprocess runner with a hard wall-clock timeout."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

logger = logging.getLogger(__name__)


class LucidError(Exception):
    """Base class for every way a lucid invocation can fail."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(message)
        self.command = command


class LucidSpawnError(LucidError):
    """The binary could not be started (missing, not executable, NUL in an argument)."""


class LucidTimeoutError(LucidError):
    """The process did not finish within the timeout and was killed."""

    def __init__(self, command: str, timeout: float) -> None:
        super().__init__(command, f"lucid command timed out after {int(timeout * 1000)}ms")
        self.timeout = timeout


class LucidExitError(LucidError):
    """The process exited non-zero."""

    def __init__(self, command: str, returncode: int, stderr: str) -> None:
        super().__init__(command, f"lucid command failed (rc={returncode}): {stderr}")
        self.returncode = returncode
        self.stderr = stderr


async def run_lucid_command(command: str, args: Sequence[str], timeout: float) -> str:
    """Run ``command args...`` (no shell) and return its stdout.

    Output is decoded as UTF-8 with invalid bytes replaced. Raises a
    ``LucidError`` subclass on spawn failure, timeout or non-zero exit.
    """
    logger.debug("Running: %s %s", command, " ".join(args[:1]))

    try:
        process = await asyncio.create_subprocess_exec(
            command,
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except (OSError, ValueError) as e:
        raise LucidSpawnError(command, f"failed to start {command}: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()
        raise LucidTimeoutError(command, timeout) from None

    if process.returncode != 0:
        message = stderr.decode("utf-8", errors="replace").strip()
        raise LucidExitError(command, process.returncode, message)

    return stdout.decode("utf-8", errors="replace")
