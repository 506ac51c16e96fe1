"""Tests for the lucid subprocess runner."""

import asyncio
import sys

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from lucidmem.lucid.process import (
    LucidError,
    LucidExitError,
    LucidSpawnError,
    LucidTimeoutError,
    run_lucid_command,
)

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell")


class MockProcess:
    """Mock asyncio.subprocess.Process with canned output."""

    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0, hang: bool = False):
        self._stdout = stdout
        self._stderr = stderr
        self._final_rc = returncode
        self._hang = hang
        self.returncode = None
        self.pid = 4242
        self.kill = MagicMock()

    async def communicate(self):
        if self._hang:
            await asyncio.sleep(10)
        self.returncode = self._final_rc
        return self._stdout, self._stderr

    async def wait(self):
        self.returncode = -9 if self._hang else self._final_rc
        return self.returncode


class TestRunLucidCommandMocked:
    @pytest.mark.asyncio
    async def test_success_returns_stdout(self):
        proc = MockProcess(stdout=b"<lucid-context>\n</lucid-context>\n")
        with patch(
            "lucidmem.lucid.process.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ) as spawn:
            out = await run_lucid_command("lucid", ["context", "auth"], timeout=1.0)

        assert out.startswith("<lucid-context>")
        args = spawn.call_args[0]
        assert args == ("lucid", "context", "auth")

    @pytest.mark.asyncio
    async def test_invalid_utf8_is_replaced(self):
        proc = MockProcess(stdout=b"ok \xff\xfe done")
        with patch(
            "lucidmem.lucid.process.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ):
            out = await run_lucid_command("lucid", [], timeout=1.0)
        assert out.startswith("ok ")
        assert out.endswith(" done")
        assert "�" in out

    @pytest.mark.asyncio
    async def test_nonzero_exit(self):
        proc = MockProcess(stderr=b"simulated lucid failure\n", returncode=1)
        with patch(
            "lucidmem.lucid.process.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ):
            with pytest.raises(LucidExitError) as exc_info:
                await run_lucid_command("lucid", ["context", "x"], timeout=1.0)

        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "simulated lucid failure"
        assert exc_info.value.command == "lucid"

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        proc = MockProcess(hang=True)
        with patch(
            "lucidmem.lucid.process.asyncio.create_subprocess_exec",
            AsyncMock(return_value=proc),
        ):
            with pytest.raises(LucidTimeoutError, match="timed out after 50ms"):
                await run_lucid_command("lucid", ["context", "x"], timeout=0.05)

        proc.kill.assert_called_once()

    @pytest.mark.asyncio
    async def test_spawn_failure(self):
        with patch(
            "lucidmem.lucid.process.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=PermissionError("denied")),
        ):
            with pytest.raises(LucidSpawnError, match="denied"):
                await run_lucid_command("lucid", [], timeout=1.0)

    @pytest.mark.asyncio
    async def test_nul_in_argument_is_spawn_failure(self):
        with patch(
            "lucidmem.lucid.process.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=ValueError("embedded null byte")),
        ):
            with pytest.raises(LucidSpawnError, match="embedded null byte"):
                await run_lucid_command("lucid", ["context", "auth\0x"], timeout=1.0)

    def test_error_hierarchy(self):
        for cls in (LucidSpawnError, LucidTimeoutError, LucidExitError):
            assert issubclass(cls, LucidError)


class TestRunLucidCommandReal:
    @pytest.mark.asyncio
    async def test_missing_binary(self):
        with pytest.raises(LucidSpawnError):
            await run_lucid_command("nonexistent-lucid-binary-xyz", ["context", "q"], timeout=1.0)

    @posix_only
    @pytest.mark.asyncio
    async def test_args_are_not_shell_interpreted(self):
        out = await run_lucid_command("echo", ["$HOME; rm -rf /"], timeout=2.0)
        assert out.strip() == "$HOME; rm -rf /"

    @posix_only
    @pytest.mark.asyncio
    async def test_real_timeout(self):
        with pytest.raises(LucidTimeoutError):
            await run_lucid_command("sleep", ["5"], timeout=0.1)

    @posix_only
    @pytest.mark.asyncio
    async def test_real_nonzero_exit(self):
        with pytest.raises(LucidExitError) as exc_info:
            await run_lucid_command("sh", ["-c", "echo boom >&2; exit 3"], timeout=2.0)
        assert exc_info.value.returncode == 3
        assert exc_info.value.stderr == "boom"

    @posix_only
    @pytest.mark.asyncio
    async def test_real_nul_in_argument(self):
        with pytest.raises(LucidSpawnError):
            await run_lucid_command("true", ["store", "a\0b"], timeout=2.0)
