"""Run external ecosystem tools."""

import asyncio
from pathlib import Path

from .errors import ToolInvocationError


async def run_tool(command: list[str], cwd: Path | str | None = None, timeout: float = 30.0) -> str:
    """Run a command and return its standard output.

    Args:
        command: Executable and arguments
        cwd: Working directory for the command
        timeout: Seconds to wait before the process is killed

    Returns:
        Decoded standard output

    Raises:
        ToolInvocationError: if the command can not be started, exits
            non-zero or does not finish within the timeout
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            *command,
            cwd=str(cwd) if cwd is not None else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ToolInvocationError(command, str(e)) from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise ToolInvocationError(command, f"timed out after {timeout:g}s")
    except asyncio.CancelledError:
        proc.kill()
        await proc.wait()
        raise

    if proc.returncode != 0:
        detail = stderr.decode("utf-8", errors="replace").strip()
        raise ToolInvocationError(command, f"exit {proc.returncode}: {detail}")

    return stdout.decode("utf-8", errors="replace")
