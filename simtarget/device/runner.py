"""Async subprocess execution with explicit timeouts."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from simtarget.models import ProcessError, ProcessTimeoutError

logger = logging.getLogger("simtarget.process")


@dataclass
class ProcessResult:
    stdout: str
    stderr: str
    exit_code: int


async def run(
    command: str,
    *args: str,
    timeout: float | None = None,
    check: bool = True,
) -> ProcessResult:
    """Run ``command`` with ``args`` and collect its output.

    Raises ProcessTimeoutError (after killing the process) when ``timeout``
    seconds elapse, and ProcessError on a non-zero exit when ``check`` is set
    or when the executable cannot be started.
    """
    try:
        proc = await asyncio.create_subprocess_exec(
            command, *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ProcessError(f"{command} could not be started: {e}") from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.wait()
        raise ProcessTimeoutError(f"{command} timed out after {timeout}s")

    result = ProcessResult(
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
        exit_code=proc.returncode,
    )
    if check and result.exit_code != 0:
        raise ProcessError(f"{command} failed ({result.exit_code}): {result.stderr.strip()}")
    return result


async def run_shell(cmd: str, timeout: float | None = None, check: bool = True) -> ProcessResult:
    """Run a shell pipeline via ``sh -c``."""
    return await run("sh", "-c", cmd, timeout=timeout, check=check)
